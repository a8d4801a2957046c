from typing import Any, Generic, Optional, Sequence, Type, TypeVar
from sqlalchemy import delete
from sqlmodel import SQLModel, Session, select, func

# Type générique pour le modèle (Account, Board, Message, etc.)
ModelT = TypeVar("ModelT", bound=SQLModel)

class BaseRepository(Generic[ModelT]):
    """
    Repository de base : persistance générique, aucune règle métier.

    👉 Les repositories concrets définissent `model = MaClasseSQLModel`.
    👉 Toutes les écritures acceptent commit=False : le service orchestre alors
       la transaction (voir app.db.session.transaction).
    👉 Les filtres `**filters` sont des égalités colonne == valeur.
    """

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def _where(self, statement, filters: dict):
        for column, value in filters.items():
            statement = statement.where(getattr(self.model, column) == value)
        return statement

    def _write(self, commit: bool, entity: Optional[ModelT] = None) -> None:
        if commit:
            self.session.commit()
            if entity is not None:
                self.session.refresh(entity)
        else:
            # flush pour obtenir l'ID sans commit (utile pour FKs)
            self.session.flush()

    # ---------- READ ----------

    def get(self, id_: Any) -> Optional[ModelT]:
        return self.session.get(self.model, id_)

    def find_one(self, **filters) -> Optional[ModelT]:
        """Premier enregistrement correspondant aux filtres, ou None."""
        return self.session.exec(self._where(select(self.model), filters)).first()

    def exists(self, **filters) -> bool:
        return self.find_one(**filters) is not None

    def list(self, offset: int = 0, limit: int = 100, *, newest_first: bool = False) -> Sequence[ModelT]:
        order = self.model.id.desc() if newest_first else self.model.id.asc()
        statement = select(self.model).order_by(order).offset(offset).limit(limit)
        return self.session.exec(statement).all()

    def count(self, **filters) -> int:
        statement = self._where(select(func.count(self.model.id)), filters)
        return int(self.session.exec(statement).one())

    # ---------- WRITE ----------

    def create(self, *, commit: bool = True, **fields) -> ModelT:
        entity = self.model(**fields)
        self.session.add(entity)
        self._write(commit, entity)
        return entity

    def update(self, entity: ModelT, *, commit: bool = True, **changes) -> ModelT:
        for key, value in changes.items():
            setattr(entity, key, value)
        self.session.add(entity)
        self._write(commit, entity)
        return entity

    def delete(self, entity: ModelT, *, commit: bool = True) -> None:
        self.session.delete(entity)
        self._write(commit)

    def delete_where(self, *, commit: bool = True, **filters) -> int:
        """Suppression en masse (ex: tous les messages d'un board). Renvoie le nombre de lignes."""
        if not filters:
            raise ValueError("delete_where requires at least one filter")
        result = self.session.exec(self._where(delete(self.model), filters))
        self._write(commit)
        return result.rowcount or 0
