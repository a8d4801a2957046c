"""
➡️ But : Configurer la base et gérer les sessions de base de données.

engine : connexion à la base (sqlite:///app.db par défaut).

init_db() : crée les tables à partir des modèles SQLModel.

get_session() : dépendance FastAPI qui ouvre une session, la fournit aux routes, puis la ferme proprement.

transaction() : regroupe plusieurs écritures (repos en commit=False) en un seul commit, rollback sinon.

🔹 Avantages :

Un seul endroit pour gérer les connexions DB.

Réutilisable par injection (Depends(get_session)).
"""

import logging
from contextlib import contextmanager
from typing import Dict, Any, Iterator

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy import event
from sqlalchemy.engine import Engine

# Import all models for creating all tables
from app.db.models.users import User
from app.db.models.accounts import Account
from app.db.models.boards import Board
from app.db.models.memberships import Membership
from app.db.models.bans import Ban
from app.db.models.messages import Message
from app.db.models.refresh_tokens import RefreshToken

from app.core.config import settings

logger = logging.getLogger(__name__)


def _enable_sqlite_fk(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, *, echo: bool = False, **kwargs) -> Engine:
    assert url, "DATABASE_URL must be set"

    is_sqlite = url.startswith("sqlite:")

    connect_args: Dict[str, Any] = {}
    if is_sqlite:
        # Requis pour SQLite quand utilisé dans un app serveur (multi-threads)
        connect_args["check_same_thread"] = False

    engine = create_engine(
        url,
        echo=echo,
        connect_args=connect_args,
        pool_pre_ping=not is_sqlite,  # ping utile pour Postgres/MySQL ; inutile pour SQLite
        **kwargs,
    )
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_fk)
    return engine

# echo seulement en dev pour ne pas polluer les logs en prod
engine: Engine = build_engine(settings.DATABASE_URL, echo=(settings.ENV == "dev"))

def init_db(bind: Engine = None) -> None:
    """
    Crée les tables si elles n'existent pas (usage dev/demo).
    En prod avec Alembic, préfère des migrations.
    """
    SQLModel.metadata.create_all(bind or engine)
    logger.debug("Tables ready on %s", (bind or engine).url)


def get_session():
    """
    Dépendance FastAPI : fournit une session par requête.
    Utilisation :
        def route(..., session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    Tout ou rien : commit à la sortie du bloc, rollback si une exception le traverse.
    Les repos appelés dans le bloc doivent utiliser commit=False.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
