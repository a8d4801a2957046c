# app/db/repositories/accounts.py
from __future__ import annotations

from typing import Optional, Sequence, Tuple
from sqlmodel import select

from app.db.repositories.base import BaseRepository
from app.db.models.accounts import Account
from app.db.models.users import User

class AccountRepository(BaseRepository[Account]):
    """
    Repository pour la table Account.
    Contient uniquement les requêtes spécifiques à Account (email, jointure profil).
    """
    model = Account

    def get_by_email(self, email: str) -> Optional[Account]:
        """L'email doit déjà être normalisé (trim + minuscules)."""
        return self.session.exec(
            select(self.model).where(self.model.email == email)
        ).first()

    def get_with_profile(self, account_id: int) -> Optional[Tuple[Account, User]]:
        row = self.session.exec(
            select(Account, User)
            .join(User, User.id == Account.user_id)
            .where(Account.id == account_id)
        ).first()
        return (row[0], row[1]) if row else None

    def list_with_profiles(self, *, offset: int = 0, limit: int = 100) -> Sequence[Tuple[Account, User]]:
        return self.session.exec(
            select(Account, User)
            .join(User, User.id == Account.user_id)
            .order_by(Account.id.asc())
            .offset(offset)
            .limit(limit)
        ).all()
