from typing import Optional, Sequence
from sqlmodel import select

from app.db.repositories.base import BaseRepository
from app.db.models.base import utcnow
from app.db.models.refresh_tokens import RefreshToken

class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken

    def get_by_jti(self, jti: str) -> Optional[RefreshToken]:
        return self.find_one(jti=jti)

    def list_active_for_account(self, account_id: int) -> Sequence[RefreshToken]:
        now = utcnow()
        return self.session.exec(
            select(self.model)
            .where(self.model.account_id == account_id)
            .where(self.model.revoked_at.is_(None))
            .where(self.model.expires_at > now)
            .order_by(self.model.expires_at.desc())
        ).all()

    def revoke(self, jti: str, *, commit: bool = True) -> bool:
        """Révoque un token. False s'il n'existe pas ou l'était déjà."""
        token = self.get_by_jti(jti)
        if not token or token.revoked_at:
            return False
        self.update(token, commit=commit, revoked_at=utcnow())
        return True

    def revoke_all_for_account(self, account_id: int, *, commit: bool = True) -> int:
        tokens = self.list_active_for_account(account_id)
        now = utcnow()
        for token in tokens:
            token.revoked_at = now
            self.session.add(token)
        if tokens:
            self._write(commit)
        return len(tokens)
