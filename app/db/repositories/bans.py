from typing import Optional, Sequence, Tuple
from sqlmodel import select

from app.db.repositories.base import BaseRepository
from app.db.models.bans import Ban
from app.db.models.accounts import Account
from app.db.models.users import User


class BanRepository(BaseRepository[Ban]):
    model = Ban

    def get_for(self, board_id: int, account_id: int) -> Optional[Ban]:
        return self.find_one(board_id=board_id, account_id=account_id)

    def list_for_board_with_profile(self, board_id: int) -> Sequence[Tuple[Ban, User]]:
        stmt = (
            select(Ban, User)
            .join(Account, Account.id == Ban.account_id)
            .join(User, User.id == Account.user_id)
            .where(Ban.board_id == board_id)
            .order_by(Ban.created_at.desc(), Ban.id.desc())
        )
        return self.session.exec(stmt).all()
