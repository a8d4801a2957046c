from typing import Optional, Sequence, Tuple
from sqlmodel import select

from app.db.repositories.base import BaseRepository
from app.db.models.memberships import Membership
from app.db.models.accounts import Account
from app.db.models.users import User


class MembershipRepository(BaseRepository[Membership]):
    model = Membership

    def get_for(self, board_id: int, account_id: int) -> Optional[Membership]:
        return self.find_one(board_id=board_id, account_id=account_id)

    def list_members_with_profile(self, board_id: int) -> Sequence[Tuple[Membership, User]]:
        """Membres d'un board avec leur profil, par date d'adhésion croissante."""
        stmt = (
            select(Membership, User)
            .join(Account, Account.id == Membership.account_id)
            .join(User, User.id == Account.user_id)
            .where(Membership.board_id == board_id)
            .order_by(Membership.joined_at.asc(), Membership.id.asc())
        )
        return self.session.exec(stmt).all()
