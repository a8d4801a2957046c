from typing import Optional, Sequence, Tuple

from sqlmodel import select

from app.db.repositories.base import BaseRepository
from app.db.models.messages import Message
from app.db.models.accounts import Account
from app.db.models.boards import Board
from app.db.models.users import User


class MessageRepository(BaseRepository[Message]):
    model = Message

    def list_for_board_with_author(
        self,
        board_id: int,
        *,
        newest_first: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[Tuple[Message, User]]:
        """Messages d'un board avec le profil de l'auteur. Tri par timestamp puis id (ordre d'insertion)."""
        if newest_first:
            order = (Message.timestamp.desc(), Message.id.desc())
        else:
            order = (Message.timestamp.asc(), Message.id.asc())
        stmt = (
            select(Message, User)
            .join(Account, Account.id == Message.author_id)
            .join(User, User.id == Account.user_id)
            .where(Message.board_id == board_id)
            .order_by(*order)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.session.exec(stmt).all()

    def list_recent_by_author(self, author_id: int, *, limit: int = 5) -> Sequence[Tuple[Message, Board]]:
        stmt = (
            select(Message, Board)
            .join(Board, Board.id == Message.board_id)
            .where(Message.author_id == author_id)
            .order_by(Message.timestamp.desc(), Message.id.desc())
            .limit(limit)
        )
        return self.session.exec(stmt).all()
