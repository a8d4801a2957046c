"""
➡️ But : Lecture et écriture des messages, sous contrôle de la policy des boards.

- lecture d'un fil : can_view
- publication : can_post
- réponse : can_view (même accès que la lecture du fil), sans lien parent persisté
"""

import logging
from typing import Optional

from app.core.errors import NotFoundError
from app.db.models.messages import Message
from app.db.models.users import User
from app.db.repositories.accounts import AccountRepository
from app.db.repositories.boards import BoardRepository
from app.db.repositories.messages import MessageRepository
from app.features.boards import policy
from app.features.boards.services import BoardService
from app.features.messages.schemas import (
    AccessibleBoardOut,
    AccessibleBoardsOut,
    AuthorOut,
    BoardMessagesOut,
    MessageCreateIn,
    MessageOut,
    RepliedToOut,
    ReplyIn,
    ReplyOut,
)

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(
        self,
        *,
        message_repo: MessageRepository,
        board_repo: BoardRepository,
        account_repo: AccountRepository,
        board_svc: BoardService,
        recent_limit: int = 5,
    ):
        self.messages = message_repo
        self.boards = board_repo
        self.accounts = account_repo
        self.board_svc = board_svc
        self.recent_limit = recent_limit

    # --------------- Helpers ---------------

    @staticmethod
    def _to_out(message: Message, author: User) -> MessageOut:
        return MessageOut(
            id=message.id,
            board_id=message.board_id,
            text=message.text,
            user_ids=message.user_ids or "",
            author=AuthorOut(id=message.author_id, name=author.display_name, country=author.country),
            timestamp=message.timestamp,
        )

    def _author_profile(self, account_id: int) -> User:
        row = self.accounts.get_with_profile(account_id)
        if row is None:
            raise NotFoundError("User not found")
        return row[1]

    # --------------- Queries ---------------

    def list_accessible_boards_with_recent_messages(self, user_id: int) -> AccessibleBoardsOut:
        """Boards actifs visibles par l'utilisateur, chacun avec ses N derniers messages (plus récents d'abord)."""
        result = []
        for board in self.boards.list_viewable_active(user_id):
            recent = self.messages.list_for_board_with_author(
                board.id, newest_first=True, limit=self.recent_limit
            )
            result.append(
                AccessibleBoardOut(
                    board_id=board.id,
                    board_name=board.name,
                    visibility=board.visibility,
                    message_count=self.messages.count(board_id=board.id),
                    latest_messages=[self._to_out(m, author) for m, author in recent],
                )
            )
        return AccessibleBoardsOut(accessible_boards=result)

    def list_board_messages(self, board_id: int, *, user_id: int) -> BoardMessagesOut:
        """Fil complet, ordre chronologique."""
        board = self.board_svc.get_board(board_id, user_id=user_id)
        rows = self.messages.list_for_board_with_author(board.id, newest_first=False)
        return BoardMessagesOut(
            board_id=board.id,
            board_name=board.name,
            messages=[self._to_out(m, author) for m, author in rows],
        )

    # --------------- Commands ---------------

    def post_message(self, board_id: int, payload: MessageCreateIn, *, user_id: int) -> MessageOut:
        _, decision = self.board_svc.post_decision(board_id, user_id)
        if not decision:
            logger.debug("Denied post on board %s for user %s: %s", board_id, user_id, decision.reason)
        policy.enforce(decision)

        message = self.messages.create(
            board_id=board_id,
            author_id=user_id,
            text=payload.text,
            user_ids=payload.user_ids or "",
        )
        return self._to_out(message, self._author_profile(user_id))

    def reply_to_message(self, message_id: int, payload: ReplyIn, *, user_id: int) -> ReplyOut:
        original: Optional[Message] = self.messages.get(message_id)
        if original is None:
            raise NotFoundError("Message not found")

        # même accès que la lecture du fil
        board = self.board_svc.get_board(original.board_id, user_id=user_id)

        reply = self.messages.create(
            board_id=board.id,
            author_id=user_id,
            text=payload.text,
        )
        out = self._to_out(reply, self._author_profile(user_id))
        return ReplyOut(
            **out.model_dump(),
            replied_to=RepliedToOut(id=original.id, text=original.text),
        )
