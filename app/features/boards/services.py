import logging
from typing import List, Optional, Tuple

from sqlmodel import Session

from app.core.errors import NotFoundError
from app.db.models.boards import Board
from app.db.models.enums import BoardStatus, Role
from app.db.repositories.accounts import AccountRepository
from app.db.repositories.bans import BanRepository
from app.db.repositories.boards import BoardRepository
from app.db.repositories.memberships import MembershipRepository
from app.db.repositories.messages import MessageRepository
from app.db.session import transaction
from app.features.boards import policy
from app.features.boards.policy import DenyReason, Decision
from app.features.boards.schemas import (
    BoardCreateIn,
    BoardUpdateIn,
    BoardListOut,
    BoardOut,
    JoinedBoardOut,
    MembershipOut,
    MemberOut,
    MemberListOut,
    BanOut,
)
from app.utils.dates import compute_age

logger = logging.getLogger(__name__)


class BoardService:
    """
    Cycle de vie des boards : création, mise à jour, suppression, adhésions, bans.

    - Toute décision d'accès passe par app.features.boards.policy.
    - Les écritures multiples (ban, suppression) sont faites en une seule transaction.
    - Lève des AppError (NotFound / Forbidden / Conflict), jamais de HTTPException.
    """

    def __init__(
        self,
        *,
        session: Session,
        board_repo: BoardRepository,
        membership_repo: MembershipRepository,
        ban_repo: BanRepository,
        account_repo: AccountRepository,
        message_repo: MessageRepository,
    ):
        self.session = session
        self.boards = board_repo
        self.memberships = membership_repo
        self.bans = ban_repo
        self.accounts = account_repo
        self.messages = message_repo

    # -------- Helpers --------

    def _get_board(self, board_id: int) -> Optional[Board]:
        return self.boards.get(board_id)

    def _facts(self, board: Optional[Board], user_id: int) -> Tuple[bool, bool]:
        """(is_member, is_banned) pour un board existant ; (False, False) sinon."""
        if board is None:
            return False, False
        is_member = self.memberships.get_for(board.id, user_id) is not None
        is_banned = self.bans.get_for(board.id, user_id) is not None
        return is_member, is_banned

    def _enforce(self, decision: Decision, *, action: str, board_id: int, user_id: int) -> None:
        if not decision:
            logger.debug("Denied %s on board %s for user %s: %s", action, board_id, user_id, decision.reason)
        policy.enforce(decision)

    def _require_admin(self, board_id: int, user_id: int, role: Role, *, action: str) -> Board:
        board = self._get_board(board_id)
        self._enforce(policy.can_administer(board, user_id, role), action=action, board_id=board_id, user_id=user_id)
        return board

    def _require_target(self, target_id: int):
        target = self.accounts.get_with_profile(target_id)
        if target is None:
            policy.enforce(policy.deny(DenyReason.TARGET_NOT_FOUND))
        return target

    # -------- Décisions (exposées pour les autres services) --------

    def view_decision(self, board_id: int, user_id: int) -> Tuple[Optional[Board], Decision]:
        board = self._get_board(board_id)
        is_member, is_banned = self._facts(board, user_id)
        return board, policy.can_view(board, user_id, is_member=is_member, is_banned=is_banned)

    def post_decision(self, board_id: int, user_id: int) -> Tuple[Optional[Board], Decision]:
        board = self._get_board(board_id)
        is_member, is_banned = self._facts(board, user_id)
        return board, policy.can_post(board, user_id, is_member=is_member, is_banned=is_banned)

    def join_decision(self, board_id: int, user_id: int) -> Tuple[Optional[Board], Decision]:
        board = self._get_board(board_id)
        is_member, is_banned = self._facts(board, user_id)
        return board, policy.can_join(board, user_id, is_member=is_member, is_banned=is_banned)

    # -------- Reads --------

    def list_boards(self, *, offset: int = 0, limit: int = 100) -> BoardListOut:
        items = [BoardOut.model_validate(b) for b in self.boards.list_active(offset=offset, limit=limit)]
        return BoardListOut(items=items, total=self.boards.count(status=BoardStatus.ACTIVE))

    def list_joined_boards(self, user_id: int) -> List[JoinedBoardOut]:
        return [
            JoinedBoardOut(**BoardOut.model_validate(board).model_dump(), joined_at=joined_at)
            for board, joined_at in self.boards.list_joined(user_id)
        ]

    def get_board(self, board_id: int, *, user_id: int) -> Board:
        board, decision = self.view_decision(board_id, user_id)
        self._enforce(decision, action="view", board_id=board_id, user_id=user_id)
        return board

    def list_members(self, board_id: int, *, user_id: int, role: Role) -> MemberListOut:
        board = self._get_board(board_id)
        if board is None:
            policy.enforce(policy.deny(DenyReason.NOT_FOUND))
        if not policy.can_administer(board, user_id, role):
            is_member, _ = self._facts(board, user_id)
            if not is_member:
                self._enforce(policy.deny(DenyReason.NOT_MEMBER), action="list_members", board_id=board_id, user_id=user_id)

        members = [
            MemberOut(
                user_id=membership.account_id,
                display_name=profile.display_name,
                age=compute_age(profile.date_of_birth),
                country=profile.country,
                joined_at=membership.joined_at,
                is_admin=membership.account_id == board.admin_id,
            )
            for membership, profile in self.memberships.list_members_with_profile(board_id)
        ]
        return MemberListOut(board_id=board.id, board_name=board.name, members=members)

    def list_bans(self, board_id: int, *, user_id: int, role: Role) -> List[BanOut]:
        board = self._require_admin(board_id, user_id, role, action="list_bans")
        return [
            BanOut(
                board_id=board.id,
                board_name=board.name,
                user_id=ban.account_id,
                display_name=profile.display_name,
                reason=ban.reason,
                created_at=ban.created_at,
            )
            for ban, profile in self.bans.list_for_board_with_profile(board_id)
        ]

    # -------- Writes : board --------

    def create_board(self, payload: BoardCreateIn, *, user_id: int) -> Board:
        board = self.boards.create(
            name=payload.name,
            description=payload.description,
            visibility=payload.visibility,
            status=BoardStatus.ACTIVE,
            admin_id=user_id,
        )
        logger.info("Board %s (%s) created by user %s", board.id, board.visibility.value, user_id)
        return board

    def update_board(self, board_id: int, payload: BoardUpdateIn, *, user_id: int, role: Role) -> Board:
        board = self._require_admin(board_id, user_id, role, action="update")

        changes = payload.model_dump(exclude_unset=True)
        # description peut être remise à None ; les autres champs non
        changes = {k: v for k, v in changes.items() if v is not None or k == "description"}

        if "admin_id" in changes:
            if not Role(role).is_global_admin:
                # réservé aux admins globaux : ignoré pour l'admin du board
                changes.pop("admin_id")
            elif self.accounts.get(changes["admin_id"]) is None:
                policy.enforce(policy.deny(DenyReason.TARGET_NOT_FOUND))

        if not changes:
            return board
        return self.boards.update(board, **changes)

    def delete_board(self, board_id: int, *, user_id: int, role: Role) -> None:
        board = self._require_admin(board_id, user_id, role, action="delete")
        with transaction(self.session):
            self.messages.delete_where(commit=False, board_id=board.id)
            self.memberships.delete_where(commit=False, board_id=board.id)
            self.bans.delete_where(commit=False, board_id=board.id)
            self.boards.delete(board, commit=False)
        logger.info("Board %s deleted by user %s", board_id, user_id)

    # -------- Writes : adhésions --------

    def join_board(self, board_id: int, *, user_id: int) -> MembershipOut:
        _, decision = self.join_decision(board_id, user_id)
        self._enforce(decision, action="join", board_id=board_id, user_id=user_id)
        membership = self.memberships.create(board_id=board_id, account_id=user_id)
        return MembershipOut(board_id=board_id, user_id=user_id, joined_at=membership.joined_at)

    def leave_board(self, board_id: int, *, user_id: int) -> None:
        board = self._get_board(board_id)
        if board is None:
            policy.enforce(policy.deny(DenyReason.NOT_FOUND))
        membership = self.memberships.get_for(board_id, user_id)
        if membership is None:
            self._enforce(policy.deny(DenyReason.NOT_MEMBER), action="leave", board_id=board_id, user_id=user_id)
        self.memberships.delete(membership)

    def add_member(self, board_id: int, target_id: int, *, user_id: int, role: Role) -> MembershipOut:
        """Invitation par l'admin : contourne la règle de visibilité de can_join."""
        self._require_admin(board_id, user_id, role, action="add_member")
        self._require_target(target_id)
        if self.memberships.get_for(board_id, target_id):
            policy.enforce(policy.deny(DenyReason.ALREADY_MEMBER))
        if self.bans.get_for(board_id, target_id):
            policy.enforce(policy.deny(DenyReason.ALREADY_BANNED))
        membership = self.memberships.create(board_id=board_id, account_id=target_id)
        return MembershipOut(board_id=board_id, user_id=target_id, joined_at=membership.joined_at)

    # -------- Writes : bans --------

    def ban_user(
        self,
        board_id: int,
        target_id: int,
        *,
        user_id: int,
        role: Role,
        reason: Optional[str] = None,
    ) -> BanOut:
        board = self._require_admin(board_id, user_id, role, action="ban")
        if target_id == user_id:
            policy.enforce(policy.deny(DenyReason.SELF_BAN))
        if target_id == board.admin_id:
            # le ban serait sans effet : l'admin du board contourne les bans
            policy.enforce(policy.deny(DenyReason.ADMIN_BAN))
        _, profile = self._require_target(target_id)
        if self.bans.get_for(board_id, target_id):
            policy.enforce(policy.deny(DenyReason.ALREADY_BANNED))

        # Ban + retrait de l'adhésion : tout ou rien
        with transaction(self.session):
            ban = self.bans.create(commit=False, board_id=board_id, account_id=target_id, reason=reason)
            membership = self.memberships.get_for(board_id, target_id)
            if membership is not None:
                self.memberships.delete(membership, commit=False)
        self.session.refresh(ban)

        logger.info("User %s banned from board %s by user %s", target_id, board_id, user_id)
        return BanOut(
            board_id=board.id,
            board_name=board.name,
            user_id=target_id,
            display_name=profile.display_name,
            reason=ban.reason,
            created_at=ban.created_at,
        )

    def unban_user(self, board_id: int, target_id: int, *, user_id: int, role: Role) -> None:
        """Supprime le ban uniquement : l'adhésion n'est pas restaurée."""
        self._require_admin(board_id, user_id, role, action="unban")
        ban = self.bans.get_for(board_id, target_id)
        if ban is None:
            policy.enforce(policy.deny(DenyReason.NOT_BANNED))
        self.bans.delete(ban)
        logger.info("User %s unbanned from board %s by user %s", target_id, board_id, user_id)
