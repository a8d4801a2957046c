"""
➡️ But : Décider qui peut voir, poster, rejoindre ou administrer un board.

Fonctions pures : elles reçoivent le board (ou None), l'identité de l'appelant et
les faits déjà résolus (membre ? banni ?). Aucun accès DB, aucun effet de bord.
Chaque fonction renvoie un Decision : autorisé, ou refusé avec exactement une raison.

Règles communes :
- board absent -> NOT_FOUND, toujours en premier ;
- l'admin du board a tous les droits quel que soit l'état Membership/Ban,
  sauf poster sur un board gelé (le gel bloque tout le monde) ;
- pour les autres, le ban est vérifié avant la visibilité et le statut.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.core.errors import AppError, ConflictError, ForbiddenError, NotFoundError
from app.db.models.boards import Board
from app.db.models.enums import BoardStatus, BoardVisibility, Role


class DenyReason(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    BANNED = "BANNED"
    FROZEN_BOARD = "FROZEN_BOARD"
    FROZEN_NOT_MEMBER = "FROZEN_NOT_MEMBER"
    PRIVATE_ACCESS_DENIED = "PRIVATE_ACCESS_DENIED"
    PRIVATE_JOIN_DENIED = "PRIVATE_JOIN_DENIED"
    NOT_MEMBER = "NOT_MEMBER"
    ALREADY_MEMBER = "ALREADY_MEMBER"
    ALREADY_BANNED = "ALREADY_BANNED"
    NOT_BANNED = "NOT_BANNED"
    NOT_BOARD_ADMIN = "NOT_BOARD_ADMIN"
    SELF_BAN = "SELF_BAN"
    ADMIN_BAN = "ADMIN_BAN"
    TARGET_NOT_FOUND = "TARGET_NOT_FOUND"


DENY_MESSAGES = {
    DenyReason.NOT_FOUND: "Board not found",
    DenyReason.BANNED: "You are banned from this board",
    DenyReason.FROZEN_BOARD: "This board is frozen",
    DenyReason.FROZEN_NOT_MEMBER: "This board is frozen and you are not a member",
    DenyReason.PRIVATE_ACCESS_DENIED: "This is a private board",
    DenyReason.PRIVATE_JOIN_DENIED: "This is a private board. Only the board admin can add members",
    DenyReason.NOT_MEMBER: "You are not a member of this board",
    DenyReason.ALREADY_MEMBER: "Already a member of this board",
    DenyReason.ALREADY_BANNED: "User is banned from this board",
    DenyReason.NOT_BANNED: "User is not banned from this board",
    DenyReason.NOT_BOARD_ADMIN: "Only the board admin can do this",
    DenyReason.SELF_BAN: "Board admin cannot ban themselves",
    DenyReason.ADMIN_BAN: "The board admin cannot be banned from their own board",
    DenyReason.TARGET_NOT_FOUND: "Target user not found",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None

    def __bool__(self) -> bool:
        return self.allowed

    @property
    def message(self) -> str:
        return DENY_MESSAGES[self.reason] if self.reason else "OK"


ALLOW = Decision(True)


def deny(reason: DenyReason) -> Decision:
    return Decision(False, reason)


def is_board_admin(board: Board, user_id: int) -> bool:
    return board.admin_id == user_id


def can_view(board: Optional[Board], user_id: int, *, is_member: bool, is_banned: bool) -> Decision:
    if board is None:
        return deny(DenyReason.NOT_FOUND)
    if is_board_admin(board, user_id):
        return ALLOW
    if is_banned:
        return deny(DenyReason.BANNED)
    if board.status == BoardStatus.FROZEN:
        return ALLOW if is_member else deny(DenyReason.FROZEN_NOT_MEMBER)
    if board.visibility == BoardVisibility.PUBLIC:
        return ALLOW
    return ALLOW if is_member else deny(DenyReason.PRIVATE_ACCESS_DENIED)


def can_post(board: Optional[Board], user_id: int, *, is_member: bool, is_banned: bool) -> Decision:
    """Plus strict que can_view : gel bloquant pour tous, y compris l'admin ; adhésion requise."""
    if board is None:
        return deny(DenyReason.NOT_FOUND)
    if board.status == BoardStatus.FROZEN:
        return deny(DenyReason.FROZEN_BOARD)
    if is_board_admin(board, user_id):
        return ALLOW
    if is_banned:
        return deny(DenyReason.BANNED)
    return ALLOW if is_member else deny(DenyReason.NOT_MEMBER)


def can_join(board: Optional[Board], user_id: int, *, is_member: bool, is_banned: bool) -> Decision:
    """
    Adhésion en libre-service. Sur un board privé seul l'admin peut s'ajouter
    lui-même ; les autres passent par add_member (invitation par l'admin).
    """
    if board is None:
        return deny(DenyReason.NOT_FOUND)
    if board.status == BoardStatus.FROZEN:
        return deny(DenyReason.FROZEN_BOARD)
    if is_member:
        return deny(DenyReason.ALREADY_MEMBER)
    if is_banned:
        return deny(DenyReason.ALREADY_BANNED)
    if board.visibility == BoardVisibility.PRIVATE and not is_board_admin(board, user_id):
        return deny(DenyReason.PRIVATE_JOIN_DENIED)
    return ALLOW


def can_administer(board: Optional[Board], user_id: int, role: Role) -> Decision:
    if board is None:
        return deny(DenyReason.NOT_FOUND)
    if is_board_admin(board, user_id) or Role(role).is_global_admin:
        return ALLOW
    return deny(DenyReason.NOT_BOARD_ADMIN)


# -----------------------------
# Traduction en erreurs métier
# -----------------------------

def to_error(decision: Decision) -> AppError:
    reason = decision.reason
    if reason in (DenyReason.NOT_FOUND, DenyReason.TARGET_NOT_FOUND):
        return NotFoundError(decision.message, code=reason.value)
    if reason == DenyReason.ALREADY_MEMBER:
        return ConflictError(decision.message, code=reason.value)
    return ForbiddenError(decision.message, code=reason.value)


def enforce(decision: Decision) -> None:
    """Lève l'AppError correspondant à la raison du refus ; ne fait rien si autorisé."""
    if not decision.allowed:
        raise to_error(decision)
