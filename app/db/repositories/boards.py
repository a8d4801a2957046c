# app/db/repositories/boards.py
from typing import Sequence, Tuple
from datetime import datetime
from sqlalchemy import exists
from sqlmodel import select, or_, and_

from app.db.repositories.base import BaseRepository
from app.db.models.boards import Board
from app.db.models.bans import Ban
from app.db.models.memberships import Membership
from app.db.models.enums import BoardStatus, BoardVisibility

class BoardRepository(BaseRepository[Board]):
    """CRUD Boards + requêtes de listing."""
    model = Board

    def list_active(self, *, offset: int = 0, limit: int = 100) -> Sequence[Board]:
        """Boards actifs, du plus récent au plus ancien."""
        stmt = (
            select(Board)
            .where(Board.status == BoardStatus.ACTIVE)
            .order_by(Board.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return self.session.exec(stmt).all()

    def list_by_admin(self, admin_id: int) -> Sequence[Board]:
        stmt = select(Board).where(Board.admin_id == admin_id).order_by(Board.id.asc())
        return self.session.exec(stmt).all()

    def list_joined(self, account_id: int) -> Sequence[Tuple[Board, datetime]]:
        """Boards dont le compte est membre, avec la date d'adhésion (plus récente d'abord)."""
        stmt = (
            select(Board, Membership.joined_at)
            .join(Membership, Membership.board_id == Board.id)
            .where(Membership.account_id == account_id)
            .order_by(Membership.joined_at.desc(), Membership.id.desc())
        )
        return self.session.exec(stmt).all()

    def list_viewable_active(self, account_id: int) -> Sequence[Board]:
        """
        Boards actifs visibles par le compte :
        - admin du board, ou
        - non banni ET (board public OU membre).
        Même règle que policy.can_view, traduite en SQL pour éviter le N+1.
        """
        is_member = exists().where(
            Membership.board_id == Board.id, Membership.account_id == account_id
        )
        is_banned = exists().where(
            Ban.board_id == Board.id, Ban.account_id == account_id
        )
        stmt = (
            select(Board)
            .where(Board.status == BoardStatus.ACTIVE)
            .where(
                or_(
                    Board.admin_id == account_id,
                    and_(
                        ~is_banned,
                        or_(Board.visibility == BoardVisibility.PUBLIC, is_member),
                    ),
                )
            )
            .order_by(Board.id.desc())
        )
        return self.session.exec(stmt).all()
