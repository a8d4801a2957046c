from datetime import datetime
from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from app.db.models.base import BaseModelDB, utcnow


class Membership(BaseModelDB, table=True):
    __table_args__ = (
        UniqueConstraint("board_id", "account_id", name="uq_membership_board_account"),
    )

    board_id: int = Field(foreign_key="board.id", index=True, nullable=False)
    account_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    joined_at: datetime = Field(default_factory=utcnow)
