from typing import Optional
from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from app.db.models.base import BaseModelDB


class Ban(BaseModelDB, table=True):
    __table_args__ = (
        UniqueConstraint("board_id", "account_id", name="uq_ban_board_account"),
    )

    board_id: int = Field(foreign_key="board.id", index=True, nullable=False)
    account_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    reason: Optional[str] = Field(default=None)
