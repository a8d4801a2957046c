from datetime import datetime
from sqlmodel import Field

from app.db.models.base import BaseModelDB, utcnow


class Message(BaseModelDB, table=True):
    board_id: int = Field(foreign_key="board.id", index=True, nullable=False)
    author_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    text: str = Field(max_length=1000)
    # liste libre d'identifiants (champ hérité, optionnel)
    user_ids: str = Field(default="")
    timestamp: datetime = Field(default_factory=utcnow, index=True)
