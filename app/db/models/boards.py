from typing import Optional
from sqlmodel import Field

from .base import BaseModelDB
from .enums import BoardStatus, BoardVisibility


class Board(BaseModelDB, table=True):
    """Espace de discussion : un admin (compte propriétaire), une visibilité et un statut indépendants."""

    name: str = Field(index=True, description="Nom du board")
    description: Optional[str] = Field(default=None)

    visibility: BoardVisibility = Field(default=BoardVisibility.PUBLIC)
    status: BoardStatus = Field(default=BoardStatus.ACTIVE)

    admin_id: int = Field(foreign_key="account.id", index=True)
