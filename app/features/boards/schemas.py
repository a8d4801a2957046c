from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field as PydField, field_validator

from app.db.models.enums import BoardStatus, BoardVisibility
from app.utils.validation import validate_board_name


# ---------- IN / UPDATE ----------

class BoardCreateIn(BaseModel):
    name: str = PydField(..., description="Nom du board (3 à 100 caractères)", examples=["Général"])
    description: Optional[str] = PydField(None, max_length=500)
    visibility: BoardVisibility = BoardVisibility.PUBLIC

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        return validate_board_name(v)


class BoardUpdateIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = PydField(None, max_length=500)
    visibility: Optional[BoardVisibility] = None
    status: Optional[BoardStatus] = None
    # admin global uniquement : réassigner le board à un autre compte
    admin_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: Optional[str]) -> Optional[str]:
        return validate_board_name(v) if v is not None else v


class AddMemberIn(BaseModel):
    user_id: int = PydField(..., ge=1)


class BanIn(BaseModel):
    reason: Optional[str] = PydField(None, max_length=500)


# ---------- OUT ----------

class BoardOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    visibility: BoardVisibility
    status: BoardStatus
    admin_id: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class JoinedBoardOut(BoardOut):
    joined_at: datetime


class BoardListOut(BaseModel):
    items: List[BoardOut]
    total: int


class MembershipOut(BaseModel):
    board_id: int
    user_id: int
    joined_at: datetime


class MemberOut(BaseModel):
    user_id: int
    display_name: str
    age: Optional[int] = None
    country: Optional[str] = None
    joined_at: datetime
    is_admin: bool


class MemberListOut(BaseModel):
    board_id: int
    board_name: str
    members: List[MemberOut]


class BanOut(BaseModel):
    board_id: int
    board_name: str
    user_id: int
    display_name: str
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
