from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field as PydField, field_validator

from app.db.models.enums import BoardVisibility
from app.utils.validation import validate_message_text


class MessageCreateIn(BaseModel):
    text: str = PydField(..., description="1 à 1000 caractères après trim", examples=["hello"])
    # champ hérité : liste libre d'identifiants, ex. "3,7,12"
    user_ids: Optional[str] = PydField(None, max_length=1000)

    @field_validator("text")
    @classmethod
    def _check_text(cls, v: str) -> str:
        return validate_message_text(v)


class ReplyIn(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def _check_text(cls, v: str) -> str:
        return validate_message_text(v)


class AuthorOut(BaseModel):
    id: int
    name: str
    country: Optional[str] = None


class MessageOut(BaseModel):
    id: int
    board_id: int
    text: str
    user_ids: str = ""
    author: AuthorOut
    timestamp: datetime


class RepliedToOut(BaseModel):
    id: int
    text: str


class ReplyOut(MessageOut):
    # décoration de réponse uniquement : aucun lien parent n'est persisté
    replied_to: RepliedToOut


class BoardMessagesOut(BaseModel):
    board_id: int
    board_name: str
    messages: List[MessageOut]


class AccessibleBoardOut(BaseModel):
    board_id: int
    board_name: str
    visibility: BoardVisibility
    message_count: int
    latest_messages: List[MessageOut]


class AccessibleBoardsOut(BaseModel):
    accessible_boards: List[AccessibleBoardOut]
