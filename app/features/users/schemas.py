"""
➡️ But : Définir les formats d’entrée/sortie de l’API (couche validation).

Contient les modèles Pydantic utilisés par FastAPI :

ProfileUpdateIn → corps PUT /auth/me

AccountOut → profil renvoyé au client (âge calculé, jamais stocké)

AccountAdminOut / AccountAdminUpdateIn → console master

Sépare les modèles "de stockage" (ORM) de ceux "de transfert" (I/O API).

🔹 Avantages :

Validation automatique.

Empêche d’exposer par erreur des infos sensibles (ex: hash de mot de passe).
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.db.models.enums import BoardStatus, BoardVisibility, Role
from app.utils.validation import normalize_email, validate_date_of_birth, validate_display_name


class AccountOut(BaseModel):
    user_id: int
    email: str
    role: Role
    display_name: str
    age: Optional[int] = None
    country: str = ""
    date_joined: datetime
    is_board_admin: bool = False


class ProfileUpdateIn(BaseModel):
    display_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    country: Optional[str] = Field(default=None, max_length=64)

    @field_validator("display_name")
    @classmethod
    def _display_name(cls, v: Optional[str]) -> Optional[str]:
        return validate_display_name(v) if v is not None else v

    @field_validator("date_of_birth")
    @classmethod
    def _dob(cls, v: Optional[date]) -> Optional[date]:
        return validate_date_of_birth(v) if v is not None else v


# ---------- Console master ----------

class AccountAdminUpdateIn(ProfileUpdateIn):
    email: Optional[str] = None
    role: Optional[Role] = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v) if v is not None else v


class OwnedBoardOut(BaseModel):
    id: int
    name: str
    visibility: BoardVisibility
    status: BoardStatus


class RecentMessageOut(BaseModel):
    id: int
    text: str
    timestamp: datetime
    board_id: int
    board_name: str


class AccountAdminOut(AccountOut):
    date_of_birth: Optional[date] = None
    board_count: int = 0
    boards: List[OwnedBoardOut] = []
    message_count: int = 0
    recent_messages: List[RecentMessageOut] = []
