from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.features.users.schemas import AccountOut
from app.utils.validation import (
    normalize_email,
    validate_date_of_birth,
    validate_display_name,
    validate_password,
)

# ---------- Inputs ----------

class SignUpIn(BaseModel):
    email: str = Field(examples=["alice@example.com"])
    password: str = Field(max_length=128)
    display_name: str
    date_of_birth: date = Field(examples=["2000-06-15"])
    country: Optional[str] = Field(default=None, max_length=64)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("display_name")
    @classmethod
    def _display_name(cls, v: str) -> str:
        return validate_display_name(v)

    @field_validator("date_of_birth")
    @classmethod
    def _dob(cls, v: date) -> date:
        return validate_date_of_birth(v)

class SignInIn(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(v)

class RefreshIn(BaseModel):
    refresh_token: str

class LogoutIn(BaseModel):
    refresh_token: str

class ChangePasswordIn(BaseModel):
    old_password: str
    new_password: str = Field(max_length=128)

    @field_validator("new_password")
    @classmethod
    def _new_password(cls, v: str) -> str:
        return validate_password(v)


# ---------- Outputs ----------

class TokenPairOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # secondes (durée de l'access token)

class SignInOut(TokenPairOut):
    user: AccountOut

class SignUpOut(BaseModel):
    user_id: int
    email: str
