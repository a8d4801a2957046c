from sqlmodel import Field

from .base import BaseModelDB
from .enums import Role

class Account(BaseModelDB, table=True):
    # toujours normalisé (trim + minuscules) avant écriture
    email: str = Field(index=True, unique=True)
    hashed_password: str
    role: Role = Field(default=Role.USER)
    user_id: int = Field(foreign_key="user.id", unique=True, index=True)
