from enum import Enum


class Role(str, Enum):
    """Rôle global d'un compte. `admin` et `master` ont tous les droits sur tous les boards."""
    USER = "user"
    ADMIN = "admin"
    MASTER = "master"

    @property
    def is_global_admin(self) -> bool:
        return self in (Role.ADMIN, Role.MASTER)


class BoardVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class BoardStatus(str, Enum):
    ACTIVE = "active"
    FROZEN = "frozen"
