"""
Validateurs partagés par les schémas Pydantic (field_validator).

Chaque fonction renvoie la valeur normalisée ou lève ValueError ;
Pydantic convertit l'erreur en détail par champ (réponse 422).
"""

import re
from datetime import date
from typing import Optional

from app.utils.dates import compute_age

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_AGE = 13
MAX_AGE = 120

BOARD_NAME_MIN, BOARD_NAME_MAX = 3, 100
MESSAGE_TEXT_MIN, MESSAGE_TEXT_MAX = 1, 1000
DISPLAY_NAME_MIN, DISPLAY_NAME_MAX = 2, 50


def normalize_email(email: str) -> str:
    """Trim + minuscules : 'a@B.com ' et 'A@b.com' désignent le même compte."""
    value = (email or "").strip().lower()
    if not value:
        raise ValueError("Email is required")
    if not EMAIL_RE.match(value):
        raise ValueError("Invalid email format")
    return value


def validate_password(password: str) -> str:
    if not password:
        raise ValueError("Password is required")
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        raise ValueError("Password must contain at least one number")
    return password


def validate_display_name(display_name: str) -> str:
    value = (display_name or "").strip()
    if len(value) < DISPLAY_NAME_MIN:
        raise ValueError(f"Display name must be at least {DISPLAY_NAME_MIN} characters long")
    if len(value) > DISPLAY_NAME_MAX:
        raise ValueError(f"Display name must be at most {DISPLAY_NAME_MAX} characters long")
    return value


def validate_date_of_birth(dob: date, *, on: Optional[date] = None) -> date:
    age = compute_age(dob, on=on)
    if age is None:
        raise ValueError("Date of birth is required")
    if age < MIN_AGE:
        raise ValueError(f"Must be at least {MIN_AGE} years old")
    if age > MAX_AGE:
        raise ValueError("Invalid date of birth")
    return dob


def validate_board_name(name: str) -> str:
    value = (name or "").strip()
    if not BOARD_NAME_MIN <= len(value) <= BOARD_NAME_MAX:
        raise ValueError(f"Board name must be between {BOARD_NAME_MIN} and {BOARD_NAME_MAX} characters")
    return value


def validate_message_text(text: str) -> str:
    value = (text or "").strip()
    if not MESSAGE_TEXT_MIN <= len(value) <= MESSAGE_TEXT_MAX:
        raise ValueError(f"Message text must be between {MESSAGE_TEXT_MIN} and {MESSAGE_TEXT_MAX} characters")
    return value
