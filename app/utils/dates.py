from datetime import date, datetime, timezone
from typing import Optional


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def compute_age(date_of_birth: Optional[date], *, on: Optional[date] = None) -> Optional[int]:
    """
    Âge en années révolues à la date `on` (aujourd'hui UTC par défaut).

    Tient compte du mois/jour : né le 2000-06-15, on a 23 ans le 2024-06-14
    et 24 ans le 2024-06-15. Jamais stocké, toujours recalculé.
    """
    if date_of_birth is None:
        return None
    if isinstance(date_of_birth, datetime):
        date_of_birth = date_of_birth.date()
    ref = on or today_utc()
    age = ref.year - date_of_birth.year
    if (ref.month, ref.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age
