"""
➡️ But : Définir la structure des tables de la base (ORM).

Représente les objets persistés. Ici on représente le profil d'un utilisateur
(nom affiché, date de naissance, pays). Les identifiants (email, mot de passe,
rôle) sont dans Account, lié 1:1 au profil.

L'âge n'est jamais stocké : il est recalculé depuis date_of_birth à la lecture.
"""

from datetime import date
from typing import Optional

from sqlmodel import Field

from .base import BaseModelDB

class User(BaseModelDB, table=True):
    display_name: str = Field(index=True)
    date_of_birth: Optional[date] = Field(default=None)
    country: Optional[str] = Field(default=None)
