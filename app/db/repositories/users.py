"""
➡️ But : Encapsuler toutes les opérations de base de données.

UserRepository : CRUD sur la table User (profil : nom affiché, date de naissance, pays).

Ne contient aucune logique métier, juste de la persistance.

🔹 Avantages :

Réutilisable (les services n’ont pas à savoir comment la DB fonctionne).

Testable indépendamment (mock du repo sans base réelle).
"""

from app.db.repositories.base import BaseRepository
from app.db.models.users import User

class UserRepository(BaseRepository[User]):
    """
    Repository pour la table User (profil).
    Toutes les requêtes utiles passent par le CRUD générique de BaseRepository.
    """
    model = User
