"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) complète le schéma généré par FastAPI avec
les conventions de l'API (auth, erreurs, limites de débit).

🔹 Avantages :

La doc est toujours complète et cohérente.

Les clients savent à quoi ressemble une erreur sans lire le code.
"""

from fastapi.openapi.utils import get_openapi

from app.core.config import settings


def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API de message boards : comptes, boards publics/privés, adhésions, bans et messages.\n\n"
            "### Conventions\n"
            "- Toutes les heures sont en UTC.\n"
            "- Auth : `Authorization: Bearer <access_token>` (obtenu via `/api/v1/auth/sign-in`).\n"
            "- Pagination : query params `page` & `size`.\n"
            "- Erreurs : `{\"error\": {\"kind\", \"code\", \"message\", \"fields\"?}}`.\n"
            f"- Limites : {settings.AUTH_RATE_LIMIT_MAX} essais de connexion / "
            f"{settings.AUTH_RATE_LIMIT_WINDOW_SECONDS // 60} min, "
            f"{settings.API_RATE_LIMIT_MAX} requêtes / {settings.API_RATE_LIMIT_WINDOW_SECONDS} s "
            "(HTTP 429 + `Retry-After`).\n"
        ),
        routes=app.routes,
        tags=app.openapi_tags,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
