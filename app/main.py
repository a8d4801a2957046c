"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l’instance FastAPI (app).

Configure :

logging (niveau depuis settings.LOG_LEVEL)

CORS (autorisations de qui peut appeler ces API)

handlers d'erreurs (AppError -> enveloppe JSON {"error": {...}})

schéma OpenAPI personnalisé

Inclut les routers (ex : /api/v1/boards).

Au démarrage : crée les tables et le compte master s'il est configuré.

🔹 Avantages :

Centralise la configuration du serveur HTTP.

Point unique d’exécution : uvicorn app.main:app --reload.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.openapi import custom_openapi
from app.db.session import engine, init_db
from app.features.users.services import ensure_master_account

from app.api.v1.routers import authentication, boards, messages, master

import uvicorn

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    openapi_tags=[
        {"name": "auth", "description": "Comptes, sessions et profil"},
        {"name": "boards", "description": "Boards, adhésions et bans"},
        {"name": "messages", "description": "Messages et réponses"},
        {"name": "master", "description": "Console d'administration globale"},
        {"name": "health", "description": "Disponibilité du service"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

register_error_handlers(app)

# Routers
app.include_router(authentication.router, prefix="/api/v1")
app.include_router(boards.router, prefix="/api/v1")
app.include_router(messages.router, prefix="/api/v1")
app.include_router(master.router, prefix="/api/v1")


@app.get("/api/v1/health", tags=["health"], summary="Liveness")
def health():
    return {"status": "ok"}


# Génération du schéma OpenAPI custom
app.openapi = lambda: custom_openapi(app)

# Démarrage
@app.on_event("startup")
def on_startup():
    init_db()
    if settings.MASTER_EMAIL and settings.MASTER_PASSWORD:
        with Session(engine) as session:
            ensure_master_account(
                session,
                email=settings.MASTER_EMAIL,
                password=settings.MASTER_PASSWORD,
                display_name=settings.MASTER_DISPLAY_NAME,
            )
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8080, reload=(settings.ENV == "dev")) # http://localhost:8080
