"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_board_service() : crée un BoardService à partir d'une session DB.

get_current_account() : authentifie l'appelant depuis le header Bearer.

pagination() : paramètres communs page et size.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à injecter dans plusieurs endpoints (Depends()).
"""

from typing import Optional
from dataclasses import dataclass

from fastapi import Depends, Header, Query, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from app.core.config import settings, jwt_settings
from app.core.errors import ForbiddenError, UnauthorizedError
from app.db.models.accounts import Account
from app.db.models.enums import Role
from app.db.session import get_session

from app.db.repositories.accounts import AccountRepository
from app.db.repositories.users import UserRepository
from app.db.repositories.refresh_tokens import RefreshTokenRepository
from app.db.repositories.boards import BoardRepository
from app.db.repositories.memberships import MembershipRepository
from app.db.repositories.bans import BanRepository
from app.db.repositories.messages import MessageRepository

from app.features.authentication.services import AuthService
from app.features.users.services import UserService
from app.features.boards.services import BoardService
from app.features.messages.services import MessageService
from app.security.rate_limit import client_key


def pagination(
    page: int = Query(1, ge=1, description="Numéro de page", examples=[1]),
    size: int = Query(20, ge=1, le=100, description="Taille de page", examples=[20]),
):
    offset = (page - 1) * size
    return {"offset": offset, "limit": size}


# -----------------------------
# Repositories
# -----------------------------
def get_account_repository(session: Session = Depends(get_session)) -> AccountRepository:
    return AccountRepository(session)

def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(session)

def get_refresh_token_repository(session: Session = Depends(get_session)) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)

def get_board_repository(session: Session = Depends(get_session)) -> BoardRepository:
    return BoardRepository(session)

def get_membership_repository(session: Session = Depends(get_session)) -> MembershipRepository:
    return MembershipRepository(session)

def get_ban_repository(session: Session = Depends(get_session)) -> BanRepository:
    return BanRepository(session)

def get_message_repository(session: Session = Depends(get_session)) -> MessageRepository:
    return MessageRepository(session)


# -----------------------------
# Users
# -----------------------------
def get_user_service(
    session: Session = Depends(get_session),
    account_repo: AccountRepository = Depends(get_account_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    board_repo: BoardRepository = Depends(get_board_repository),
    message_repo: MessageRepository = Depends(get_message_repository),
) -> UserService:
    return UserService(
        session=session,
        account_repo=account_repo,
        user_repo=user_repo,
        board_repo=board_repo,
        message_repo=message_repo,
    )


# -----------------------------
# Auth
# -----------------------------
def get_auth_service(
    session: Session = Depends(get_session),
    account_repo: AccountRepository = Depends(get_account_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    refresh_repo: RefreshTokenRepository = Depends(get_refresh_token_repository),
    user_svc: UserService = Depends(get_user_service),
) -> AuthService:
    return AuthService(
        session=session,
        account_repo=account_repo,
        user_repo=user_repo,
        refresh_repo=refresh_repo,
        user_svc=user_svc,
        jwt_settings=jwt_settings,
    )


# -----------------------------
# Boards / Messages
# -----------------------------
def get_board_service(
    session: Session = Depends(get_session),
    board_repo: BoardRepository = Depends(get_board_repository),
    membership_repo: MembershipRepository = Depends(get_membership_repository),
    ban_repo: BanRepository = Depends(get_ban_repository),
    account_repo: AccountRepository = Depends(get_account_repository),
    message_repo: MessageRepository = Depends(get_message_repository),
) -> BoardService:
    return BoardService(
        session=session,
        board_repo=board_repo,
        membership_repo=membership_repo,
        ban_repo=ban_repo,
        account_repo=account_repo,
        message_repo=message_repo,
    )

def get_message_service(
    message_repo: MessageRepository = Depends(get_message_repository),
    board_repo: BoardRepository = Depends(get_board_repository),
    account_repo: AccountRepository = Depends(get_account_repository),
    board_svc: BoardService = Depends(get_board_service),
) -> MessageService:
    return MessageService(
        message_repo=message_repo,
        board_repo=board_repo,
        account_repo=account_repo,
        board_svc=board_svc,
        recent_limit=settings.RECENT_MESSAGES_LIMIT,
    )


# -----------------------------
# Authentication data
# -----------------------------
bearer_scheme = HTTPBearer(auto_error=False)

def get_access_token_from_bearer(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    if not credentials or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthorizedError("Missing or invalid bearer token", code="MISSING_TOKEN")
    return credentials.credentials


def get_current_account(
    access_token: str = Depends(get_access_token_from_bearer),
    svc: AuthService = Depends(get_auth_service),
) -> Account:
    return svc.get_current_account(access_token=access_token)


def require_global_admin(account: Account = Depends(get_current_account)) -> Account:
    if not Role(account.role).is_global_admin:
        raise ForbiddenError("Admin or master role required", code="NOT_GLOBAL_ADMIN")
    return account


@dataclass
class ClientContext:
    ip: Optional[str]
    user_agent: Optional[str]

def get_client_ip_and_ua(
    request: Request,
    user_agent: Optional[str] = Header(default=None, alias="User-Agent"),
) -> ClientContext:
    """
    Récupère l'IP (même règle que le rate limiting : en-têtes proxy seulement
    si TRUST_FORWARDED_FOR) et le User-Agent, pour l'audit des refresh tokens.
    """
    return ClientContext(ip=client_key(request), user_agent=user_agent)
