"""
Fixtures partagées : base SQLite en mémoire, services câblés, client HTTP.
"""

import os

# Avant tout import de l'app : les settings sont lus à l'import
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["PASSWORD_HASH_TIME_COST"] = "1"
os.environ["PASSWORD_HASH_MEMORY_KB"] = "1024"
os.environ.pop("MASTER_EMAIL", None)
os.environ.pop("MASTER_PASSWORD", None)

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from app.core.config import jwt_settings
from app.db.models.enums import BoardStatus, BoardVisibility, Role
from app.db.repositories.accounts import AccountRepository
from app.db.repositories.bans import BanRepository
from app.db.repositories.boards import BoardRepository
from app.db.repositories.memberships import MembershipRepository
from app.db.repositories.messages import MessageRepository
from app.db.repositories.refresh_tokens import RefreshTokenRepository
from app.db.repositories.users import UserRepository
from app.db.session import build_engine, get_session, init_db
from app.features.authentication.services import AuthService
from app.features.boards.services import BoardService
from app.features.messages.services import MessageService
from app.features.users.services import UserService
from app.main import app
from app.security.password import hash_password
from app.security.rate_limit import api_limiter, auth_limiter

DEFAULT_PASSWORD = "Secret123"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(autouse=True)
def reset_rate_limiters():
    auth_limiter.reset()
    api_limiter.reset()
    yield
    auth_limiter.reset()
    api_limiter.reset()


# -----------------------------
# Services
# -----------------------------
@pytest.fixture
def user_svc(session):
    return UserService(
        session=session,
        account_repo=AccountRepository(session),
        user_repo=UserRepository(session),
        board_repo=BoardRepository(session),
        message_repo=MessageRepository(session),
    )


@pytest.fixture
def auth_svc(session, user_svc):
    return AuthService(
        session=session,
        account_repo=AccountRepository(session),
        user_repo=UserRepository(session),
        refresh_repo=RefreshTokenRepository(session),
        user_svc=user_svc,
        jwt_settings=jwt_settings,
    )


@pytest.fixture
def board_svc(session):
    return BoardService(
        session=session,
        board_repo=BoardRepository(session),
        membership_repo=MembershipRepository(session),
        ban_repo=BanRepository(session),
        account_repo=AccountRepository(session),
        message_repo=MessageRepository(session),
    )


@pytest.fixture
def message_svc(session, board_svc):
    return MessageService(
        message_repo=MessageRepository(session),
        board_repo=BoardRepository(session),
        account_repo=AccountRepository(session),
        board_svc=board_svc,
    )


# -----------------------------
# Factories
# -----------------------------
@pytest.fixture
def make_account(session):
    """Crée un compte + profil directement en base. Renvoie l'Account."""
    counter = {"n": 0}

    def _make(display_name=None, *, role=Role.USER, email=None, date_of_birth=date(1990, 1, 1), country="France"):
        counter["n"] += 1
        display_name = display_name or f"User {counter['n']}"
        profile = UserRepository(session).create(
            display_name=display_name, date_of_birth=date_of_birth, country=country
        )
        return AccountRepository(session).create(
            email=email or f"user{counter['n']}@example.com",
            hashed_password=hash_password(DEFAULT_PASSWORD),
            role=role,
            user_id=profile.id,
        )

    return _make


@pytest.fixture
def make_board(session):
    def _make(admin_id, *, name="General", visibility=BoardVisibility.PUBLIC, status=BoardStatus.ACTIVE):
        return BoardRepository(session).create(
            name=name, admin_id=admin_id, visibility=visibility, status=status
        )

    return _make


# -----------------------------
# HTTP
# -----------------------------
@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Inscrit un compte via l'API et renvoie (user_id, headers Bearer)."""

    def _register(email, display_name="Someone", password=DEFAULT_PASSWORD):
        resp = client.post(
            "/api/v1/auth/sign-up",
            json={
                "email": email,
                "password": password,
                "display_name": display_name,
                "date_of_birth": "1995-05-05",
                "country": "France",
            },
        )
        assert resp.status_code == 201, resp.text
        resp = client.post("/api/v1/auth/sign-in", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        return body["user"]["user_id"], {"Authorization": f"Bearer {body['access_token']}"}

    return _register
