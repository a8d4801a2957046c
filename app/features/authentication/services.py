import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError, UnauthorizedError
from app.db.models.accounts import Account
from app.db.models.base import as_utc, utcnow
from app.db.models.enums import Role
from app.db.repositories.accounts import AccountRepository
from app.db.repositories.refresh_tokens import RefreshTokenRepository
from app.db.repositories.users import UserRepository
from app.db.session import transaction
from app.features.users.services import UserService
from app.security.password import verify_password, hash_password
from app.security.tokens import (
    IdentityClaims,
    InvalidToken,
    JWTSettings,
    decode_token,
    mint_token_pair,
    new_jti,
)
from app.features.authentication.schemas import (
    SignUpIn,
    SignInIn,
    SignInOut,
    SignUpOut,
    TokenPairOut,
    RefreshIn,
    LogoutIn,
    ChangePasswordIn,
)

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service d'authentification : orchestre les repositories + tokens.
    Ne contient pas d'accès SQL direct et lève des AppError propres
    (UnauthorizedError, ConflictError, NotFoundError).
    """

    def __init__(
        self,
        *,
        session: Session,
        account_repo: AccountRepository,
        user_repo: UserRepository,
        refresh_repo: RefreshTokenRepository,
        user_svc: UserService,
        jwt_settings: JWTSettings,
        now_fn: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.accounts = account_repo
        self.users = user_repo
        self.refresh_repo = refresh_repo
        self.user_svc = user_svc
        self.jwt = jwt_settings
        self.now_fn = now_fn

    # ---------- Helpers ----------
    def _claims(self, account: Account) -> IdentityClaims:
        _, profile = self.accounts.get_with_profile(account.id)
        return {
            "user_id": account.id,
            "email": account.email,
            "role": Role(account.role).value,
            "display_name": profile.display_name,
        }

    def _issue_pair(
        self,
        account: Account,
        *,
        ip: Optional[str],
        user_agent: Optional[str],
        commit: bool = True,
    ) -> TokenPairOut:
        jti = new_jti()
        pair = mint_token_pair(claims=self._claims(account), settings=self.jwt, jti=jti)
        # Persist refresh (révocable)
        self.refresh_repo.create(
            commit=commit,
            jti=jti,
            account_id=account.id,
            expires_at=self.now_fn() + self.jwt.refresh_ttl,
            user_agent=user_agent,
            ip=ip,
        )
        return TokenPairOut(**pair)

    # ---------- Sign up ----------
    def sign_up(self, payload: SignUpIn) -> SignUpOut:
        if self.accounts.get_by_email(payload.email):
            raise ConflictError("Email already registered", code="EMAIL_ALREADY_REGISTERED")

        # Profil + compte : tout ou rien
        try:
            with transaction(self.session):
                profile = self.users.create(
                    commit=False,
                    display_name=payload.display_name,
                    date_of_birth=payload.date_of_birth,
                    country=payload.country,
                )
                account = self.accounts.create(
                    commit=False,
                    email=payload.email,
                    hashed_password=hash_password(payload.password),
                    role=Role.USER,
                    user_id=profile.id,
                )
        except IntegrityError:
            # inscription concurrente avec le même email
            raise ConflictError("Email already registered", code="EMAIL_ALREADY_REGISTERED")

        logger.info("Account %s registered", account.id)
        return SignUpOut(user_id=account.id, email=account.email)

    # ---------- Sign in ----------
    def sign_in(self, payload: SignInIn, *, ip: Optional[str] = None, user_agent: Optional[str] = None) -> SignInOut:
        account = self.accounts.get_by_email(payload.email)
        if not account or not verify_password(payload.password, account.hashed_password):
            # Ne pas révéler si le compte existe
            raise UnauthorizedError("Invalid email or password", code="INVALID_CREDENTIALS")

        pair = self._issue_pair(account, ip=ip, user_agent=user_agent)
        return SignInOut(**pair.model_dump(), user=self.user_svc.get_profile(account.id))

    # ---------- Refresh (rotation) ----------
    def refresh(self, payload: RefreshIn, *, ip: Optional[str] = None, user_agent: Optional[str] = None) -> TokenPairOut:
        try:
            decoded = decode_token(payload.refresh_token, self.jwt, expected_typ="refresh")
        except InvalidToken:
            raise UnauthorizedError("Invalid token", code="INVALID_TOKEN")

        jti = decoded["jti"]
        rec = self.refresh_repo.get_by_jti(jti)
        if not rec or rec.revoked_at is not None or as_utc(rec.expires_at) <= self.now_fn():
            raise UnauthorizedError("Refresh token invalid", code="INVALID_TOKEN")

        account = self.accounts.get(int(decoded["sub"]))
        if not account:
            raise UnauthorizedError("Refresh token invalid", code="INVALID_TOKEN")

        # Rotation : révoquer l'ancien et émettre un nouveau couple, même transaction
        with transaction(self.session):
            self.refresh_repo.revoke(jti, commit=False)
            pair = self._issue_pair(account, ip=ip, user_agent=user_agent, commit=False)
        return pair

    # ---------- Logout ----------
    def log_out(self, payload: LogoutIn) -> None:
        try:
            decoded = decode_token(payload.refresh_token, self.jwt, expected_typ="refresh")
        except InvalidToken:
            # Logout idempotent : rien à révoquer si token illisible
            logger.debug("Logout with unreadable refresh token ignored")
            return
        self.refresh_repo.revoke(decoded["jti"])

    # ---------- Current account depuis access token ----------
    def get_current_account(self, *, access_token: str) -> Account:
        try:
            decoded = decode_token(access_token, self.jwt, expected_typ="access")
        except InvalidToken:
            raise UnauthorizedError("Invalid or expired token", code="INVALID_TOKEN")

        account = self.accounts.get(int(decoded["sub"]))
        if not account:
            raise UnauthorizedError("Invalid or expired token", code="INVALID_TOKEN")
        return account

    # ---------- Changement de mot de passe ----------
    def change_password(self, *, account_id: int, payload: ChangePasswordIn) -> None:
        account = self.accounts.get(account_id)
        if not account:
            raise NotFoundError("User not found")

        if not verify_password(payload.old_password, account.hashed_password):
            raise UnauthorizedError("Invalid credentials", code="INVALID_CREDENTIALS")

        with transaction(self.session):
            self.accounts.update(
                account,
                commit=False,
                hashed_password=hash_password(payload.new_password),
                updated_at=self.now_fn(),
            )
            # les sessions ouvertes ailleurs doivent se reconnecter
            self.refresh_repo.revoke_all_for_account(account.id, commit=False)
