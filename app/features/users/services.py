"""
➡️ But : Contenir la logique métier des profils : lecture, mise à jour, console master.

UserService : assemble Account + User (profil), calcule l'âge à la lecture,
applique les changements de profil et de rôle.

Lève des AppError (NotFoundError, ConflictError) pour informer proprement le client.

🔹 Avantages :

Code métier découplé du web.

Test unitaire possible sans passer par FastAPI.
"""

import logging
from typing import List

from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError
from app.db.models.accounts import Account
from app.db.models.base import utcnow
from app.db.models.enums import Role
from app.db.models.users import User
from app.db.repositories.accounts import AccountRepository
from app.db.repositories.boards import BoardRepository
from app.db.repositories.messages import MessageRepository
from app.db.repositories.users import UserRepository
from app.db.session import transaction
from app.features.users.schemas import (
    AccountAdminOut,
    AccountAdminUpdateIn,
    AccountOut,
    OwnedBoardOut,
    ProfileUpdateIn,
    RecentMessageOut,
)
from app.security.password import hash_password
from app.utils.dates import compute_age
from app.utils.validation import normalize_email

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("display_name", "date_of_birth", "country")


class UserService:
    def __init__(
        self,
        *,
        session: Session,
        account_repo: AccountRepository,
        user_repo: UserRepository,
        board_repo: BoardRepository,
        message_repo: MessageRepository,
    ):
        self.session = session
        self.accounts = account_repo
        self.users = user_repo
        self.boards = board_repo
        self.messages = message_repo

    # -------- Helpers --------

    def _get_pair(self, account_id: int):
        row = self.accounts.get_with_profile(account_id)
        if row is None:
            raise NotFoundError("User not found")
        return row

    def to_out(self, account: Account, profile: User) -> AccountOut:
        return AccountOut(
            user_id=account.id,
            email=account.email,
            role=account.role,
            display_name=profile.display_name,
            age=compute_age(profile.date_of_birth),
            country=profile.country or "",
            date_joined=profile.created_at,
            is_board_admin=self.boards.count(admin_id=account.id) > 0,
        )

    def _apply_profile_changes(self, profile: User, changes: dict) -> None:
        profile_changes = {k: changes[k] for k in PROFILE_FIELDS if k in changes}
        # le nom affiché est obligatoire : un None explicite est ignoré
        if profile_changes.get("display_name", "") is None:
            profile_changes.pop("display_name")
        if profile_changes:
            self.users.update(profile, commit=False, updated_at=utcnow(), **profile_changes)

    # -------- Profil courant --------

    def get_profile(self, account_id: int) -> AccountOut:
        return self.to_out(*self._get_pair(account_id))

    def update_profile(self, account_id: int, payload: ProfileUpdateIn) -> AccountOut:
        account, profile = self._get_pair(account_id)
        with transaction(self.session):
            self._apply_profile_changes(profile, payload.model_dump(exclude_unset=True))
        return self.to_out(account, profile)

    # -------- Console master --------

    def list_accounts(self, *, offset: int = 0, limit: int = 100, recent_limit: int = 5) -> List[AccountAdminOut]:
        items = []
        for account, profile in self.accounts.list_with_profiles(offset=offset, limit=limit):
            boards = self.boards.list_by_admin(account.id)
            recent = self.messages.list_recent_by_author(account.id, limit=recent_limit)
            items.append(
                AccountAdminOut(
                    **self.to_out(account, profile).model_dump(),
                    date_of_birth=profile.date_of_birth,
                    board_count=len(boards),
                    boards=[
                        OwnedBoardOut(id=b.id, name=b.name, visibility=b.visibility, status=b.status)
                        for b in boards
                    ],
                    message_count=self.messages.count(author_id=account.id),
                    recent_messages=[
                        RecentMessageOut(
                            id=m.id, text=m.text, timestamp=m.timestamp, board_id=b.id, board_name=b.name
                        )
                        for m, b in recent
                    ],
                )
            )
        return items

    def update_account(self, account_id: int, payload: AccountAdminUpdateIn) -> AccountOut:
        account, profile = self._get_pair(account_id)
        changes = payload.model_dump(exclude_unset=True)

        account_changes = {}
        if changes.get("email") and changes["email"] != account.email:
            if self.accounts.get_by_email(changes["email"]):
                raise ConflictError("Email already registered", code="EMAIL_ALREADY_REGISTERED")
            account_changes["email"] = changes["email"]
        if changes.get("role") is not None:
            account_changes["role"] = changes["role"]

        with transaction(self.session):
            if account_changes:
                self.accounts.update(account, commit=False, updated_at=utcnow(), **account_changes)
            self._apply_profile_changes(profile, changes)

        if "role" in account_changes:
            logger.info("Account %s role set to %s", account.id, account.role.value)
        return self.to_out(account, profile)


def ensure_master_account(
    session: Session,
    *,
    email: str,
    password: str,
    display_name: str = "Master User",
) -> Account:
    """
    Crée (ou promeut) le compte master configuré. C'est un vrai compte en base
    avec role=master : aucune comparaison d'email ailleurs dans le code.
    """
    accounts = AccountRepository(session)
    users = UserRepository(session)
    email = normalize_email(email)

    account = accounts.get_by_email(email)
    if account is not None:
        if account.role != Role.MASTER:
            accounts.update(account, role=Role.MASTER, updated_at=utcnow())
            logger.info("Account %s promoted to master", account.id)
        return account

    with transaction(session):
        profile = users.create(commit=False, display_name=display_name)
        account = accounts.create(
            commit=False,
            email=email,
            hashed_password=hash_password(password),
            role=Role.MASTER,
            user_id=profile.id,
        )
    session.refresh(account)
    logger.info("Master account created (id=%s)", account.id)
    return account
