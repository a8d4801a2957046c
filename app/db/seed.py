from datetime import date
from pathlib import Path
from typing import Any, Dict, List

import yaml
from sqlmodel import Session, select

from app.db.models.boards import Board
from app.db.models.enums import BoardStatus, BoardVisibility, Role
from app.db.repositories.accounts import AccountRepository
from app.db.repositories.bans import BanRepository
from app.db.repositories.boards import BoardRepository
from app.db.repositories.memberships import MembershipRepository
from app.db.repositories.messages import MessageRepository
from app.db.repositories.users import UserRepository
from app.db.session import transaction
from app.security.password import hash_password
from app.utils.validation import normalize_email


# -----------------------------
# YAML loader
# -----------------------------
def load_seed_yaml(seed_path: str | Path) -> Dict[str, Any]:
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed YAML introuvable: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Le YAML de seed doit contenir un objet racine (mapping).")
    return data


# -----------------------------
# Helpers
# -----------------------------
def _build_account_key_map(data: Dict[str, Any]) -> Dict[str, str]:
    """account key -> email normalisé (la clé YAML n'existe pas en DB)."""
    accounts_yaml: List[Dict[str, Any]] = data.get("accounts", [])
    return {a["key"]: normalize_email(a["email"]) for a in accounts_yaml}


def _resolve_account_id(session: Session, key_to_email: Dict[str, str], key: str) -> int:
    email = key_to_email.get(key)
    if not email:
        raise ValueError(f"account key inconnu '{key}'")
    account = AccountRepository(session).get_by_email(email)
    if not account:
        raise ValueError(f"Compte '{email}' introuvable en DB. As-tu bien seed les comptes avant les boards ?")
    return account.id


def _as_date(value: Any) -> date:
    # PyYAML convertit déjà 2000-06-15 en date ; accepte aussi une chaîne
    return value if isinstance(value, date) else date.fromisoformat(str(value))


# -----------------------------
# Seed Accounts (+ profils)
# -----------------------------
def seed_accounts(session: Session, data: Dict[str, Any]) -> None:
    accounts: List[Dict[str, Any]] = data.get("accounts", [])
    if not accounts:
        print("⚠️ Aucun compte dans le YAML (clé 'accounts').")
        return

    account_repo = AccountRepository(session)
    user_repo = UserRepository(session)

    inserted = 0
    for a in accounts:
        email = normalize_email(a["email"])
        if account_repo.get_by_email(email):
            continue

        # Profil + compte : tout ou rien
        with transaction(session):
            profile = user_repo.create(
                commit=False,
                display_name=a["display_name"].strip(),
                date_of_birth=_as_date(a["date_of_birth"]) if a.get("date_of_birth") else None,
                country=a.get("country"),
            )
            account_repo.create(
                commit=False,
                email=email,
                hashed_password=hash_password(a["password"]),
                role=Role(a.get("role", Role.USER.value)),
                user_id=profile.id,
            )
        inserted += 1

    print(f"✅ Comptes insérés : {inserted} | ignorés (déjà présents) : {len(accounts) - inserted}.")


# -----------------------------
# Seed Boards (+ membres, bans, messages)
# -----------------------------
def seed_boards(session: Session, data: Dict[str, Any]) -> None:
    boards: List[Dict[str, Any]] = data.get("boards", [])
    if not boards:
        print("ℹ️ Aucun board dans le YAML (clé 'boards'), aucune insertion effectuée.")
        return

    key_to_email = _build_account_key_map(data)
    board_repo = BoardRepository(session)
    membership_repo = MembershipRepository(session)
    ban_repo = BanRepository(session)
    message_repo = MessageRepository(session)

    inserted = 0
    skipped_existing = 0

    for b in boards:
        board_name = b["name"]
        admin_id = _resolve_account_id(session, key_to_email, b["admin_key"])

        # --- Idempotence: (name + admin_id) ---
        existing = session.exec(
            select(Board).where(Board.name == board_name, Board.admin_id == admin_id)
        ).first()
        if existing:
            skipped_existing += 1
            continue

        with transaction(session):
            board = board_repo.create(
                commit=False,
                name=board_name,
                description=b.get("description"),
                visibility=BoardVisibility(b.get("visibility", BoardVisibility.PUBLIC.value)),
                status=BoardStatus(b.get("status", BoardStatus.ACTIVE.value)),
                admin_id=admin_id,
            )

            for member_key in b.get("members", []):
                account_id = _resolve_account_id(session, key_to_email, member_key)
                membership_repo.create(commit=False, board_id=board.id, account_id=account_id)

            for ban in b.get("bans", []):
                account_id = _resolve_account_id(session, key_to_email, ban["account_key"])
                ban_repo.create(commit=False, board_id=board.id, account_id=account_id, reason=ban.get("reason"))

            for m in b.get("messages", []):
                message_repo.create(
                    commit=False,
                    board_id=board.id,
                    author_id=_resolve_account_id(session, key_to_email, m["author_key"]),
                    text=m["text"].strip(),
                    user_ids=m.get("user_ids", ""),
                )
        inserted += 1

    print(f"✅ Boards insérés : {inserted} | ignorés (déjà présents) : {skipped_existing}.")


# -----------------------------
# Main entrypoint
# -----------------------------
def seed_all(session: Session, seed_path: str | Path) -> None:
    data = load_seed_yaml(seed_path)

    seed_accounts(session, data)
    seed_boards(session, data)

    total = AccountRepository(session).count()
    print(f"ℹ️ {total} comptes en base après seed.")
