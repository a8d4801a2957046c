from pathlib import Path

from app.db.models.enums import BoardStatus, Role
from app.db.repositories.accounts import AccountRepository
from app.db.repositories.bans import BanRepository
from app.db.repositories.boards import BoardRepository
from app.db.repositories.messages import MessageRepository
from app.db.seed import seed_all
from app.security.password import verify_password

SEED_PATH = Path(__file__).resolve().parent.parent / "app" / "db" / "seed_data.yaml"


class TestSeed:
    def test_sample_data_loads(self, session):
        seed_all(session, SEED_PATH)

        accounts = AccountRepository(session)
        alice = accounts.get_by_email("alice@example.com")
        assert alice.role == Role.ADMIN
        assert verify_password("Alice1234", alice.hashed_password)

        assert BoardRepository(session).count() == 3
        assert BoardRepository(session).count(status=BoardStatus.FROZEN) == 1
        assert BanRepository(session).count() == 1
        assert MessageRepository(session).count() == 5

    def test_seed_is_idempotent(self, session):
        seed_all(session, SEED_PATH)
        seed_all(session, SEED_PATH)

        assert AccountRepository(session).count() == 4
        assert BoardRepository(session).count() == 3
        assert MessageRepository(session).count() == 5
