import sys
from pathlib import Path

from app.db.session import engine, Session, init_db
from app.db.seed import seed_all

DEFAULT_SEED_PATH = Path("app/db/seed_data.yaml")


def run_seed(seed_path: Path = DEFAULT_SEED_PATH) -> None:
    init_db()
    with Session(engine) as session:
        seed_all(session=session, seed_path=seed_path)


if __name__ == "__main__":
    run_seed(Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SEED_PATH)
