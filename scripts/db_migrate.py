"""Apply database migrations."""

from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from gauge_watch.config import Settings
from gauge_watch.db.recorder import migrate


def main() -> None:
    settings = Settings.from_env()
    applied = migrate(settings.database_url)
    print(f"Database migrations applied: {applied or 'none pending'}")


if __name__ == "__main__":
    main()
