from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.worktrack.worktrack.database.bootstrap import apply_schema, list_tables
from src.worktrack.worktrack.main import SCHEMA_PATH, load_settings


def main() -> None:
    settings = load_settings()
    db = settings.db

    apply_schema(db, schema_path=SCHEMA_PATH)
    tables = list_tables(db)
    print(f"OK: Applied schema.sql -> {db.user}@{db.host}:{db.port}/{db.database} (tables={len(tables)})")


if __name__ == "__main__":
    main()
