from src.worktrack.worktrack.database.bootstrap import split_statements
from src.worktrack.worktrack.main import SCHEMA_PATH


def test_split_respects_quotes_and_drops_database_selection():
    sql = """
    -- header comment
    CREATE DATABASE IF NOT EXISTS other;
    USE other;
    CREATE TABLE a (id INT, note VARCHAR(10) DEFAULT 'x;y');
    INSERT INTO a VALUES (1, 'it\\'s; fine');
    INSERT INTO a VALUES (2, "z")
    """

    statements = list(split_statements(sql))

    assert statements == [
        "CREATE TABLE a (id INT, note VARCHAR(10) DEFAULT 'x;y')",
        "INSERT INTO a VALUES (1, 'it\\'s; fine')",
        'INSERT INTO a VALUES (2, "z")',
    ]


def test_schema_file_is_idempotent():
    statements = list(split_statements(SCHEMA_PATH.read_text(encoding="utf-8")))

    assert statements
    assert all(s.upper().startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
    assert any("users_time_tracking" in s for s in statements)
