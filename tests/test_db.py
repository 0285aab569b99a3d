"""Tests for database initialization and key-value storage."""
from lecture_quiz.db import delete_value, get_connection, get_value, init_db, set_value


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    tables = {row[0] for row in cursor.fetchall()}
    assert "storage" in tables
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    assert len(cursor.fetchall()) > 0
    conn.close()


def test_init_db_creates_parent_directory(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "quiz.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "quiz.db").exists()


def test_get_connection_returns_row_factory(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO storage (key, value) VALUES ('test', 'val')")
    row = conn.execute("SELECT key, value FROM storage WHERE key='test'").fetchone()
    assert row["key"] == "test"
    conn.close()


def test_get_value_default(tmp_db):
    init_db(tmp_db)
    assert get_value(tmp_db, "missing") is None
    assert get_value(tmp_db, "missing", "fallback") == "fallback"


def test_set_value_overwrites(tmp_db):
    init_db(tmp_db)
    set_value(tmp_db, "profileData", "one")
    set_value(tmp_db, "profileData", "two")
    assert get_value(tmp_db, "profileData") == "two"
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM storage").fetchone()[0] == 1
    conn.close()


def test_delete_value(tmp_db):
    init_db(tmp_db)
    set_value(tmp_db, "sessionState", "{}")
    delete_value(tmp_db, "sessionState")
    assert get_value(tmp_db, "sessionState") is None
    delete_value(tmp_db, "sessionState")  # deleting twice is fine
