import pytest

from rdbms import (
    DatabaseEngine,
    InvalidSyntax,
    PrimaryKeyViolation,
    TableNotFound,
    UniqueViolation,
    UnknownCommand,
)


@pytest.fixture
def db(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT)")
    return engine


def test_round_trip(db):
    assert db.execute("INSERT INTO t (v) VALUES ('x')") == {
        "success": True, "message": "Row inserted", "rows_affected": 1,
    }
    assert db.execute("SELECT * FROM t") == {
        "success": True, "data": [{"id": 1, "v": "x"}], "row_count": 1,
    }


def test_create_table_message(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    assert engine.execute("CREATE TABLE users (id INTEGER PRIMARY KEY)") == {
        "success": True, "message": "Table users created",
    }


def test_auto_increment_never_reuses_ids(db):
    for value in ("a", "b", "c"):
        db.execute(f"INSERT INTO t (v) VALUES ('{value}')")
    ids = [row["id"] for row in db.execute("SELECT id FROM t")["data"]]
    assert ids == [1, 2, 3]

    db.execute("DELETE FROM t WHERE id = 2")
    db.execute("INSERT INTO t (v) VALUES ('d')")
    ids = [row["id"] for row in db.execute("SELECT id FROM t")["data"]]
    assert ids == [1, 3, 4]


def test_primary_key_violation(db):
    db.execute("INSERT INTO t (v) VALUES ('x')")
    with pytest.raises(PrimaryKeyViolation):
        db.execute("INSERT INTO t (id, v) VALUES (1, 'y')")
    assert db.execute("SELECT * FROM t")["row_count"] == 1


def test_primary_key_cannot_be_null(db):
    with pytest.raises(PrimaryKeyViolation):
        db.execute("INSERT INTO t (id, v) VALUES (NULL, 'y')")


def test_explicit_primary_key_is_cast(db):
    db.execute("INSERT INTO t (id, v) VALUES ('7', 'y')")
    assert db.execute("SELECT * FROM t WHERE id = 7")["data"] == [{"id": 7, "v": "y"}]


def test_failed_auto_insert_consumes_id(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT)")
    engine.execute("INSERT INTO t (id, v) VALUES (1, 'explicit')")
    with pytest.raises(PrimaryKeyViolation):
        engine.execute("INSERT INTO t (v) VALUES ('auto')")
    engine.execute("INSERT INTO t (v) VALUES ('auto')")
    assert engine.execute("SELECT id FROM t WHERE v = 'auto'")["data"] == [{"id": 2}]


def test_unique_violation(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT UNIQUE)")
    engine.execute("INSERT INTO users (email) VALUES ('a@b.com')")
    with pytest.raises(UniqueViolation) as excinfo:
        engine.execute("INSERT INTO users (email) VALUES ('a@b.com')")
    assert excinfo.value.column == "email"
    assert str(excinfo.value) == "Unique constraint violation on column: email"


def test_primary_key_checked_before_unique(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT UNIQUE)")
    engine.execute("INSERT INTO users (id, email) VALUES (1, 'a@b.com')")
    with pytest.raises(PrimaryKeyViolation):
        engine.execute("INSERT INTO users (id, email) VALUES (1, 'a@b.com')")


def test_untyped_columns_keep_constraints(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE t (id PRIMARY KEY, email UNIQUE, v TEXT)")
    assert engine.execute("DESCRIBE t")["data"] == [
        {"column": "id", "type": "", "key": "PRI"},
        {"column": "email", "type": "", "key": "UNI"},
        {"column": "v", "type": "TEXT", "key": ""},
    ]

    engine.execute("INSERT INTO t (email) VALUES ('a@b.com')")
    assert engine.execute("SELECT id, email FROM t")["data"] == [{"id": 1, "email": "a@b.com"}]
    with pytest.raises(UniqueViolation):
        engine.execute("INSERT INTO t (email) VALUES ('a@b.com')")

    engine.execute("CREATE TABLE bare (id)")
    assert engine.execute("DESCRIBE bare")["data"] == [{"column": "id", "type": "", "key": ""}]


def test_unique_ignores_missing_values(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT UNIQUE)")
    engine.execute("INSERT INTO users (name) VALUES ('a')")
    engine.execute("INSERT INTO users (name) VALUES ('b')")
    assert engine.execute("SELECT * FROM users")["row_count"] == 2


def test_sparse_rows_project_missing_as_none(db):
    db.execute("INSERT INTO t (v) VALUES ('x')")
    assert db.execute("SELECT v, other FROM t")["data"] == [{"v": "x", "other": None}]


def test_casting_on_insert(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE m (n INTEGER, r REAL, s TEXT)")
    engine.execute("INSERT INTO m (n, r, s) VALUES ('12', 3, 45)")
    assert engine.execute("SELECT * FROM m")["data"] == [{"n": 12, "r": 3.0, "s": "45"}]


def test_where_required_for_update_and_delete(db):
    db.execute("INSERT INTO t (v) VALUES ('x')")
    with pytest.raises(InvalidSyntax):
        db.execute("UPDATE t SET v = 'z'")
    with pytest.raises(InvalidSyntax):
        db.execute("DELETE FROM t")
    assert db.execute("SELECT * FROM t")["data"] == [{"id": 1, "v": "x"}]


def test_update_matching_rows(db):
    db.execute("INSERT INTO t (v) VALUES ('x')")
    db.execute("INSERT INTO t (v) VALUES ('y')")
    result = db.execute("UPDATE t SET v='z' WHERE id=1")
    assert result == {"success": True, "message": "Updated 1 row(s)", "rows_affected": 1}
    assert db.execute("SELECT * FROM t")["data"] == [
        {"id": 1, "v": "z"},
        {"id": 2, "v": "y"},
    ]


def test_delete_matching_rows(db):
    for value in ("a", "b", "c"):
        db.execute(f"INSERT INTO t (v) VALUES ('{value}')")
    result = db.execute("DELETE FROM t WHERE id > 1")
    assert result == {"success": True, "message": "Deleted 2 row(s)", "rows_affected": 2}
    assert db.execute("SELECT * FROM t")["row_count"] == 1


def test_operator_priority(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, age INTEGER)")
    for age in (16, 18, 30):
        engine.execute(f"INSERT INTO people (age) VALUES ({age})")
    rows = engine.execute("SELECT age FROM people WHERE age>=18")["data"]
    assert rows == [{"age": 18}, {"age": 30}]


def test_loose_comparison_in_where(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE items (code TEXT)")
    engine.execute("INSERT INTO items (code) VALUES ('5')")
    assert engine.execute("SELECT * FROM items WHERE code = 5")["row_count"] == 1


def test_select_returns_copies(db):
    db.execute("INSERT INTO t (v) VALUES ('x')")
    db.execute("SELECT * FROM t")["data"][0]["v"] = "changed"
    assert db.execute("SELECT v FROM t")["data"] == [{"v": "x"}]


def test_table_not_found(db):
    for query in (
        "INSERT INTO missing (a) VALUES (1)",
        "SELECT * FROM missing",
        "UPDATE missing SET a = 1 WHERE a = 2",
        "DELETE FROM missing WHERE a = 1",
        "CREATE INDEX i ON missing (a)",
        "DESCRIBE missing",
    ):
        with pytest.raises(TableNotFound) as excinfo:
            db.execute(query)
        assert excinfo.value.table_name == "missing"


def test_unknown_command(db):
    with pytest.raises(UnknownCommand):
        db.execute("DROP TABLE t")


def test_recreate_table_replaces_it(db):
    db.execute("INSERT INTO t (v) VALUES ('x')")
    db.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, w TEXT)")
    assert db.execute("SELECT * FROM t")["row_count"] == 0
    db.execute("INSERT INTO t (w) VALUES ('y')")
    assert db.execute("SELECT * FROM t")["data"] == [{"id": 1, "w": "y"}]


def test_show_tables_and_describe(tmp_path):
    engine = DatabaseEngine(str(tmp_path))
    engine.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT UNIQUE)")
    engine.execute("CREATE TABLE orders (id INTEGER PRIMARY KEY)")

    assert engine.execute("SHOW TABLES") == {
        "success": True,
        "data": [{"table_name": "users"}, {"table_name": "orders"}],
        "row_count": 2,
    }
    assert engine.execute("DESCRIBE users")["data"] == [
        {"column": "id", "type": "INTEGER", "key": "PRI"},
        {"column": "name", "type": "TEXT", "key": ""},
        {"column": "email", "type": "TEXT", "key": "UNI"},
    ]


def test_table_info(db):
    db.execute("INSERT INTO t (v) VALUES ('x')")
    assert db.list_tables() == ["t"]
    assert db.get_table_info("t") == {
        "schema": [
            {"column": "id", "type": "INTEGER", "key": "PRI"},
            {"column": "v", "type": "TEXT", "key": ""},
        ],
        "row_count": 1,
    }
    with pytest.raises(TableNotFound):
        db.get_table_info("missing")


def test_in_memory_engine():
    engine = DatabaseEngine(data_dir=None)
    engine.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
    engine.execute("INSERT INTO t (id) VALUES (3)")
    assert engine.storage is None
    assert engine.execute("SELECT * FROM t")["data"] == [{"id": 3}]
