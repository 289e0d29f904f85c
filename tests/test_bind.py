import pytest
import sqlitethin
from sqlitethin import Double, Int32, Int64, Text
from sqlitethin.native import SQLITE_RANGE


@pytest.fixture
def table(db):
    db.execute("CREATE TABLE t (i INT, big INT, f REAL, s TEXT)")
    return db


def _select_all(db):
    return db.prepare("SELECT i, big, f, s FROM t ORDER BY rowid").query(
        lambda row: (row.optional_int("i"), row.optional_int64("big"),
                     row.optional_double("f"), row.optional_text("s"))
    )


def test_round_trip_by_position(table):
    (table.prepare("INSERT INTO t VALUES (?, ?, ?, ?)")
        .bind(1, Int32(-2147483648))
        .bind(2, Int64(9223372036854775807))
        .bind(3, Double(1.5e-300))
        .bind(4, Text("héllo wörld ☃"))
        .execute())

    assert _select_all(table) == [(-2147483648, 9223372036854775807, 1.5e-300, "héllo wörld ☃")]


def test_round_trip_plain_values(table):
    (table.prepare("INSERT INTO t VALUES (?, ?, ?, ?)")
        .bind(1, 7)
        .bind(2, -(2**40))
        .bind(3, 0.25)
        .bind(4, "plain")
        .execute())

    assert _select_all(table) == [(7, -(2**40), 0.25, "plain")]


def test_bool_binds_as_integer(table):
    table.prepare("INSERT INTO t (i) VALUES (?)").bind(1, True).execute()
    assert table.prepare("SELECT i FROM t").query(lambda row: row.int(0)) == [1]


def test_text_with_embedded_nul(table):
    table.prepare("INSERT INTO t (s) VALUES (?)").bind(1, "a\x00b").execute()
    assert table.prepare("SELECT length(CAST(s AS BLOB)) FROM t").query(lambda row: row.int(0)) == [3]


@pytest.mark.parametrize("value", [Int32(None), Int64(None), Double(None), Text(None), None])
def test_bind_null(table, value):
    table.prepare("INSERT INTO t (s) VALUES (?)").bind(1, value).execute()

    rows = table.prepare("SELECT s FROM t").query(
        lambda row: (row.optional_text("s"), row.is_null("s"), row.column_type("s"))
    )
    assert rows == [(None, True, sqlitethin.ColumnType.NULL)]


def test_null_through_non_optional_accessors(table):
    table.prepare("INSERT INTO t VALUES (?, ?, ?, ?)").bind(1, None).bind(2, None).bind(3, None).bind(4, None).execute()

    rows = table.prepare("SELECT i, big, f, s FROM t").query(
        lambda row: (row.int("i"), row.int64("big"), row.double("f"), row.text("s"))
    )
    assert rows == [(0, 0, 0.0, "")]


def test_named_and_positional_address_same_parameter(table):
    stmt = table.prepare("INSERT INTO t (i, s) VALUES (:i, :s)")
    stmt.bind(":i", Int32(1)).bind(":s", "by name").execute()
    stmt.bind(1, Int32(2)).bind(2, "by position").execute()

    rows = table.prepare("SELECT i, s FROM t ORDER BY i").query(lambda row: (row.int(0), row.text(1)))
    assert rows == [(1, "by name"), (2, "by position")]


def test_named_prefixes(table):
    (table.prepare("INSERT INTO t (i, big, s) VALUES (:i, @big, $s)")
        .bind(":i", 1)
        .bind("@big", 2)
        .bind("$s", "three")
        .execute())

    assert table.prepare("SELECT i, big, s FROM t").query(lambda row: (row.int(0), row.int64(1), row.text(2))) == [(1, 2, "three")]


def test_unknown_name_fails_before_engine_bind(table, monkeypatch):
    stmt = table.prepare("INSERT INTO t (i) VALUES (:i)")
    calls = []
    lib = sqlitethin.load_library()
    monkeypatch.setattr(lib, "sqlite3_bind_int64", lambda *args: calls.append(args) or 0)

    with pytest.raises(sqlitethin.BindError) as excinfo:
        stmt.bind(":missing", 5)
    assert excinfo.value.message == "Bind parameter ':missing' not found!"
    assert excinfo.value.code is None
    assert calls == []


def test_unknown_name_requires_prefix(table):
    stmt = table.prepare("INSERT INTO t (i) VALUES (:i)")
    with pytest.raises(sqlitethin.BindError):
        stmt.bind("i", 5)


def test_engine_rejects_bind_index(table):
    stmt = table.prepare("INSERT INTO t (i) VALUES (?)")
    with pytest.raises(sqlitethin.BindError) as excinfo:
        stmt.bind(2, 5)
    assert excinfo.value.message == "column index out of range"
    assert excinfo.value.code == SQLITE_RANGE


def test_int32_range_checked(table):
    stmt = table.prepare("INSERT INTO t (i) VALUES (?)")
    with pytest.raises(sqlitethin.BindError):
        stmt.bind(1, Int32(2**31))
    with pytest.raises(sqlitethin.BindError):
        stmt.bind(1, 2**63)


def test_unsupported_value_type(table):
    stmt = table.prepare("INSERT INTO t (s) VALUES (?)")
    with pytest.raises(sqlitethin.BindError) as excinfo:
        stmt.bind(1, b"bytes")
    assert "bytes" in excinfo.value.message


def test_rebinding_applies_independently(table):
    stmt = table.prepare("INSERT INTO t (i, s) VALUES (?, ?)")
    stmt.bind(1, Int32(1)).bind(2, "first").execute()
    stmt.bind(1, Int32(2)).bind(2, "second").execute()

    rows = table.prepare("SELECT i, s FROM t ORDER BY rowid").query(lambda row: (row.int("i"), row.text("s")))
    assert rows == [(1, "first"), (2, "second")]


def test_unbound_parameters_keep_previous_binding(table):
    stmt = table.prepare("INSERT INTO t (i, s) VALUES (?, ?)")
    stmt.bind(1, Int32(1)).bind(2, "kept").execute()
    stmt.bind(1, Int32(2)).execute()

    rows = table.prepare("SELECT i, s FROM t ORDER BY rowid").query(lambda row: (row.int("i"), row.text("s")))
    assert rows == [(1, "kept"), (2, "kept")]


def test_clear_bindings(table):
    stmt = table.prepare("INSERT INTO t (i, s) VALUES (?, ?)")
    stmt.bind(1, Int32(1)).bind(2, "gone").execute()
    stmt.clear_bindings().bind(1, Int32(2)).execute()

    rows = table.prepare("SELECT i, s FROM t ORDER BY rowid").query(lambda row: (row.int("i"), row.optional_text("s")))
    assert rows == [(1, "gone"), (2, None)]


def test_parameter_count(table):
    assert table.prepare("INSERT INTO t (i, s) VALUES (:i, :s)").parameter_count == 2
    assert table.prepare("SELECT 1").parameter_count == 0


@pytest.mark.parametrize("value", [Int32(1.5), Int64("7"), Double("x"), Text(5)])
def test_bad_payload_fails_before_engine_bind(table, monkeypatch, value):
    stmt = table.prepare("INSERT INTO t (s) VALUES (?)")
    calls = []
    lib = sqlitethin.load_library()
    for name in ("sqlite3_bind_int", "sqlite3_bind_int64", "sqlite3_bind_double", "sqlite3_bind_text"):
        monkeypatch.setattr(lib, name, lambda *args: calls.append(args) or 0)

    with pytest.raises(sqlitethin.BindError):
        stmt.bind(1, value)
    assert calls == []
