"""Example: basic sqlitethin usage.

Uses the system sqlite library; point SQLITETHIN_NATIVE_LIB at another build
to override it:
    SQLITETHIN_NATIVE_LIB=/path/to/libsqlite3.so python example.py
"""

import os
import tempfile

import sqlitethin
from sqlitethin import Int32, Text


def main():
    # Create a temporary database file for this example.
    db_path = os.path.join(tempfile.gettempdir(), "sqlitethin_example.db")

    with sqlitethin.connect(db_path) as db:
        print(f"sqlite {sqlitethin.sqlite_version()}")

        db.execute("DROP TABLE IF EXISTS test")
        db.execute("CREATE TABLE test(col TEXT NOT NULL, i INT NOT NULL, n INT)")

        # One prepared statement, rebound for every row.
        insert = db.prepare("INSERT INTO test (col, i, n) VALUES (:col, :i, :n)")
        rows = [
            ("Test content", 42, None),
            ("Other content", 7, 3),
            ("Third", 1, None),
        ]
        for col, i, n in rows:
            insert.bind(":col", Text(col)).bind(":i", Int32(i)).bind(":n", Int32(n)).execute()

        # Parameterised lookup with typed row extraction.
        results = db.prepare("SELECT * FROM test WHERE col LIKE ?").bind(1, "T%").query(
            lambda row: (row.text("col"), row.int("i"), row.optional_int("n"))
        )
        print("Rows matching 'T%':")
        for col, i, n in results:
            print(f"  col={col!r}  i={i}  n={n}")

        print(f"\nTable 'Test' exists: {db.table_exists('Test')}")
        print(f"Table 'missing' exists: {db.table_exists('missing')}")

    # Clean up.
    try:
        os.unlink(db_path)
    except FileNotFoundError:
        pass

    print("\nDone.")


if __name__ == "__main__":
    main()
