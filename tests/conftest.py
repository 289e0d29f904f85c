import pytest
import sqlitethin


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test.db")


@pytest.fixture
def db(db_path):
    conn = sqlitethin.connect(db_path)
    yield conn
    conn.close()
