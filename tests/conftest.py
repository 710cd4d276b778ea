"""Shared test fixtures."""

import csv
import gzip
import io

import pytest

from csvseeder import create_service

USERS_DDL = """
CREATE TABLE users (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    first_name  TEXT,
    last_name   TEXT,
    email       TEXT,
    password    TEXT
);
"""


@pytest.fixture
def db_service(tmp_path):
    """Provide a fresh SQLite DatabaseService for each test."""
    db_path = tmp_path / "test.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    yield service
    service.close()


@pytest.fixture
def users_table(db_service):
    db_service.execute_ddl(USERS_DDL)
    return "users"


@pytest.fixture
def write_csv(tmp_path):
    """Write rows to a CSV file in tmp_path and return its path."""

    def _write(rows, name="seed.csv", delimiter=",", bom=False, gzipped=False):
        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
        writer.writerows(rows)
        text = buffer.getvalue()
        if bom:
            text = "\ufeff" + text

        data = text.encode("utf-8")
        path = tmp_path / name
        path.write_bytes(gzip.compress(data) if gzipped else data)
        return path

    return _write
