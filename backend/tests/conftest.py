import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
import tempfile
from fastapi.testclient import TestClient

from core.db_connector import CatalogAccessor, create_engine_from_request
from main import app
from models.connection import ConnectionRequest

SCHEMA_SQL = """
CREATE TABLE customers (
    id INTEGER PRIMARY KEY,
    name VARCHAR(50) NOT NULL,
    email TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE UNIQUE INDEX uq_customers_email ON customers (email);

CREATE TABLE orders (
    order_id INTEGER NOT NULL,
    line_no INTEGER NOT NULL,
    customer_id INTEGER NOT NULL,
    total NUMERIC(10, 2),
    status VARCHAR(20) DEFAULT 'NEW',
    PRIMARY KEY (order_id, line_no),
    CONSTRAINT fk_orders_customer FOREIGN KEY (customer_id) REFERENCES customers (id) ON DELETE CASCADE
);
CREATE INDEX ix_orders_customer_status ON orders (customer_id, status);
"""


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def temp_sqlite_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        conn = sqlite3.connect(path)
        conn.executescript(SCHEMA_SQL)
        conn.execute("INSERT INTO customers (name, email) VALUES ('Test User', 'test@example.com');")
        conn.commit()
        conn.close()
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def sqlite_engine(temp_sqlite_db):
    req = ConnectionRequest(db_type="sqlite", service_name="test_sqlite", file_path=temp_sqlite_db)
    engine = create_engine_from_request(req)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_catalog(sqlite_engine):
    return CatalogAccessor(sqlite_engine)


USERS_SQL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    email TEXT UNIQUE,
    a INT,
    b INT,
    CONSTRAINT uq_ab UNIQUE (a, b)
);
"""


@pytest.fixture
def users_catalog(tmp_path):
    """Catalog over a table whose unique constraints live only in the table definition."""
    path = str(tmp_path / "users.db")
    conn = sqlite3.connect(path)
    conn.executescript(USERS_SQL)
    conn.close()
    engine = create_engine_from_request(
        ConnectionRequest(db_type="sqlite", service_name="test_users", file_path=path)
    )
    yield CatalogAccessor(engine)
    engine.dispose()
