"""
Pytest fixtures for the workshop store.

Every test gets its own SQLite file under tmp_path, so stores never share state.
"""
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event, func, select
from sqlalchemy.exc import OperationalError

from autoorganize.app import create_app
from autoorganize.config import Settings
from autoorganize.database import Base
from autoorganize.store import WorkshopStore


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'workshop.db'}"


@pytest.fixture
def store(db_url):
    """Fresh store with the schema in place."""
    store = WorkshopStore(Settings(database_url=db_url))
    store.init_schema()
    yield store
    store.close()


@pytest.fixture
def client(store):
    app = create_app(store=store)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def john(store):
    return store.add_customer({"name": "John Doe", "phone": "555-1234", "email": "john.doe@email.com"})


@pytest.fixture
def jane(store):
    return store.add_customer({"name": "Jane Smith", "phone": "555-5678"})


@pytest.fixture
def camry(store, john):
    return store.add_vehicle(
        {"customer_id": john, "make": "Toyota", "model": "Camry", "year": 2020, "vin": "ABC123"}
    )


# --- Helpers ---

def table_counts(store):
    """Row count of every table, keyed by table name."""
    with store.engine.connect() as conn:
        return {
            table.name: conn.execute(select(func.count()).select_from(table)).scalar()
            for table in Base.metadata.sorted_tables
        }


@contextmanager
def failing_statement(engine, prefix):
    """Makes the first statement starting with `prefix` fail, as if the database had."""
    prefix = prefix.upper()

    def _fail(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith(prefix):
            raise OperationalError(statement, parameters, Exception("injected fault"))

    event.listen(engine, "before_cursor_execute", _fail)
    try:
        yield
    finally:
        event.remove(engine, "before_cursor_execute", _fail)
