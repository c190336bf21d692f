from sqlalchemy import create_engine, inspect, text

from autoorganize.config import Settings
from autoorganize.store import WorkshopStore

from conftest import table_counts

EXPECTED_TABLES = {"customers", "vehicles", "tasks", "invoices", "invoice_items", "schedule", "photos"}


def _columns(store, table):
    return {column["name"] for column in inspect(store.engine).get_columns(table)}


def test_init_schema_creates_every_table(store):
    assert EXPECTED_TABLES <= set(inspect(store.engine).get_table_names())


def test_init_schema_twice_keeps_schema_and_rows(store, john, camry):
    tables_before = {table: _columns(store, table) for table in EXPECTED_TABLES}
    counts_before = table_counts(store)

    store.init_schema()

    assert {table: _columns(store, table) for table in EXPECTED_TABLES} == tables_before
    assert table_counts(store) == counts_before
    assert store.get_customer(john).name == "John Doe"


def test_init_schema_adds_missing_columns_to_an_older_database(tmp_path):
    url = f"sqlite:///{tmp_path / 'old.db'}"

    # First release: invoices had no number/notes, line items had no position
    old = create_engine(url)
    with old.begin() as conn:
        conn.execute(text("CREATE TABLE customers (id VARCHAR(36) PRIMARY KEY, name VARCHAR(255) NOT NULL, "
                          "phone VARCHAR(50), email VARCHAR(255), address VARCHAR(500))"))
        conn.execute(text("CREATE TABLE invoices (id VARCHAR(36) PRIMARY KEY, customer_id VARCHAR(36) NOT NULL "
                          "REFERENCES customers(id), task_id VARCHAR(36), issue_date DATE, due_date DATE, "
                          "total_amount NUMERIC(12, 2) NOT NULL, payment_status VARCHAR(20) NOT NULL)"))
        conn.execute(text("CREATE TABLE invoice_items (id VARCHAR(36) PRIMARY KEY, invoice_id VARCHAR(36) NOT NULL "
                          "REFERENCES invoices(id), description VARCHAR(500), quantity NUMERIC(10, 3) NOT NULL, "
                          "unit_price NUMERIC(12, 2) NOT NULL, total_price NUMERIC(12, 2) NOT NULL)"))
        conn.execute(text("INSERT INTO customers (id, name) VALUES ('c1', 'Bob Johnson')"))
        conn.execute(text("INSERT INTO invoices (id, customer_id, issue_date, total_amount, payment_status) "
                          "VALUES ('i1', 'c1', '2025-06-10', 50, 'Paid')"))
        conn.execute(text("INSERT INTO invoice_items (id, invoice_id, description, quantity, unit_price, total_price) "
                          "VALUES ('li1', 'i1', 'Tire Rotation Labor', 1, 50, 50)"))
    old.dispose()

    store = WorkshopStore(Settings(database_url=url))
    try:
        store.init_schema()
        store.init_schema()  # second run hits "duplicate column" and carries on

        assert {"invoice_number", "notes"} <= _columns(store, "invoices")
        assert "position" in _columns(store, "invoice_items")

        invoice = store.get_invoice("i1")
        assert invoice.customer_name == "Bob Johnson"
        assert invoice.invoice_number is None
        assert [item.description for item in invoice.line_items] == ["Tire Rotation Labor"]
        assert str(invoice.total_amount) == "50.00"
    finally:
        store.close()


def test_foreign_keys_are_enforced(store):
    with store.engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
