import pytest
from sqlalchemy import types as sqltypes

from core.db_connector import (
    CatalogAccessor,
    _rule_code,
    _sql_type_code,
    create_engine_from_request,
)
from models.connection import ConnectionRequest


def test_create_engine_missing_sqlite_file(tmp_path):
    req = ConnectionRequest(db_type="sqlite", service_name="missing", file_path=str(tmp_path / "nope.db"))
    with pytest.raises(ValueError, match="not found"):
        create_engine_from_request(req)


def test_table_names(sqlite_catalog):
    assert sorted(sqlite_catalog.table_names()) == ["customers", "orders"]


def test_session_scope(sqlite_catalog):
    with sqlite_catalog.session() as s:
        assert s.catalog is None
        assert s.schema is None
        assert s.resolve_table(None, None, "orders") == "orders"
        assert s.resolve_table(None, None, "ORDERS") is None


def test_columns(sqlite_catalog):
    cols = {c.column_name: c for c in sqlite_catalog.columns(None, None, "orders")}
    assert [c.ordinal_position for c in cols.values()] == [1, 2, 3, 4, 5]

    total = cols["total"]
    assert total.type_name == "NUMERIC"
    assert total.data_type == 2
    assert total.column_size == 10
    assert total.decimal_digits == 2

    status = cols["status"]
    assert status.type_name == "VARCHAR"
    assert status.data_type == 12
    assert status.column_size == 20
    assert status.column_def == "'NEW'"

    assert cols["order_id"].data_type == 4
    assert cols["order_id"].nullable is False


def test_primary_keys_keep_key_sequence(sqlite_catalog):
    rows = sqlite_catalog.primary_keys(None, None, "orders")
    assert [(r.column_name, r.key_seq) for r in rows] == [("order_id", 1), ("line_no", 2)]


def test_imported_foreign_keys(sqlite_catalog):
    rows = sqlite_catalog.imported_foreign_keys(None, None, "orders")
    assert len(rows) == 1
    fk = rows[0]
    assert fk.fkcolumn_name == "customer_id"
    assert fk.pktable_name == "customers"
    assert fk.pkcolumn_name == "id"
    assert fk.delete_rule == 0


def test_index_info(sqlite_catalog):
    rows = sqlite_catalog.index_info(None, None, "orders")
    assert [(r.index_name, r.column_name) for r in rows] == [
        ("ix_orders_customer_status", "customer_id"),
        ("ix_orders_customer_status", "status"),
    ]
    assert all(r.non_unique and r.asc_or_desc == "A" for r in rows)

    assert sqlite_catalog.index_info(None, None, "orders", unique=True) == []
    unique = sqlite_catalog.index_info(None, None, "customers", unique=True)
    assert [(r.index_name, r.column_name) for r in unique] == [("uq_customers_email", "email")]


def test_index_info_reports_table_unique_constraints(users_catalog):
    unique = users_catalog.index_info(None, None, "users", unique=True)
    by_name: dict = {}
    for r in unique:
        assert r.non_unique is False
        by_name.setdefault(r.index_name, []).append(r.column_name)
    assert by_name == {"uq_ab": ["a", "b"], "sqlite_autoindex_users_1": ["email"]}

    # unique rows are part of the unfiltered listing too
    assert len(users_catalog.index_info(None, None, "users")) == 3


def test_connections_are_released(sqlite_engine):
    catalog = CatalogAccessor(sqlite_engine)
    catalog.columns(None, None, "customers")
    assert sqlite_engine.pool.checkedout() == 0

    with pytest.raises(RuntimeError):
        with catalog.session():
            assert sqlite_engine.pool.checkedout() == 1
            raise RuntimeError("boom")
    assert sqlite_engine.pool.checkedout() == 0


@pytest.mark.parametrize("type_, code", [
    (sqltypes.Integer(), 4),
    (sqltypes.BigInteger(), -5),
    (sqltypes.Boolean(), -7),
    (sqltypes.REAL(), 7),
    (sqltypes.Float(), 6),
    (sqltypes.DECIMAL(10, 2), 3),
    (sqltypes.Numeric(10, 2), 2),
    (sqltypes.Text(), -1),
    (sqltypes.CHAR(3), 1),
    (sqltypes.String(20), 12),
    (sqltypes.LargeBinary(), -4),
    (sqltypes.DateTime(), 93),
    (sqltypes.Date(), 91),
    (sqltypes.Uuid(), -11),
    (sqltypes.JSON(), 0),
])
def test_sql_type_codes(type_, code):
    assert _sql_type_code(type_) == code


def test_rule_codes():
    assert _rule_code("CASCADE") == 0
    assert _rule_code("set null") == 2
    assert _rule_code("SET  DEFAULT") == 4
    assert _rule_code("NO ACTION") == 3
    assert _rule_code(None) is None
    assert _rule_code("DEFERRABLE") is None
