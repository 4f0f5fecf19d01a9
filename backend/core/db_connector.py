"""
Database connector — SQLAlchemy engine factory and catalog accessor.
Supports SQLite, PostgreSQL and MySQL. Exposes tables, columns, PK/FK constraints
and indexes as uniform catalog rows, one pooled connection per logical operation.
"""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy import types as sqltypes
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.engine.interfaces import Dialect
from sqlalchemy.exc import CompileError, OperationalError

from config import settings
from models.catalog import ColumnRow, ImportedKeyRow, IndexInfoRow, PrimaryKeyRow
from models.connection import ConnectionRequest
from models.ddl import ReferentialAction

logger = logging.getLogger(__name__)

# ODBC SQL type codes by SQLAlchemy type family, most specific first
_SQL_TYPE_CODES: tuple[tuple[type, int], ...] = (
    (sqltypes.Boolean, -7),
    (sqltypes.BigInteger, -5),
    (sqltypes.SmallInteger, 5),
    (sqltypes.Integer, 4),
    (sqltypes.REAL, 7),
    (sqltypes.Double, 8),
    (sqltypes.Float, 6),
    (sqltypes.DECIMAL, 3),
    (sqltypes.Numeric, 2),
    (sqltypes.Text, -1),
    (sqltypes.NCHAR, -8),
    (sqltypes.Unicode, -9),
    (sqltypes.CHAR, 1),
    (sqltypes.String, 12),
    (sqltypes.LargeBinary, -4),
    (sqltypes.VARBINARY, -3),
    (sqltypes.BINARY, -2),
    (sqltypes.DateTime, 93),
    (sqltypes.Date, 91),
    (sqltypes.Time, 92),
    (sqltypes.Uuid, -11),
)


def create_engine_from_request(req: ConnectionRequest) -> Engine:
    """Build and test a pooled SQLAlchemy engine from a ConnectionRequest."""
    if req.db_type == "sqlite" and not Path(req.file_path or "").is_file():
        raise ValueError(f"SQLite database file not found: {req.file_path}")

    engine_kwargs: dict = {"pool_pre_ping": True}
    if req.db_type != "sqlite":
        engine_kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        )
    engine = create_engine(req.get_sqlalchemy_url(), **engine_kwargs)
    # Validate the connection immediately
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except OperationalError as e:
        engine.dispose()
        raise ValueError(f"Could not connect to database: {e}") from e
    return engine


class CatalogSession:
    """Catalog queries bound to a single pooled connection.

    Every query builds a fresh Inspector, so each one is an independent
    round-trip to the catalog rather than a cached answer from an earlier call.
    The ``catalog`` argument of each query is implied by the connection itself.
    """

    def __init__(self, conn: Connection, schema: Optional[str] = None):
        self.conn = conn
        self.dialect_name = conn.dialect.name
        self.catalog = _get_catalog_name(conn)
        self.schema = schema or _get_default_schema(conn)

    def _inspector(self):
        return inspect(self.conn)

    def table_names(self, schema: Optional[str] = None) -> list[str]:
        return list(self._inspector().get_table_names(schema=schema))

    def resolve_table(self, catalog: Optional[str], schema: Optional[str], name_pattern: str) -> Optional[str]:
        """Return the catalog's spelling of ``name_pattern`` if a table matches it exactly."""
        for name in self._inspector().get_table_names(schema=schema):
            if name == name_pattern:
                return name
        return None

    def columns(self, catalog: Optional[str], schema: Optional[str], table_name: str) -> list[ColumnRow]:
        rows = []
        raw_cols = self._inspector().get_columns(table_name, schema=schema)
        for position, col in enumerate(raw_cols, start=1):
            col_type = col["type"]
            size, scale = _type_size(col_type)
            default = col.get("default")
            rows.append(ColumnRow(
                table_name=table_name,
                column_name=col["name"],
                type_name=_type_name(col_type, self.conn.dialect),
                data_type=_sql_type_code(col_type),
                column_size=size,
                decimal_digits=scale,
                nullable=bool(col.get("nullable", True)),
                column_def=str(default) if default is not None else None,
                ordinal_position=position,
                remarks=col.get("comment"),
                is_autoincrement=col.get("autoincrement") is True or bool(col.get("identity")),
            ))
        return rows

    def primary_keys(self, catalog: Optional[str], schema: Optional[str], table_name: str) -> list[PrimaryKeyRow]:
        pk = self._inspector().get_pk_constraint(table_name, schema=schema)
        return [
            PrimaryKeyRow(table_name=table_name, column_name=col, key_seq=seq, pk_name=pk.get("name"))
            for seq, col in enumerate(pk.get("constrained_columns") or [], start=1)
        ]

    def imported_foreign_keys(self, catalog: Optional[str], schema: Optional[str], table_name: str) -> list[ImportedKeyRow]:
        rows = []
        for fk in self._inspector().get_foreign_keys(table_name, schema=schema):
            options = fk.get("options") or {}
            for local, remote in zip(fk["constrained_columns"], fk["referred_columns"]):
                rows.append(ImportedKeyRow(
                    fk_name=fk.get("name"),
                    fkcolumn_name=local,
                    pktable_schem=fk.get("referred_schema"),
                    pktable_name=fk["referred_table"],
                    pkcolumn_name=remote,
                    update_rule=_rule_code(options.get("onupdate")),
                    delete_rule=_rule_code(options.get("ondelete")),
                ))
        return rows

    def index_info(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table_name: str,
        unique: bool = False,
    ) -> list[IndexInfoRow]:
        """One row per indexed column; ``unique=True`` restricts to unique indexes.

        Unique constraints that no reported index stands for (SQLite's
        ``sqlite_autoindex_*`` indexes) are reported as unique indexes too.
        """
        inspector = self._inspector()
        rows = []
        covered: set[frozenset] = set()
        for ix in inspector.get_indexes(table_name, schema=schema):
            is_unique = bool(ix.get("unique"))
            if unique and not is_unique:
                continue
            if is_unique:
                covered.add(frozenset(ix.get("column_names") or ()))
            sorting = ix.get("column_sorting") or {}
            expressions = ix.get("expressions") or []
            for i, col_name in enumerate(ix.get("column_names") or []):
                if col_name is None and i < len(expressions):
                    col_name = expressions[i]   # expression-based member
                rows.append(IndexInfoRow(
                    table_name=table_name,
                    index_name=ix.get("name"),
                    column_name=col_name,
                    non_unique=not is_unique,
                    asc_or_desc="D" if "desc" in sorting.get(col_name, ()) else "A",
                ))
        rows.extend(self._unique_constraint_rows(inspector, schema, table_name, covered))
        return rows

    def _unique_constraint_rows(self, inspector, schema, table_name, covered) -> list[IndexInfoRow]:
        rows = []
        unnamed = 0
        for uc in inspector.get_unique_constraints(table_name, schema=schema):
            columns = uc.get("column_names") or []
            if not columns or frozenset(columns) in covered:
                continue
            covered.add(frozenset(columns))
            name = uc.get("name")
            if name is None:
                unnamed += 1
                name = f"sqlite_autoindex_{table_name}_{unnamed}"
            rows.extend(
                IndexInfoRow(table_name=table_name, index_name=name, column_name=col,
                             non_unique=False, asc_or_desc="A")
                for col in columns
            )
        return rows


class CatalogAccessor:
    """Thin wrapper over a connection pool exposing catalog metadata queries.

    ``session()`` holds one connection for a multi-query operation; the
    per-query methods each acquire and release their own.
    """

    def __init__(self, engine: Engine, schema: Optional[str] = None):
        self.engine = engine
        self.schema = schema

    @contextmanager
    def session(self) -> Iterator[CatalogSession]:
        with self.engine.connect() as conn:
            yield CatalogSession(conn, self.schema)

    def table_names(self, schema: Optional[str] = None) -> list[str]:
        with self.session() as s:
            return s.table_names(schema if schema is not None else s.schema)

    def resolve_table(self, catalog: Optional[str], schema: Optional[str], name_pattern: str) -> Optional[str]:
        with self.session() as s:
            return s.resolve_table(catalog, schema, name_pattern)

    def columns(self, catalog: Optional[str], schema: Optional[str], table_name: str) -> list[ColumnRow]:
        with self.session() as s:
            return s.columns(catalog, schema, table_name)

    def primary_keys(self, catalog: Optional[str], schema: Optional[str], table_name: str) -> list[PrimaryKeyRow]:
        with self.session() as s:
            return s.primary_keys(catalog, schema, table_name)

    def imported_foreign_keys(self, catalog: Optional[str], schema: Optional[str], table_name: str) -> list[ImportedKeyRow]:
        with self.session() as s:
            return s.imported_foreign_keys(catalog, schema, table_name)

    def index_info(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table_name: str,
        unique: bool = False,
    ) -> list[IndexInfoRow]:
        with self.session() as s:
            return s.index_info(catalog, schema, table_name, unique=unique)


def _type_name(col_type: sqltypes.TypeEngine, dialect: Dialect) -> str:
    try:
        data_type = col_type.compile(dialect=dialect).upper()
    except CompileError:
        data_type = type(col_type).__name__.upper()
    # Simplify long type strings
    if "(" in data_type:
        data_type = data_type.split("(")[0].strip()
    return data_type


def _type_size(col_type: sqltypes.TypeEngine) -> tuple[Optional[int], Optional[int]]:
    size = getattr(col_type, "length", None)
    if size is None:
        size = getattr(col_type, "precision", None)
    scale = getattr(col_type, "scale", None)
    return (
        size if isinstance(size, int) else None,
        scale if isinstance(scale, int) else None,
    )


def _sql_type_code(col_type: sqltypes.TypeEngine) -> int:
    for family, code in _SQL_TYPE_CODES:
        if isinstance(col_type, family):
            return code
    return 0


def _rule_code(rule: Optional[str]) -> Optional[int]:
    """Encode a dialect's textual ON DELETE/UPDATE rule as its numeric catalog code."""
    if not rule:
        return None
    try:
        return ReferentialAction(" ".join(rule.upper().split())).code
    except ValueError:
        logger.debug("Unrecognised referential action %r", rule)
        return None


def _get_default_schema(conn: Connection) -> Optional[str]:
    if conn.dialect.name == "sqlite":
        return None   # SQLite has no schema concept
    return inspect(conn).default_schema_name


def _get_catalog_name(conn: Connection) -> Optional[str]:
    if conn.dialect.name == "sqlite":
        return None
    return conn.engine.url.database
