"""
Schema introspector — rebuilds a TableDDLDefinition from catalog metadata.
All queries for one table run on a single pooled connection; any catalog
failure surfaces as one IntrospectionError and no partial definition.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from config import settings
from core.db_connector import CatalogAccessor, CatalogSession
from core.errors import IntrospectionError, NotFoundError
from models.catalog import ColumnRow, ImportedKeyRow, IndexInfoRow, PrimaryKeyRow
from models.ddl import (
    ColumnDefinition,
    ForeignKeyDefinition,
    IndexDefinition,
    PrimaryKeyDefinition,
    ReferentialAction,
    SortOrder,
    TableDDLDefinition,
    UniqueConstraintDefinition,
)

logger = logging.getLogger(__name__)


def get_table_ddl_definition(
    catalog: CatalogAccessor,
    table_name: str,
    pk_markers: Optional[Iterable[str]] = None,
) -> TableDDLDefinition:
    """Introspect one table into an immutable TableDDLDefinition.

    Raises NotFoundError when no spelling of ``table_name`` exists and
    IntrospectionError when any catalog query fails.
    """
    if not table_name or not table_name.strip():
        raise ValueError("table_name must not be empty")
    markers = [m.lower() for m in (pk_markers if pk_markers is not None else settings.pk_index_marker_list)]

    try:
        with catalog.session() as s:
            actual = find_actual_table_name(s, table_name)
            if actual is None:
                raise NotFoundError("Table", table_name)

            definition = TableDDLDefinition(
                catalog=s.catalog,
                schema_name=s.schema,
                table_name=actual,
                columns=build_columns(s.columns(s.catalog, s.schema, actual)),
                primary_key=build_primary_key(s.primary_keys(s.catalog, s.schema, actual)),
                foreign_keys=build_foreign_keys(s.imported_foreign_keys(s.catalog, s.schema, actual)),
                indexes=group_indexes(s.index_info(s.catalog, s.schema, actual, unique=False)),
                unique_constraints=group_unique_constraints(
                    s.index_info(s.catalog, s.schema, actual, unique=True), markers
                ),
            )
    except SQLAlchemyError as e:
        logger.warning("Introspection of table %s failed: %s", table_name, e)
        raise IntrospectionError(table_name, e) from e

    logger.info(
        "Introspected %s: %d columns, %d foreign keys, %d indexes",
        definition.qualified_name, len(definition.columns),
        len(definition.foreign_keys), len(definition.indexes),
    )
    return definition


def list_table_names(catalog: CatalogAccessor, schema: Optional[str] = None) -> list[str]:
    """All table names visible to the connection, sorted case-insensitively."""
    try:
        names = catalog.table_names(schema)
    except SQLAlchemyError as e:
        logger.warning("Listing tables failed: %s", e)
        raise IntrospectionError(None, e) from e
    return sorted(names, key=str.lower)


def find_actual_table_name(session: CatalogSession, table_name: str) -> Optional[str]:
    """Try the name as given, then upper-case, then lower-case."""
    for candidate in (table_name, table_name.upper(), table_name.lower()):
        actual = session.resolve_table(session.catalog, session.schema, candidate)
        if actual is not None:
            if actual != table_name:
                logger.debug("Resolved table %s as %s", table_name, actual)
            return actual
    return None


def build_columns(rows: list[ColumnRow]) -> tuple[ColumnDefinition, ...]:
    ordered = sorted(rows, key=lambda r: r.ordinal_position)
    return tuple(
        ColumnDefinition(
            name=r.column_name,
            type_name=r.type_name,
            type_code=r.data_type,
            size=r.column_size,
            scale=r.decimal_digits,
            nullable=r.nullable,
            default=r.column_def,
            ordinal_position=r.ordinal_position,
            comment=r.remarks,
            auto_increment=r.is_autoincrement,
        )
        for r in ordered
    )


def build_primary_key(rows: list[PrimaryKeyRow]) -> Optional[PrimaryKeyDefinition]:
    if not rows:
        return None
    by_seq = {r.key_seq: r for r in rows}
    ordered = [by_seq[seq] for seq in sorted(by_seq)]
    return PrimaryKeyDefinition(
        constraint_name=ordered[0].pk_name,
        columns=tuple(r.column_name for r in ordered),
    )


def build_foreign_keys(rows: list[ImportedKeyRow]) -> tuple[ForeignKeyDefinition, ...]:
    return tuple(
        ForeignKeyDefinition(
            constraint_name=r.fk_name,
            column_name=r.fkcolumn_name,
            referenced_schema=r.pktable_schem,
            referenced_table=r.pktable_name,
            referenced_column=r.pkcolumn_name,
            delete_rule=ReferentialAction.from_code(r.delete_rule),
            update_rule=ReferentialAction.from_code(r.update_rule),
        )
        for r in rows
    )


def _group_by_index_name(rows: list[IndexInfoRow]) -> dict[str, list[IndexInfoRow]]:
    # dicts keep insertion order, so first-seen index order and column order are preserved
    groups: dict[str, list[IndexInfoRow]] = {}
    for r in rows:
        if r.index_name is None:
            continue   # table statistics row
        groups.setdefault(r.index_name, []).append(r)
    return groups


def group_indexes(rows: list[IndexInfoRow]) -> tuple[IndexDefinition, ...]:
    indexes = []
    for name, members in _group_by_index_name(rows).items():
        first = members[0]
        indexes.append(IndexDefinition(
            index_name=name,
            columns=tuple(m.column_name for m in members if m.column_name is not None),
            unique=not first.non_unique,
            sort_order=SortOrder.from_marker(first.asc_or_desc),
        ))
    return tuple(indexes)


def group_unique_constraints(
    rows: list[IndexInfoRow],
    pk_markers: Iterable[str],
) -> tuple[UniqueConstraintDefinition, ...]:
    """Unique indexes as constraints, minus those backing the primary key."""
    markers = [m.lower() for m in pk_markers]
    constraints = []
    for name, members in _group_by_index_name(rows).items():
        if is_primary_key_index(name, markers):
            continue
        constraints.append(UniqueConstraintDefinition(
            constraint_name=name,
            columns=tuple(m.column_name for m in members if m.column_name is not None),
        ))
    return tuple(constraints)


def is_primary_key_index(index_name: str, pk_markers: Iterable[str]) -> bool:
    lowered = index_name.lower()
    return any(marker in lowered for marker in pk_markers)
