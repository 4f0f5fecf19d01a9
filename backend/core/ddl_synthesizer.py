"""
DDL synthesizer — renders a TableDDLDefinition as portable CREATE TABLE /
CREATE INDEX text. Only identity columns, multi-column keys, referential
actions and index uniqueness are rendered; dialect extras are not.
"""
from typing import Iterable, Optional

from config import settings
from core.schema_introspector import is_primary_key_index
from models.ddl import (
    ColumnDefinition,
    ForeignKeyDefinition,
    IndexDefinition,
    ReferentialAction,
    TableDDLDefinition,
    qualify,
)

_SIZED_TYPE_MARKERS = ("CHAR", "NUMERIC", "DECIMAL", "BINARY")
_INDENT = "    "


def needs_size(type_name: str) -> bool:
    upper = type_name.upper()
    return any(marker in upper for marker in _SIZED_TYPE_MARKERS)


def render_column(column: ColumnDefinition, identity_clause: str) -> str:
    parts = [f"{column.name} {column.type_name}"]
    if column.size is not None and needs_size(column.type_name):
        if column.scale is not None and column.scale > 0:
            parts.append(f"({column.size}, {column.scale})")
        else:
            parts.append(f"({column.size})")
    if not column.nullable:
        parts.append(" NOT NULL")
    if column.default:
        parts.append(f" DEFAULT {column.default}")
    if column.auto_increment:
        parts.append(f" {identity_clause}")
    return "".join(parts)


def _constraint_prefix(name: Optional[str]) -> str:
    return f"CONSTRAINT {name} " if name else ""


def render_foreign_key(fk: ForeignKeyDefinition) -> str:
    clause = (
        f"{_constraint_prefix(fk.constraint_name)}FOREIGN KEY ({fk.column_name}) "
        f"REFERENCES {qualify(fk.referenced_schema, fk.referenced_table)}({fk.referenced_column})"
    )
    if fk.delete_rule is not ReferentialAction.NO_ACTION:
        clause += f" ON DELETE {fk.delete_rule.value}"
    if fk.update_rule is not ReferentialAction.NO_ACTION:
        clause += f" ON UPDATE {fk.update_rule.value}"
    return clause


def render_create_index(definition: TableDDLDefinition, index: IndexDefinition) -> str:
    return f"CREATE INDEX {index.index_name} ON {definition.qualified_name} ({', '.join(index.columns)});"


def render_create_table(
    definition: TableDDLDefinition,
    identity_clause: Optional[str] = None,
    pk_markers: Optional[Iterable[str]] = None,
) -> str:
    """CREATE TABLE statement with inline constraints, then one CREATE INDEX per plain index."""
    if not definition.table_name:
        raise ValueError("table_name must not be empty")
    identity_clause = identity_clause or settings.IDENTITY_CLAUSE
    markers = [m.lower() for m in (pk_markers if pk_markers is not None else settings.pk_index_marker_list)]

    clauses = [render_column(col, identity_clause) for col in definition.columns]

    pk = definition.primary_key
    if pk is not None and pk.columns:
        clauses.append(f"{_constraint_prefix(pk.constraint_name)}PRIMARY KEY ({', '.join(pk.columns)})")

    for uc in definition.unique_constraints:
        clauses.append(f"{_constraint_prefix(uc.constraint_name)}UNIQUE ({', '.join(uc.columns)})")

    clauses.extend(render_foreign_key(fk) for fk in definition.foreign_keys)

    ddl = f"CREATE TABLE {definition.qualified_name} (\n"
    ddl += ",\n".join(_INDENT + clause for clause in clauses)
    ddl += "\n);\n"

    # Unique indexes are already rendered as constraints
    for index in definition.indexes:
        if not index.unique and not is_primary_key_index(index.index_name, markers):
            ddl += "\n" + render_create_index(definition, index)
    return ddl
