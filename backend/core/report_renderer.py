"""
Report renderer — human-readable, sectioned text for table and entity definitions.
Sections with nothing to show are left out entirely.
"""
from typing import Callable, Iterable

from models.ddl import TableDDLDefinition
from models.entity import EntityDefinition


def _flag(value: bool) -> str:
    return str(value).lower()


def render_table_report(definition: TableDDLDefinition) -> str:
    if not definition.table_name:
        raise ValueError("table_name must not be empty")

    lines = [
        "=== Table Metadata ===",
        f"Catalog: {definition.catalog}",
        f"Schema: {definition.schema_name}",
        f"Table: {definition.table_name}",
    ]

    if definition.columns:
        lines.append(f"\n--- Columns ({len(definition.columns)}) ---")
        for col in definition.columns:
            lines.append(f"\n{col.name}:")
            type_text = col.type_name
            if col.size is not None:
                if col.scale is not None and col.scale > 0:
                    type_text += f"({col.size}, {col.scale})"
                else:
                    type_text += f"({col.size})"
            lines.append(f"  Type: {type_text}")
            lines.append(f"  Nullable: {_flag(col.nullable)}")
            if col.default:
                lines.append(f"  Default: {col.default}")
            if col.auto_increment:
                lines.append("  Auto Increment: true")
            lines.append(f"  Ordinal Position: {col.ordinal_position}")
            if col.comment:
                lines.append(f"  Remarks: {col.comment}")

    pk = definition.primary_key
    if pk is not None:
        lines.append("\n--- Primary Key ---")
        lines.append(f"Constraint: {pk.constraint_name}")
        lines.append(f"Columns: {', '.join(pk.columns)}")

    if definition.foreign_keys:
        lines.append(f"\n--- Foreign Keys ({len(definition.foreign_keys)}) ---")
        for fk in definition.foreign_keys:
            lines.append(f"\n{fk.constraint_name}:")
            lines.append(f"  Column: {fk.column_name}")
            lines.append(f"  References: {fk.referenced_table}.{fk.referenced_column}")
            lines.append(f"  On Delete: {fk.delete_rule.value}")
            lines.append(f"  On Update: {fk.update_rule.value}")

    if definition.unique_constraints:
        lines.append(f"\n--- Unique Constraints ({len(definition.unique_constraints)}) ---")
        for uc in definition.unique_constraints:
            lines.append(f"{uc.constraint_name}: ({', '.join(uc.columns)})")

    if definition.indexes:
        lines.append(f"\n--- Indexes ({len(definition.indexes)}) ---")
        for idx in definition.indexes:
            lines.append(f"{idx.index_name}:")
            lines.append(f"  Columns: {', '.join(idx.columns)}")
            lines.append(f"  Unique: {_flag(idx.unique)}")

    return "\n".join(lines) + "\n"


def render_entity_report(definition: EntityDefinition) -> str:
    if not definition.name:
        raise ValueError("entity name must not be empty")

    table = f"{definition.schema_name}.{definition.table_name}" if definition.schema_name else definition.table_name
    lines = [
        "=== Entity Definition ===",
        f"Name: {definition.name}",
        f"Class: {definition.full_name}",
        f"Table: {table}",
        f"Persistent: {_flag(definition.persistent)}",
        f"Embeddable: {_flag(definition.embeddable)}",
        f"Soft Deletable: {_flag(definition.soft_deletable)}",
        f"Versioned: {_flag(definition.versioned)}",
    ]
    if definition.class_markers:
        lines.append(f"Markers: {', '.join(definition.class_markers)}")

    inheritance = definition.inheritance
    if inheritance is not None:
        lines.append("\n--- Inheritance ---")
        strategy = inheritance.strategy.value if inheritance.strategy else None
        lines.append(f"Strategy: {strategy}")
        if inheritance.discriminator_column is not None:
            lines.append(f"Discriminator Column: {inheritance.discriminator_column}")
        if inheritance.discriminator_value is not None:
            lines.append(f"Discriminator Value: {inheritance.discriminator_value}")

    pk = definition.primary_key
    if pk is not None:
        lines.append("\n--- Primary Key ---")
        lines.append(f"Property: {pk.property_name}")
        lines.append(f"Type: {pk.type_name}")
        lines.append(f"Column: {pk.column_name}")
        lines.append(f"Generated: {_flag(pk.generated)}")

    if definition.properties:
        lines.append(f"\n--- Properties ({len(definition.properties)}) ---")
        for prop in definition.properties:
            lines.append(f"\n{prop.name}:")
            lines.append(f"  Type: {prop.type_name}")
            lines.append(f"  Property Type: {prop.kind.value}")
            if prop.column_name is not None:
                lines.append(f"  Column: {prop.column_name}")
            if prop.column_definition is not None:
                lines.append(f"  Column Definition: {prop.column_definition}")
            lines.append(f"  Mandatory: {_flag(prop.mandatory)}")
            lines.append(f"  Read Only: {_flag(prop.read_only)}")
            if prop.length is not None:
                lines.append(f"  Length: {prop.length}")
            if prop.precision is not None:
                scale = f", {prop.scale}" if prop.scale else ""
                lines.append(f"  Precision: {prop.precision}{scale}")

            if prop.relation_type is not None:
                lines.append(f"  Relation: {prop.relation_type.value}")
                lines.append(f"  Related Entity: {prop.related_entity_name}")
                if prop.mapped_by is not None:
                    lines.append(f"  Mapped By: {prop.mapped_by}")
                if prop.fetch_type is not None:
                    lines.append(f"  Fetch: {prop.fetch_type.value}")
                if prop.cascade_types:
                    lines.append(f"  Cascade: {', '.join(prop.cascade_types)}")

            if prop.enum_class is not None:
                lines.append(f"  Enum Class: {prop.enum_class}")
                encoding = prop.enum_encoding.value if prop.enum_encoding else None
                lines.append(f"  Enum Type: {encoding}")

            if prop.markers:
                lines.append(f"  Markers: {', '.join(prop.markers)}")

    return "\n".join(lines) + "\n"


def render_selection(items: Iterable[str], render: Callable[[str], str]) -> str:
    """Render each selected name once, in selection order, as a titled block."""
    blocks = []
    for name in dict.fromkeys(items):
        blocks.append(f"=== {name} ===\n{render(name)}\n\n")
    return "".join(blocks)
