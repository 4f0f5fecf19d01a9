import pytest

from core.errors import NotFoundError
from core.report_renderer import render_entity_report, render_selection, render_table_report
from models.ddl import (
    ColumnDefinition,
    ForeignKeyDefinition,
    IndexDefinition,
    PrimaryKeyDefinition,
    ReferentialAction,
    TableDDLDefinition,
    UniqueConstraintDefinition,
)
from models.entity import (
    EntityDefinition,
    InheritanceInfo,
    InheritanceStrategy,
    PrimaryKeyInfo,
    PropertyDefinition,
    PropertyKind,
    RelationType,
)


def _table(**kw):
    return TableDDLDefinition(
        catalog="shop",
        schema_name="public",
        table_name="orders",
        columns=(
            ColumnDefinition(name="id", type_name="INTEGER", nullable=False, ordinal_position=1, auto_increment=True),
            ColumnDefinition(name="total", type_name="NUMERIC", size=10, scale=2, ordinal_position=2,
                             comment="Gross amount"),
        ),
        **kw,
    )


def test_table_report_full():
    definition = _table(
        primary_key=PrimaryKeyDefinition(constraint_name="orders_pkey", columns=("id",)),
        foreign_keys=(ForeignKeyDefinition(constraint_name="fk_cust", column_name="customer_id",
                                           referenced_table="customers", referenced_column="id",
                                           delete_rule=ReferentialAction.CASCADE),),
        unique_constraints=(UniqueConstraintDefinition(constraint_name="uq_ref", columns=("ref", "id")),),
        indexes=(IndexDefinition(index_name="ix_total", columns=("total",)),),
    )
    report = render_table_report(definition)
    assert report.startswith("=== Table Metadata ===\nCatalog: shop\nSchema: public\nTable: orders\n")
    assert "\n--- Columns (2) ---\n\nid:\n  Type: INTEGER\n  Nullable: false\n  Auto Increment: true\n" in report
    assert "  Type: NUMERIC(10, 2)\n" in report
    assert "  Remarks: Gross amount\n" in report
    assert "\n--- Primary Key ---\nConstraint: orders_pkey\nColumns: id\n" in report
    assert "  References: customers.id\n  On Delete: CASCADE\n  On Update: NO ACTION\n" in report
    assert "uq_ref: (ref, id)\n" in report
    assert "ix_total:\n  Columns: total\n  Unique: false\n" in report
    sections = ["--- Columns", "--- Primary Key", "--- Foreign Keys", "--- Unique Constraints", "--- Indexes"]
    positions = [report.index(s) for s in sections]
    assert positions == sorted(positions)


def test_table_report_omits_empty_sections():
    report = render_table_report(_table())
    assert "--- Columns (2) ---" in report
    assert "Primary Key" not in report
    assert "Foreign Keys" not in report
    assert "Unique Constraints" not in report
    assert "Indexes" not in report


def test_table_report_requires_name():
    with pytest.raises(ValueError):
        render_table_report(TableDDLDefinition.model_construct(table_name=""))


def test_entity_report():
    definition = EntityDefinition(
        name="PurchaseOrder",
        simple_name="Order",
        full_name="shop.models.Order",
        table_name="orders",
        schema_name="sales",
        versioned=True,
        primary_key=PrimaryKeyInfo(property_name="id", type_name="UUID", column_name="id", generated=True),
        inheritance=InheritanceInfo(strategy=InheritanceStrategy.JOINED, discriminator_value="order"),
        properties=(
            PropertyDefinition(name="customer", type_name="Customer", kind=PropertyKind.ASSOCIATION,
                               column_name="customer_id", mandatory=True,
                               relation_type=RelationType.MANY_TO_ONE, related_entity_name="Customer"),
            PropertyDefinition(name="note", type_name="str", kind=PropertyKind.DATATYPE, markers=("Lob",)),
        ),
        class_markers=("Entity", "Table"),
    )
    report = render_entity_report(definition)
    assert report.startswith("=== Entity Definition ===\nName: PurchaseOrder\nClass: shop.models.Order\n")
    assert "Table: sales.orders\n" in report
    assert "Versioned: true\n" in report
    assert "\n--- Inheritance ---\nStrategy: JOINED\nDiscriminator Value: order\n" in report
    assert "Discriminator Column" not in report
    assert "\n--- Primary Key ---\nProperty: id\nType: UUID\nColumn: id\nGenerated: true\n" in report
    assert "\n--- Properties (2) ---\n" in report
    assert "  Relation: ManyToOne\n  Related Entity: Customer\n" in report
    assert "Mapped By" not in report
    assert "  Markers: Lob\n" in report


def test_entity_report_omits_empty_sections():
    definition = EntityDefinition(name="Address", simple_name="Address", full_name="m.Address",
                                  table_name="ADDRESS", persistent=False, embeddable=True)
    report = render_entity_report(definition)
    assert "Table: ADDRESS\n" in report
    assert "Inheritance" not in report
    assert "Primary Key" not in report
    assert "Properties" not in report


def test_render_selection_keeps_order_and_drops_duplicates():
    text = render_selection(["b", "a", "b"], lambda name: f"body of {name}")
    assert text == "=== b ===\nbody of b\n\n=== a ===\nbody of a\n\n"


def test_render_selection_fails_on_first_error():
    rendered = []

    def render(name):
        if name == "missing":
            raise NotFoundError("Table", name)
        rendered.append(name)
        return name

    with pytest.raises(NotFoundError):
        render_selection(["a", "missing", "b"], render)
    assert rendered == ["a"]
