"""
Reflective field resolver — walks a class's ancestry and reports the mapping
markers carried by each field and by the class itself.

Marker names are plain strings so that callers can test for presence without
importing SQLAlchemy. Any key in a column's or relationship's ``info`` dict is
reported verbatim as an extra marker.
"""
import dataclasses
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import Column, Sequence, Table, inspect as sa_inspect
from sqlalchemy import types as sqltypes
from sqlalchemy.orm import (
    ColumnProperty,
    CompositeProperty,
    MappedColumn,
    Mapper,
    MapperProperty,
    RelationshipDirection,
    RelationshipProperty,
    SynonymProperty,
)
from sqlalchemy.types import UserDefinedType

from models.entity import EnumEncoding, FetchType, InheritanceStrategy, RelationType
from models.markers import (
    ClassMarkers,
    ColumnMapping,
    EnumMapping,
    FieldMarkers,
    JoinColumnMapping,
    RelationMapping,
)

_EAGER_LOADING = {"joined", "selectin", "subquery", "immediate", False}
_TEMPORAL_TYPES = (sqltypes.DateTime, sqltypes.Date, sqltypes.Time, sqltypes.Interval)
_LOB_TYPES = (sqltypes.Text, sqltypes.LargeBinary)


@dataclass(frozen=True)
class DeclaredField:
    """A field as declared on one class of a type chain."""

    name: str
    owner: type
    target: Any      # MapperProperty, Column or dataclasses.Field


def type_chain(cls: type) -> list[type]:
    """The class followed by its ancestors, most-derived first, ``object`` excluded."""
    return [klass for klass in cls.__mro__ if klass is not object]


def mapper_for(cls: type) -> Optional[Mapper]:
    """The mapper of ``cls`` itself; None for unmapped classes and mixins."""
    mapper = sa_inspect(cls, raiseerr=False)
    if isinstance(mapper, Mapper) and mapper.class_ is cls:
        return mapper
    return None


def is_embeddable_class(cls: type) -> bool:
    return mapper_for(cls) is None and (
        dataclasses.is_dataclass(cls) or hasattr(cls, "__composite_values__")
    )


def declared_fields(klass: type) -> list[DeclaredField]:
    """Fields declared directly on ``klass``, inherited ones excluded."""
    mapper = mapper_for(klass)
    if mapper is not None:
        return [DeclaredField(prop.key, klass, prop) for prop in mapper.attrs if prop.parent is mapper]

    fields = []
    for name, value in vars(klass).items():
        if isinstance(value, MappedColumn):
            fields.append(DeclaredField(name, klass, value.column))
        elif isinstance(value, (Column, MapperProperty)):
            fields.append(DeclaredField(name, klass, value))
    if dataclasses.is_dataclass(klass):
        own = vars(klass).get("__annotations__", {})
        seen = {f.name for f in fields}
        fields.extend(
            DeclaredField(f.name, klass, f)
            for f in dataclasses.fields(klass)
            if f.name in own and f.name not in seen
        )
    return fields


def find_field(cls: type, name: str) -> Optional[DeclaredField]:
    for klass in type_chain(cls):
        for field in declared_fields(klass):
            if field.name == name:
                return field
    return None


def all_fields(cls: type) -> list[DeclaredField]:
    """Every field across the type chain; the most-derived declaration of a name wins."""
    found: dict[str, DeclaredField] = {}
    for klass in type_chain(cls):
        for field in declared_fields(klass):
            found.setdefault(field.name, field)
    return list(found.values())


def field_markers(field: DeclaredField) -> FieldMarkers:
    declared_in = f"{field.owner.__module__}.{field.owner.__qualname__}"
    target = field.target

    if isinstance(target, RelationshipProperty):
        return _relationship_markers(field.name, declared_in, target)
    if isinstance(target, ColumnProperty):
        return _column_markers(field.name, declared_in, target.columns[0], target)
    if isinstance(target, Column):
        return _column_markers(field.name, declared_in, target, None)
    if isinstance(target, CompositeProperty):
        return FieldMarkers(name=field.name, declared_in=declared_in, markers=_with_info(["Embedded"], target.info))
    if isinstance(target, SynonymProperty):
        return FieldMarkers(name=field.name, declared_in=declared_in, markers=("Synonym",))
    if isinstance(target, dataclasses.Field):
        return FieldMarkers(name=field.name, declared_in=declared_in, markers=("Basic",))
    return FieldMarkers(name=field.name, declared_in=declared_in)


def _with_info(markers: list[str], *infos: dict) -> tuple[str, ...]:
    for info in infos:
        markers.extend(str(key) for key in info)
    return tuple(dict.fromkeys(markers))


def _is_generated(column: Column) -> bool:
    if column.identity is not None or isinstance(column.default, Sequence):
        return True
    if not column.primary_key:
        return False
    if column.default is not None or column.server_default is not None:
        return True
    table = getattr(column, "table", None)   # unset on mixin template columns
    return isinstance(table, Table) and table.autoincrement_column is column


def _int_or_none(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _column_markers(name: str, declared_in: str, expr: Any, prop: Optional[ColumnProperty]) -> FieldMarkers:
    prop_info = prop.info if prop is not None else {}
    if not isinstance(expr, Column):
        # column_property() over a SQL expression
        return FieldMarkers(
            name=name,
            declared_in=declared_in,
            markers=_with_info(["Formula"], prop_info),
        )

    column = expr
    col_type = column.type
    markers = ["Column"]
    enum = None
    if column.primary_key:
        markers.append("Id")
    if _is_generated(column):
        markers.append("GeneratedValue")
    if prop is not None and prop.parent.version_id_col is column:
        markers.append("Version")
    if isinstance(col_type, sqltypes.Enum) and col_type.enum_class is not None:
        markers.append("Enumerated")
        enum = EnumMapping(encoding=EnumEncoding.STRING)
    if isinstance(col_type, _TEMPORAL_TYPES):
        markers.append("Temporal")
    if isinstance(col_type, _LOB_TYPES):
        markers.append("Lob")
    if column.index:
        markers.append("Index")
    if column.unique:
        markers.append("Unique")
    if column.comment:
        markers.append("Comment")
    if column.server_default is not None:
        markers.append("ServerDefault")
    if column.computed is not None:
        markers.append("Computed")
    if prop is not None and prop.deferred:
        markers.append("Deferred")
    if column.foreign_keys:
        markers.append("ForeignKey")

    mapping = ColumnMapping(
        name=column.name,
        column_definition=col_type.compile() if isinstance(col_type, UserDefinedType) else None,
        length=_int_or_none(getattr(col_type, "length", None)),
        precision=_int_or_none(getattr(col_type, "precision", None)),
        scale=_int_or_none(getattr(col_type, "scale", None)),
    )
    return FieldMarkers(
        name=name,
        declared_in=declared_in,
        markers=_with_info(markers, column.info, prop_info),
        column=mapping,
        enum=enum,
    )


def relation_type(prop: RelationshipProperty) -> RelationType:
    if prop.direction is RelationshipDirection.MANYTOONE:
        if any(col.unique for col in prop.local_columns):
            return RelationType.ONE_TO_ONE
        return RelationType.MANY_TO_ONE
    if prop.direction is RelationshipDirection.ONETOMANY:
        return RelationType.ONE_TO_MANY if prop.uselist else RelationType.ONE_TO_ONE
    return RelationType.MANY_TO_MANY


def _relationship_markers(name: str, declared_in: str, prop: RelationshipProperty) -> FieldMarkers:
    kind = relation_type(prop)
    markers = [kind.value]
    join_column = None
    mapped_by = None

    if prop.direction is RelationshipDirection.MANYTOONE:
        markers.append("JoinColumn")
        local = sorted(col.name for col in prop.local_columns)
        join_column = JoinColumnMapping(name=", ".join(local) if local else None)
    else:
        mapped_by = prop.back_populates

    if prop.secondary is not None:
        markers.append("JoinTable")
    if prop.viewonly:
        markers.append("ViewOnly")
    if prop.order_by is not False and prop.order_by is not None:
        markers.append("OrderBy")
    if prop.passive_deletes:
        markers.append("PassiveDeletes")

    relation = RelationMapping(
        relation_type=kind,
        fetch_type=FetchType.EAGER if prop.lazy in _EAGER_LOADING else FetchType.LAZY,
        cascade_types=tuple(sorted(c.upper().replace("-", "_") for c in prop.cascade)),
        mapped_by=mapped_by,
    )
    return FieldMarkers(
        name=name,
        declared_in=declared_in,
        markers=_with_info(markers, prop.info),
        join_column=join_column,
        relation=relation,
    )


def inheritance_strategy(mapper: Mapper) -> Optional[InheritanceStrategy]:
    if mapper.concrete:
        return InheritanceStrategy.TABLE_PER_CLASS
    if mapper.inherits is not None:
        return InheritanceStrategy.SINGLE_TABLE if mapper.single else InheritanceStrategy.JOINED
    # A hierarchy root takes the strategy its subclasses are mapped with
    for sub in mapper.self_and_descendants:
        if sub is not mapper:
            return inheritance_strategy(sub)
    return None


def class_markers(cls: type) -> ClassMarkers:
    mapper = mapper_for(cls)
    if mapper is None:
        if is_embeddable_class(cls):
            return ClassMarkers(markers=("Embeddable",))
        return ClassMarkers()

    markers = ["Entity"]
    table_info: dict = {}
    owns_table = mapper.inherits is None or mapper.local_table is not mapper.inherits.local_table
    if owns_table:
        markers.append("Table")
        if isinstance(mapper.local_table, Table):
            table_info = mapper.local_table.info

    strategy = inheritance_strategy(mapper)
    if strategy is not None:
        markers.append("Inheritance")

    discriminator_column = None
    if mapper.polymorphic_on is not None:
        markers.append("DiscriminatorColumn")
        discriminator_column = getattr(mapper.polymorphic_on, "name", None) or str(mapper.polymorphic_on)

    discriminator_value = None
    if mapper.polymorphic_identity is not None:
        markers.append("DiscriminatorValue")
        discriminator_value = str(mapper.polymorphic_identity)

    return ClassMarkers(
        markers=_with_info(markers, table_info),
        inheritance_strategy=strategy,
        discriminator_column=discriminator_column,
        discriminator_value=discriminator_value,
    )
