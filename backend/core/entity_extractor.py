"""
Entity extractor — builds an EntityDefinition for one logical entity by joining
the metamodel's view of a class with the markers on its fields.
Works on in-memory mapper state only; no database access.
"""
import enum
import logging
from typing import Optional

from core.errors import ConfigurationError, NotFoundError
from core.field_resolver import all_fields, class_markers, field_markers, find_field
from core.metamodel import MetaClass, MetaProperty, Metamodel
from models.entity import (
    EntityDefinition,
    InheritanceInfo,
    PrimaryKeyInfo,
    PropertyDefinition,
)
from models.markers import FieldMarkers

logger = logging.getLogger(__name__)

STRUCTURAL_MARKERS = frozenset({
    "Column", "JoinColumn",
    "ManyToOne", "OneToMany", "OneToOne", "ManyToMany",
    "Id", "GeneratedValue", "Version",
    "Enumerated", "Temporal", "Basic", "Transient",
})
_INHERITANCE_MARKERS = ("Inheritance", "DiscriminatorColumn", "DiscriminatorValue")


def list_entity_names(metamodel: Optional[Metamodel]) -> list[str]:
    if metamodel is None:
        raise ConfigurationError("No entity metamodel configured")
    return sorted(meta.name for meta in metamodel.get_classes() if meta.persistent)


def get_entity_definition(metamodel: Optional[Metamodel], name: str) -> EntityDefinition:
    """Describe one entity. Raises NotFoundError for unknown names."""
    if metamodel is None:
        raise ConfigurationError("No entity metamodel configured")
    meta = metamodel.find_class(name)
    if meta is None:
        raise NotFoundError("Entity", name)

    cls = meta.type_
    cls_markers = class_markers(cls)

    inheritance = None
    if any(cls_markers.has(m) for m in _INHERITANCE_MARKERS):
        inheritance = InheritanceInfo(
            strategy=cls_markers.inheritance_strategy,
            discriminator_column=cls_markers.discriminator_column,
            discriminator_value=cls_markers.discriminator_value,
        )

    properties = sorted(
        (build_property(cls, prop) for prop in metamodel.properties(meta)),
        key=lambda p: p.name,
    )

    definition = EntityDefinition(
        name=meta.name,
        simple_name=cls.__name__,
        full_name=f"{cls.__module__}.{cls.__qualname__}",
        table_name=metamodel.table_name(meta),
        schema_name=metamodel.schema_name(meta),
        persistent=meta.persistent,
        embeddable=cls_markers.has("Embeddable"),
        soft_deletable=metamodel.is_soft_deletable(meta),
        versioned=any(field_markers(f).has("Version") for f in all_fields(cls)),
        primary_key=build_primary_key(metamodel, meta),
        properties=tuple(properties),
        class_markers=cls_markers.markers,
        inheritance=inheritance,
    )
    logger.info("Extracted entity %s with %d properties", definition.name, len(definition.properties))
    return definition


def _markers_for(cls: type, name: str) -> Optional[FieldMarkers]:
    field = find_field(cls, name)
    return field_markers(field) if field is not None else None


def build_property(cls: type, prop: MetaProperty) -> PropertyDefinition:
    markers = _markers_for(cls, prop.name)

    column_name = column_definition = None
    length = precision = scale = None
    relation_type = fetch_type = mapped_by = None
    cascade_types = None
    enum_class = enum_encoding = None
    extra: tuple[str, ...] = ()

    if markers is not None:
        if markers.column is not None:
            column_name = markers.column.name
            column_definition = markers.column.column_definition
            length = markers.column.length
            precision = markers.column.precision
            scale = markers.column.scale
        if markers.has("JoinColumn"):
            join_name = markers.join_column.name if markers.join_column else None
            column_name = join_name or f"{prop.name}_id"
        if markers.relation is not None:
            relation_type = markers.relation.relation_type
            fetch_type = markers.relation.fetch_type
            cascade_types = markers.relation.cascade_types or None
            mapped_by = markers.relation.mapped_by
        is_enum_type = isinstance(prop.python_type, type) and issubclass(prop.python_type, enum.Enum)
        if is_enum_type and markers.has("Enumerated"):
            enum_class = f"{prop.python_type.__module__}.{prop.python_type.__qualname__}"
            enum_encoding = markers.enum.encoding if markers.enum else None
        extra = tuple(m for m in markers.markers if m not in STRUCTURAL_MARKERS)
    else:
        logger.debug("No backing field for %s.%s", cls.__name__, prop.name)

    return PropertyDefinition(
        name=prop.name,
        type_name=prop.type_name,
        kind=prop.kind,
        column_name=column_name,
        column_definition=column_definition,
        length=length,
        precision=precision,
        scale=scale,
        mandatory=prop.mandatory,
        read_only=prop.read_only,
        relation_type=relation_type,
        related_entity_name=prop.related_entity_name,
        mapped_by=mapped_by,
        fetch_type=fetch_type,
        cascade_types=cascade_types,
        enum_class=enum_class,
        enum_encoding=enum_encoding,
        markers=extra,
    )


def build_primary_key(metamodel: Metamodel, meta: MetaClass) -> Optional[PrimaryKeyInfo]:
    pk = metamodel.primary_key_property(meta)
    if pk is None:
        return None
    markers = _markers_for(meta.type_, pk.name)
    column_name = pk.name
    generated = False
    if markers is not None:
        if markers.column is not None and markers.column.name:
            column_name = markers.column.name
        generated = markers.has("GeneratedValue")
    return PrimaryKeyInfo(
        property_name=pk.name,
        type_name=pk.type_name,
        column_name=column_name,
        generated=generated,
    )
