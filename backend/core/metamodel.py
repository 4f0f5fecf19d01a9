"""
Metamodel — registry of mapped classes and composite value classes, keyed by
logical entity name, built over a configured SQLAlchemy declarative registry.
"""
import dataclasses
import enum
import importlib
import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import Column
from sqlalchemy import types as sqltypes
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import (
    ColumnProperty,
    CompositeProperty,
    Mapper,
    RelationshipDirection,
    RelationshipProperty,
    registry as Registry,
)

from config import settings
from core.errors import ConfigurationError
from models.entity import PropertyKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetaProperty:
    name: str
    kind: PropertyKind
    python_type: Optional[type]
    type_name: str
    mandatory: bool = False
    read_only: bool = False
    related_entity_name: Optional[str] = None


@dataclass(frozen=True)
class MetaClass:
    name: str
    type_: type
    persistent: bool
    embeddable: bool
    mapper: Optional[Mapper] = None


def _python_type_of(type_engine: sqltypes.TypeEngine) -> Optional[type]:
    if isinstance(type_engine, sqltypes.Enum) and type_engine.enum_class is not None:
        return type_engine.enum_class
    try:
        return type_engine.python_type
    except NotImplementedError:
        return None


def _type_name(python_type: Optional[type]) -> str:
    return python_type.__name__ if python_type is not None else "object"


class Metamodel:
    """Logical view of every mapped class of one declarative registry."""

    def __init__(self, source: Any):
        if source is None:
            raise ConfigurationError("No entity metamodel configured")
        reg = getattr(source, "registry", source)
        if not isinstance(reg, Registry):
            raise ConfigurationError(f"Not a declarative base or registry: {source!r}")

        try:
            reg.configure()
        except SQLAlchemyError as e:
            raise ConfigurationError(f"Mapper configuration failed: {e}") from e

        self._by_name: dict[str, MetaClass] = {}
        self._by_type: dict[type, MetaClass] = {}
        for mapper in reg.mappers:
            self._register(MetaClass(
                name=self.entity_name(mapper.class_),
                type_=mapper.class_,
                persistent=True,
                embeddable=False,
                mapper=mapper,
            ))
        for mapper in reg.mappers:
            for prop in mapper.attrs:
                if isinstance(prop, CompositeProperty) and prop.composite_class not in self._by_type:
                    value_class = prop.composite_class
                    self._register(MetaClass(
                        name=self.entity_name(value_class),
                        type_=value_class,
                        persistent=False,
                        embeddable=True,
                    ))
        logger.info("Metamodel loaded with %d classes", len(self._by_name))

    def _register(self, meta: MetaClass) -> None:
        existing = self._by_name.get(meta.name)
        if existing is not None and existing.type_ is not meta.type_:
            raise ConfigurationError(
                f"Duplicate entity name {meta.name}: {existing.type_.__qualname__} and {meta.type_.__qualname__}"
            )
        self._by_name[meta.name] = meta
        self._by_type[meta.type_] = meta

    def find_class(self, name: str) -> Optional[MetaClass]:
        return self._by_name.get(name)

    def get_classes(self) -> list[MetaClass]:
        return list(self._by_name.values())

    @staticmethod
    def entity_name(cls: type) -> str:
        # only the class's own declaration counts; subclasses do not inherit a logical name
        return vars(cls).get("__entity_name__") or cls.__name__

    def properties(self, meta: MetaClass) -> list[MetaProperty]:
        if meta.mapper is None:
            return self._value_class_properties(meta.type_)
        return [p for p in (self._property(prop) for prop in meta.mapper.attrs) if p is not None]

    def primary_key_property(self, meta: MetaClass) -> Optional[MetaProperty]:
        if meta.mapper is None:
            return None
        for column in meta.mapper.primary_key:
            prop = meta.mapper.get_property_by_column(column)
            return self._property(prop)
        return None

    def is_soft_deletable(self, meta: MetaClass) -> bool:
        if meta.mapper is None:
            return False
        soft_delete = set(settings.soft_delete_column_list)
        return any(
            isinstance(col, Column) and col.name in soft_delete
            for col in meta.mapper.columns
        )

    def table_name(self, meta: MetaClass) -> str:
        local_table = meta.mapper.local_table if meta.mapper is not None else None
        name = getattr(local_table, "name", None)
        return name or meta.type_.__name__.upper()

    def schema_name(self, meta: MetaClass) -> Optional[str]:
        local_table = meta.mapper.local_table if meta.mapper is not None else None
        return getattr(local_table, "schema", None)

    def _property(self, prop: Any) -> Optional[MetaProperty]:
        if isinstance(prop, RelationshipProperty):
            target = prop.mapper.class_
            python_type = target
            type_name = f"list[{target.__name__}]" if prop.uselist else target.__name__
            composition = "delete-orphan" in prop.cascade
            mandatory = prop.direction is RelationshipDirection.MANYTOONE and all(
                not col.nullable for col in prop.local_columns
            )
            return MetaProperty(
                name=prop.key,
                kind=PropertyKind.COMPOSITION if composition else PropertyKind.ASSOCIATION,
                python_type=python_type,
                type_name=type_name,
                mandatory=mandatory,
                read_only=prop.viewonly,
                related_entity_name=self.entity_name(target),
            )
        if isinstance(prop, CompositeProperty):
            value_class = prop.composite_class
            return MetaProperty(
                name=prop.key,
                kind=PropertyKind.COMPOSITION,
                python_type=value_class,
                type_name=value_class.__name__,
                related_entity_name=self.entity_name(value_class),
            )
        if isinstance(prop, ColumnProperty):
            expr = prop.columns[0]
            python_type = _python_type_of(expr.type)
            is_enum = isinstance(python_type, type) and issubclass(python_type, enum.Enum)
            if isinstance(expr, Column):
                mandatory = not expr.nullable
                read_only = expr.computed is not None
            else:
                mandatory, read_only = False, True
            return MetaProperty(
                name=prop.key,
                kind=PropertyKind.ENUM if is_enum else PropertyKind.DATATYPE,
                python_type=python_type,
                type_name=_type_name(python_type),
                mandatory=mandatory,
                read_only=read_only,
            )
        return None

    def _value_class_properties(self, value_class: type) -> list[MetaProperty]:
        if not dataclasses.is_dataclass(value_class):
            return []
        props = []
        for f in dataclasses.fields(value_class):
            python_type = f.type if isinstance(f.type, type) else None
            is_enum = python_type is not None and issubclass(python_type, enum.Enum)
            props.append(MetaProperty(
                name=f.name,
                kind=PropertyKind.ENUM if is_enum else PropertyKind.DATATYPE,
                python_type=python_type,
                type_name=_type_name(python_type) if python_type is not None else str(f.type),
            ))
        return props


def load_metamodel(spec: str) -> Metamodel:
    """Import ``package.module:attribute`` and build a Metamodel over it."""
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"Entity models must be given as 'module:attribute', got {spec!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import entity models module {module_name}: {e}") from e
    try:
        source = getattr(module, attr)
    except AttributeError as e:
        raise ConfigurationError(f"Module {module_name} has no attribute {attr}") from e
    return Metamodel(source)
