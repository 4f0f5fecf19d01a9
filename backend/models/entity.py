"""Pydantic schemas for logical entity definitions (ORM mapped classes)."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PropertyKind(str, Enum):
    DATATYPE = "DATATYPE"
    ENUM = "ENUM"
    ASSOCIATION = "ASSOCIATION"
    COMPOSITION = "COMPOSITION"


class RelationType(str, Enum):
    MANY_TO_ONE = "ManyToOne"
    ONE_TO_MANY = "OneToMany"
    ONE_TO_ONE = "OneToOne"
    MANY_TO_MANY = "ManyToMany"


class FetchType(str, Enum):
    LAZY = "LAZY"
    EAGER = "EAGER"


class EnumEncoding(str, Enum):
    ORDINAL = "ORDINAL"
    STRING = "STRING"


class InheritanceStrategy(str, Enum):
    SINGLE_TABLE = "SINGLE_TABLE"
    JOINED = "JOINED"
    TABLE_PER_CLASS = "TABLE_PER_CLASS"


class _Definition(BaseModel):
    model_config = ConfigDict(frozen=True)


class PropertyDefinition(_Definition):
    name: str = Field(..., min_length=1)
    type_name: str
    kind: PropertyKind
    column_name: Optional[str] = None
    column_definition: Optional[str] = None     # custom SQL type text
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    mandatory: bool = False
    read_only: bool = False
    relation_type: Optional[RelationType] = None
    related_entity_name: Optional[str] = None
    mapped_by: Optional[str] = None             # inverse side attribute
    fetch_type: Optional[FetchType] = None
    cascade_types: Optional[tuple[str, ...]] = None
    enum_class: Optional[str] = None            # fully qualified enum type
    enum_encoding: Optional[EnumEncoding] = None
    markers: tuple[str, ...] = ()               # non-structural markers only


class PrimaryKeyInfo(_Definition):
    property_name: str
    type_name: str
    column_name: str
    generated: bool = False


class InheritanceInfo(_Definition):
    strategy: Optional[InheritanceStrategy] = None
    discriminator_column: Optional[str] = None
    discriminator_value: Optional[str] = None


class EntityDefinition(_Definition):
    """Complete logical description of one mapped class."""

    name: str = Field(..., min_length=1)
    simple_name: str
    full_name: str
    table_name: str
    schema_name: Optional[str] = None
    persistent: bool = True
    embeddable: bool = False
    soft_deletable: bool = False
    versioned: bool = False
    primary_key: Optional[PrimaryKeyInfo] = None
    properties: tuple[PropertyDefinition, ...] = ()
    class_markers: tuple[str, ...] = ()
    inheritance: Optional[InheritanceInfo] = None
