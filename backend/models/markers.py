"""Pydantic schemas for the markers recognised on mapped classes and their fields."""
from typing import Optional

from pydantic import BaseModel, ConfigDict

from models.entity import EnumEncoding, FetchType, InheritanceStrategy, RelationType


class _Markers(BaseModel):
    model_config = ConfigDict(frozen=True)


class ColumnMapping(_Markers):
    name: Optional[str] = None
    column_definition: Optional[str] = None
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None


class JoinColumnMapping(_Markers):
    name: Optional[str] = None            # None = "<property>_id"


class RelationMapping(_Markers):
    relation_type: RelationType
    fetch_type: Optional[FetchType] = None
    cascade_types: tuple[str, ...] = ()
    mapped_by: Optional[str] = None


class EnumMapping(_Markers):
    encoding: EnumEncoding = EnumEncoding.STRING


class FieldMarkers(_Markers):
    name: str
    declared_in: Optional[str] = None     # qualified name of the declaring class
    markers: tuple[str, ...] = ()
    column: Optional[ColumnMapping] = None
    join_column: Optional[JoinColumnMapping] = None
    relation: Optional[RelationMapping] = None
    enum: Optional[EnumMapping] = None

    def has(self, marker: str) -> bool:
        return marker in self.markers


class ClassMarkers(_Markers):
    markers: tuple[str, ...] = ()
    inheritance_strategy: Optional[InheritanceStrategy] = None
    discriminator_column: Optional[str] = None
    discriminator_value: Optional[str] = None

    def has(self, marker: str) -> bool:
        return marker in self.markers
