"""Pydantic schemas for physical table definitions (columns, keys, indexes)."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReferentialAction(str, Enum):
    """Foreign-key ON DELETE / ON UPDATE behaviour."""

    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"

    @classmethod
    def from_code(cls, code: Optional[int]) -> "ReferentialAction":
        """Map a numeric catalog rule code; unknown or absent codes mean NO ACTION."""
        return _ACTION_BY_CODE.get(code, cls.NO_ACTION)

    @property
    def code(self) -> int:
        return _CODE_BY_ACTION[self]


# Numeric rule codes as reported by ODBC/X-Open style catalog views
_ACTION_BY_CODE: dict[Optional[int], ReferentialAction] = {
    0: ReferentialAction.CASCADE,
    1: ReferentialAction.RESTRICT,
    2: ReferentialAction.SET_NULL,
    3: ReferentialAction.NO_ACTION,
    4: ReferentialAction.SET_DEFAULT,
}
_CODE_BY_ACTION = {action: code for code, action in _ACTION_BY_CODE.items()}


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def from_marker(cls, marker: Optional[str]) -> Optional["SortOrder"]:
        """'A' / 'D' catalog markers; anything else is unspecified (None)."""
        if marker is None:
            return None
        marker = marker.strip().upper()
        if marker == "A":
            return cls.ASC
        if marker == "D":
            return cls.DESC
        return None


class _Definition(BaseModel):
    model_config = ConfigDict(frozen=True)


class ColumnDefinition(_Definition):
    name: str = Field(..., min_length=1)
    type_name: str                         # VARCHAR, INTEGER, NUMERIC, ...
    type_code: int = 0                     # ODBC SQL type code, 0 = unknown
    size: Optional[int] = None             # length (chars) or precision (numbers)
    scale: Optional[int] = None            # decimal digits
    nullable: bool = True
    default: Optional[str] = None          # raw default expression
    ordinal_position: int = Field(..., ge=1)
    comment: Optional[str] = None
    auto_increment: bool = False


class PrimaryKeyDefinition(_Definition):
    constraint_name: Optional[str] = None
    columns: tuple[str, ...]               # key sequence order


class ForeignKeyDefinition(_Definition):
    constraint_name: Optional[str] = None
    column_name: str
    referenced_schema: Optional[str] = None
    referenced_table: str
    referenced_column: str
    delete_rule: ReferentialAction = ReferentialAction.NO_ACTION
    update_rule: ReferentialAction = ReferentialAction.NO_ACTION


class IndexDefinition(_Definition):
    index_name: str
    columns: tuple[str, ...]
    unique: bool = False
    sort_order: Optional[SortOrder] = None


class UniqueConstraintDefinition(_Definition):
    constraint_name: str
    columns: tuple[str, ...]


class TableDDLDefinition(_Definition):
    """Complete structural description of one table."""

    catalog: Optional[str] = None
    schema_name: Optional[str] = None
    table_name: str = Field(..., min_length=1)
    columns: tuple[ColumnDefinition, ...] = ()
    primary_key: Optional[PrimaryKeyDefinition] = None
    foreign_keys: tuple[ForeignKeyDefinition, ...] = ()
    indexes: tuple[IndexDefinition, ...] = ()
    unique_constraints: tuple[UniqueConstraintDefinition, ...] = ()

    @model_validator(mode="after")
    def _ordinal_positions_unique(self) -> "TableDDLDefinition":
        positions = [c.ordinal_position for c in self.columns]
        if len(positions) != len(set(positions)):
            raise ValueError(f"Duplicate ordinal positions in table {self.table_name}")
        return self

    @property
    def qualified_name(self) -> str:
        return qualify(self.schema_name, self.table_name)


def qualify(schema: Optional[str], name: str) -> str:
    return f"{schema}.{name}" if schema else name
