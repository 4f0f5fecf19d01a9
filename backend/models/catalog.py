"""Raw catalog rows, one shape per catalog query regardless of dialect."""
from typing import Optional

from pydantic import BaseModel, ConfigDict


class _Row(BaseModel):
    model_config = ConfigDict(frozen=True)


class ColumnRow(_Row):
    table_name: str
    column_name: str
    type_name: str
    data_type: int = 0
    column_size: Optional[int] = None
    decimal_digits: Optional[int] = None
    nullable: bool = True
    column_def: Optional[str] = None
    ordinal_position: int
    remarks: Optional[str] = None
    is_autoincrement: bool = False


class PrimaryKeyRow(_Row):
    table_name: str
    column_name: str
    key_seq: int                      # 1-based position in the key
    pk_name: Optional[str] = None


class ImportedKeyRow(_Row):
    fk_name: Optional[str] = None
    fkcolumn_name: str
    pktable_schem: Optional[str] = None
    pktable_name: str
    pkcolumn_name: str
    update_rule: Optional[int] = None
    delete_rule: Optional[int] = None


class IndexInfoRow(_Row):
    table_name: str
    index_name: Optional[str] = None  # None marks a table statistics row
    column_name: Optional[str] = None
    non_unique: bool = True
    asc_or_desc: Optional[str] = None  # "A", "D" or None
