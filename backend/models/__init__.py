from models.connection import ConnectionRequest, ConnectionResponse, ConnectionListItem  # noqa: F401
from models.catalog import ColumnRow, PrimaryKeyRow, ImportedKeyRow, IndexInfoRow  # noqa: F401
from models.ddl import TableDDLDefinition, ColumnDefinition, ForeignKeyDefinition, IndexDefinition  # noqa: F401
from models.entity import EntityDefinition, PropertyDefinition, PrimaryKeyInfo, InheritanceInfo  # noqa: F401
from models.markers import FieldMarkers, ClassMarkers  # noqa: F401
