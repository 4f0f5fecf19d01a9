"""Pydantic schemas for database connection requests and responses."""
from typing import Optional, Literal
from pydantic import BaseModel, Field

_DEFAULT_PORTS = {"postgresql": 5432, "mysql": 3306}
_DRIVERS = {"postgresql": "postgresql+psycopg2", "mysql": "mysql+pymysql"}


class ConnectionRequest(BaseModel):
    db_type: Literal["sqlite", "postgresql", "mysql"] = Field(..., description="Database engine type")
    service_name: str = Field(..., min_length=1, description="Unique name for this connection")

    # SQLite only
    file_path: Optional[str] = Field(None, description="Absolute path to .db file (SQLite only)")

    # Server databases
    host: Optional[str] = Field(None, description="Database host")
    port: Optional[int] = Field(None, description="Database port (engine default when omitted)")
    database: Optional[str] = Field(None, description="Database name")
    username: Optional[str] = Field(None, description="Username")
    password: Optional[str] = Field(None, description="Password")

    # Catalog scope
    schema_name: Optional[str] = Field(None, description="Schema to introspect (dialect default when omitted)")

    def get_sqlalchemy_url(self) -> str:
        if self.db_type == "sqlite":
            return f"sqlite:///{self.file_path}"
        port = self.port or _DEFAULT_PORTS[self.db_type]
        return (
            f"{_DRIVERS[self.db_type]}://{self.username}:{self.password}"
            f"@{self.host}:{port}/{self.database}"
        )


class ConnectionResponse(BaseModel):
    service_name: str
    db_type: str
    tables_found: int
    duration_seconds: float
    tables: list[str]


class ConnectionListItem(BaseModel):
    service_name: str
    db_type: str
    host: Optional[str] = None
    database: Optional[str] = None
    file_path: Optional[str] = None
    schema_name: Optional[str] = None
    status: str = "registered"
