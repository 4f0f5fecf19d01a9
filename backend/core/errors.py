"""Typed failures raised by the introspection core."""
from typing import Optional


class SchemascopeError(Exception):
    """Base class for every error raised by the core."""


class NotFoundError(SchemascopeError, LookupError):
    """Unknown table or entity name."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} not found: {name}")


class IntrospectionError(SchemascopeError):
    """A catalog query failed; carries the table name and the underlying cause."""

    def __init__(self, table_name: Optional[str], cause: BaseException):
        self.table_name = table_name
        self.cause = cause
        target = f"table {table_name}" if table_name else "table list"
        super().__init__(f"Failed to introspect {target}: {cause}")


class ConfigurationError(SchemascopeError):
    """The entity metamodel is unavailable or inconsistent."""
