"""Application settings loaded from .env file."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Connection pool
    DB_POOL_SIZE: int = 5
    DB_POOL_TIMEOUT_SECONDS: int = 30

    # Schema introspection
    PK_INDEX_MARKERS: str = "pkey,pk_"
    IDENTITY_CLAUSE: str = "GENERATED ALWAYS AS IDENTITY"

    # Entity metamodel ("package.module:Base"), empty = not configured
    ENTITY_MODELS: str = ""
    SOFT_DELETE_COLUMNS: str = "deleted_at,deleted_date,delete_ts"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def pk_index_marker_list(self) -> list[str]:
        return [m.strip().lower() for m in self.PK_INDEX_MARKERS.split(",") if m.strip()]

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def soft_delete_column_list(self) -> list[str]:
        return [c.strip() for c in self.SOFT_DELETE_COLUMNS.split(",") if c.strip()]


settings = Settings()
