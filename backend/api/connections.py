"""POST/GET/DELETE /api/connections — register databases and manage their pools."""
import logging
import time

from fastapi import APIRouter, HTTPException
from sqlalchemy.engine import Engine

from core.db_connector import CatalogAccessor, create_engine_from_request
from core.errors import IntrospectionError
from core.schema_introspector import list_table_names
from models.connection import ConnectionListItem, ConnectionRequest, ConnectionResponse

router = APIRouter()
logger = logging.getLogger(__name__)

# In-memory registry: service_name → ConnectionRequest, and its pooled engine
_connection_registry: dict[str, ConnectionRequest] = {}
_engines: dict[str, Engine] = {}


def get_connection(service_name: str) -> ConnectionRequest:
    if service_name not in _connection_registry:
        raise HTTPException(404, detail=f"Service '{service_name}' not found. Please register it first.")
    return _connection_registry[service_name]


def get_catalog(service_name: str) -> CatalogAccessor:
    req = get_connection(service_name)
    return CatalogAccessor(_engines[service_name], schema=req.schema_name)


def registered_engines() -> dict[str, Engine]:
    return dict(_engines)


def _drop(service_name: str) -> None:
    _connection_registry.pop(service_name, None)
    engine = _engines.pop(service_name, None)
    if engine is not None:
        engine.dispose()


@router.post("/connections", response_model=ConnectionResponse, status_code=201)
def register_connection(req: ConnectionRequest):
    """
    1. Validate DB connection
    2. List the tables it exposes
    3. Keep the pool for later introspection calls
    """
    t0 = time.time()
    try:
        engine = create_engine_from_request(req)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    catalog = CatalogAccessor(engine, schema=req.schema_name)
    try:
        tables = list_table_names(catalog, req.schema_name)
    except IntrospectionError as e:
        engine.dispose()
        raise HTTPException(status_code=500, detail=str(e))

    if req.service_name in _connection_registry:
        logger.info("Replacing connection %s", req.service_name)
        _drop(req.service_name)
    _connection_registry[req.service_name] = req
    _engines[req.service_name] = engine
    logger.info("Registered %s (%s) with %d tables", req.service_name, req.db_type, len(tables))

    return ConnectionResponse(
        service_name=req.service_name,
        db_type=req.db_type,
        tables_found=len(tables),
        duration_seconds=round(time.time() - t0, 2),
        tables=tables,
    )


@router.get("/connections")
def get_connections():
    result = [
        ConnectionListItem(
            service_name=svc_name,
            db_type=conn_req.db_type,
            host=conn_req.host,
            database=conn_req.database,
            file_path=conn_req.file_path,
            schema_name=conn_req.schema_name,
        )
        for svc_name, conn_req in _connection_registry.items()
    ]
    return {"connections": result}


@router.delete("/connections/{service_name}")
def delete_connection(service_name: str):
    if service_name not in _connection_registry:
        raise HTTPException(404, detail=f"Service '{service_name}' not found.")
    _drop(service_name)
    return {"message": f"Service '{service_name}' removed successfully."}
