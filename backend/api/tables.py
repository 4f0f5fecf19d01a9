"""GET/POST /api/connections/{service_name}/tables — physical table definitions."""
import logging
from typing import Literal

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from api.connections import get_catalog
from core.ddl_synthesizer import render_create_table
from core.errors import IntrospectionError, NotFoundError
from core.report_renderer import render_selection, render_table_report
from core.schema_introspector import get_table_ddl_definition, list_table_names
from models.ddl import TableDDLDefinition

router = APIRouter()
logger = logging.getLogger(__name__)


class DescribeRequest(BaseModel):
    items: list[str] = Field(..., min_length=1)
    format: Literal["ddl", "report"] = "report"


def _definition(service_name: str, table_name: str) -> TableDDLDefinition:
    catalog = get_catalog(service_name)
    try:
        return get_table_ddl_definition(catalog, table_name)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IntrospectionError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/connections/{service_name}/tables")
def get_tables(service_name: str):
    catalog = get_catalog(service_name)
    try:
        tables = list_table_names(catalog, catalog.schema)
    except IntrospectionError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"service_name": service_name, "tables": tables}


@router.get("/connections/{service_name}/tables/{table_name}", response_model=TableDDLDefinition)
def get_table(service_name: str, table_name: str):
    return _definition(service_name, table_name)


@router.get("/connections/{service_name}/tables/{table_name}/ddl", response_class=PlainTextResponse)
def get_table_ddl(service_name: str, table_name: str):
    return PlainTextResponse(content=render_create_table(_definition(service_name, table_name)))


@router.get("/connections/{service_name}/tables/{table_name}/report", response_class=PlainTextResponse)
def get_table_report(service_name: str, table_name: str):
    return PlainTextResponse(content=render_table_report(_definition(service_name, table_name)))


@router.post("/connections/{service_name}/tables/describe", response_class=PlainTextResponse)
def describe_tables(service_name: str, req: DescribeRequest):
    """Render several tables in selection order, one titled block each."""
    render = render_create_table if req.format == "ddl" else render_table_report
    text = render_selection(req.items, lambda name: render(_definition(service_name, name)))
    return PlainTextResponse(content=text)
