"""GET/POST /api/entities — logical entity definitions from the configured ORM models."""
import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from config import settings
from core.entity_extractor import get_entity_definition, list_entity_names
from core.errors import ConfigurationError, NotFoundError
from core.metamodel import Metamodel, load_metamodel
from core.report_renderer import render_entity_report, render_selection
from models.entity import EntityDefinition

router = APIRouter()
logger = logging.getLogger(__name__)


class EntityDescribeRequest(BaseModel):
    items: list[str] = Field(..., min_length=1)


@lru_cache(maxsize=1)
def get_metamodel() -> Optional[Metamodel]:
    """The metamodel named by ENTITY_MODELS, loaded once; None when not configured."""
    if not settings.ENTITY_MODELS:
        return None
    return load_metamodel(settings.ENTITY_MODELS)


def _metamodel() -> Metamodel:
    try:
        metamodel = get_metamodel()
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if metamodel is None:
        raise HTTPException(status_code=503, detail="No entity models configured (set ENTITY_MODELS).")
    return metamodel


def _definition(name: str) -> EntityDefinition:
    try:
        return get_entity_definition(_metamodel(), name)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/entities")
def get_entities():
    return {"entities": list_entity_names(_metamodel())}


@router.get("/entities/{name}", response_model=EntityDefinition)
def get_entity(name: str):
    return _definition(name)


@router.get("/entities/{name}/report", response_class=PlainTextResponse)
def get_entity_report(name: str):
    return PlainTextResponse(content=render_entity_report(_definition(name)))


@router.post("/entities/describe", response_class=PlainTextResponse)
def describe_entities(req: EntityDescribeRequest):
    text = render_selection(req.items, lambda name: render_entity_report(_definition(name)))
    return PlainTextResponse(content=text)
