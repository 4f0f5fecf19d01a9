"""GET /api/health — registered connections and entity metamodel check."""
import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from api.connections import registered_engines
from api.entities import get_metamodel
from config import settings
from core.errors import ConfigurationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    connections = {name: _check_engine(engine) for name, engine in registered_engines().items()}
    metamodel_status = _check_metamodel()
    all_up = all(c["status"] == "up" for c in connections.values())
    overall = "ok" if all_up and metamodel_status["status"] != "down" else "degraded"
    return {
        "status": overall,
        "services": {
            "connections": connections,
            "metamodel":   metamodel_status,
        },
    }


def _check_engine(engine: Engine) -> dict:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "up", "dialect": engine.dialect.name}
    except SQLAlchemyError as e:
        logger.warning("Health check failed for %s: %s", engine.url.render_as_string(hide_password=True), e)
        return {"status": "down", "error": str(e)}


def _check_metamodel() -> dict:
    if not settings.ENTITY_MODELS:
        return {"status": "not_configured"}
    try:
        metamodel = get_metamodel()
    except ConfigurationError as e:
        return {"status": "down", "error": str(e)}
    return {"status": "up", "classes": len(metamodel.get_classes())}
