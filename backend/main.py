"""Schemascope HTTP service: table DDL and entity definitions over FastAPI."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import connections, entities, health, tables
from config import settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s | %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Catalog service ready (log level %s)", settings.LOG_LEVEL)
    yield
    engines = connections.registered_engines()
    for engine in engines.values():
        engine.dispose()
    logger.info("Disposed %d connection pool(s)", len(engines))


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    application = FastAPI(
        title="Schemascope",
        description="Reconstructs table DDL and ORM entity definitions from live catalogs and mapped classes.",
        version="1.0.0",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )
    for module in (health, connections, tables, entities):
        application.include_router(module.router, prefix="/api")
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)
