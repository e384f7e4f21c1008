"""
skilldex Console: FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skilldex.catalog.exceptions import CatalogNotReadyError
from skilldex.manager import CatalogManager

from server.config import ConsoleConfig
from server.dependencies import set_catalog_manager, set_console_config
from server.routers import catalog, disclosure, documents


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = ConsoleConfig()
    set_console_config(config)

    corpus_dirs = [Path(d) for d in config.corpus_dirs] or None
    manager = CatalogManager(corpus_dirs=corpus_dirs)
    await manager.initialize()
    set_catalog_manager(manager)

    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="skilldex Console",
        description="Skill registry and progressive-disclosure loader",
        version="0.1.0",
        lifespan=lifespan,
    )

    config = ConsoleConfig()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(documents.router)
    app.include_router(disclosure.router)
    app.include_router(catalog.router)

    @app.exception_handler(CatalogNotReadyError)
    async def catalog_not_ready(request: Request, exc: CatalogNotReadyError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "service": "skilldex-console"}

    return app


app = create_app()
