# wastebin/main.py

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from wastebin.api import pastes
from wastebin.config import Settings, get_settings
from wastebin.core.lifecycle import PasteManager
from wastebin.infra.database import build_engine, check_connection, init_db
from wastebin.infra.store import PasteStore, SqlPasteStore
from wastebin.services.sweeper import sweep_forever
from wastebin.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def build_manager(settings: Settings, store: Optional[PasteStore] = None) -> PasteManager:
    if store is None:
        engine = build_engine(settings.database_url)
        init_db(engine)
        store = SqlPasteStore(engine)

    return PasteManager(
        store,
        server_key=settings.at_rest_key,
        kdf_params=settings.scrypt,
        id_length=settings.id_length,
        max_id_attempts=settings.max_id_attempts,
    )


def create_app(
    settings: Optional[Settings] = None,
    manager: Optional[PasteManager] = None,
    sweep: bool = True,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.manager = manager or build_manager(settings)
        task = None
        if sweep and settings.sweep_interval > 0:
            task = asyncio.create_task(sweep_forever(app.state.manager, settings.sweep_interval))
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    app = FastAPI(
        title=settings.title,
        version="1.0.0",
        description="Paste sharing with expiry, passwords and burn-after-reading",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check(request: Request):
        engine = getattr(request.app.state.manager.store, "engine", None)
        if engine is not None and not check_connection(engine):
            return JSONResponse(status_code=503, content={"status": "degraded", "database": "unavailable"})
        return {"status": "ok", "database": "ok"}

    # after /health so /{key} does not shadow it
    app.include_router(pastes.router, tags=["Pastes"])

    return app


setup_logger()

app = create_app()
