from __future__ import annotations  # FastAPI server exposing the session API

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agents.defaults import bind_defaults
from api.routes import router
from config.settings import settings
from services.sessions import session_registry
from storage.migrate import migrate


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Mock Exam Session API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"]
    )
    app.include_router(router)
    cleanup_task: Optional[asyncio.Task] = None

    @app.on_event("startup")
    async def startup() -> None:
        nonlocal cleanup_task
        migrate(settings.DB_PATH)
        bind_defaults()
        logger.info("session store ready at %s", settings.DB_PATH)

        async def _cleanup_loop() -> None:
            while True:
                await asyncio.sleep(settings.SESSION_IDLE_TTL_S / 3)
                await session_registry.cleanup_idle()

        cleanup_task = asyncio.create_task(_cleanup_loop())

    @app.on_event("shutdown")
    async def shutdown() -> None:
        nonlocal cleanup_task
        if cleanup_task is not None:
            cleanup_task.cancel()
            try:
                await cleanup_task
            except asyncio.CancelledError:
                pass
            finally:
                cleanup_task = None
        await session_registry.close_all()
        logger.info("shutdown complete")

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host="0.0.0.0", port=8000)
