"""FastAPI application factory."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from karaoke.backend import config
from karaoke.backend.services.task_manager import task_manager
from karaoke.backend.services.audio_store import audio_store
from karaoke.backend.routers import (
    admin,
    audio,
    generator,
    payments,
    songs,
    ws,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task_manager.set_event_loop(asyncio.get_running_loop())
    audio_store.start_cleanup()
    logger.info(f"[app] Karaoke portal backend ready (temp dir {audio_store.temp_dir})")
    yield
    task_manager.shutdown()
    audio_store.stop_cleanup()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Nabila Portal Karaoke API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(songs.router, prefix="/api/songs", tags=["songs"])
    app.include_router(payments.router, prefix="/api/payments", tags=["payments"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
    app.include_router(generator.router, prefix="/api/generator", tags=["generator"])
    app.include_router(audio.router, prefix="/api/audio", tags=["audio"])
    app.include_router(ws.router, prefix="/api", tags=["websocket"])

    return app
