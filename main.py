"""
Account service — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.middleware import register_exception_handlers, register_middleware
from api.routes import router as api_router
from auth.routes import router as users_router
from config.settings import config
from database.session import init_models
from media.registry import get_media_storage

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Account Service",
        version="1.0.0",
        description="User registration, login and logout with refresh-token sessions.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(users_router, prefix="/api/v1/users")
    app.include_router(api_router, prefix="/api/v1")

    if config.media_backend.lower() == "local":
        app.mount(
            "/media",
            StaticFiles(directory=config.media_root, check_dir=False),
            name="media",
        )

    @app.on_event("startup")
    async def on_startup():
        logger.info("Creating database tables…")
        await init_models()

        storage = get_media_storage()
        logger.info("Media backend: %s", storage.backend_name)

        logger.info("Application ready to accept requests.")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
