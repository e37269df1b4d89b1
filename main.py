# ─────────────────────────────────────────────────────────────────
# main.py — Application Setup
#
# Builds the FastAPI app: creates the stores and the notification
# hub, prepares the upload directory and config file at startup,
# mounts the uploaded images, and plugs in the routers.
#
# Run with:   python main.py          (PORT env var, default 8080)
#       or:   uvicorn main:app --port 8080
# ─────────────────────────────────────────────────────────────────

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from assets import AssetStore
from config_store import ConfigStore
from notifier import NotificationHub
from routes import config, realtime, uploads
from settings import Settings

logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: make sure the upload directory exists, load the config."""
    app.state.asset_store.ensure_directory()
    app.state.config_store.load()
    logger.info(f"🚀 Server ready on http://{app.state.settings.host}:{app.state.settings.port}")
    yield
    logger.info("👋 Server shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Builds the app. Each call gets its own stores and hub."""

    settings = settings or Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    app = FastAPI(
        title="Capture Relay",
        description="Image ingestion, viewer notifications and configuration for an ESP32-CAM",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.asset_store = AssetStore(settings.upload_dir, settings.asset_root)
    app.state.config_store = ConfigStore(settings.config_file)
    app.state.hub = NotificationHub()

    app.include_router(uploads.router)
    app.include_router(config.router)
    app.include_router(realtime.router)

    # Stored images are fetched back at the locator the upload returned.
    # check_dir=False: the directory is created by the lifespan, after this runs.
    app.mount(
        f"/{settings.asset_root}",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/", response_class=PlainTextResponse)
    def root(request: Request):
        """Liveness check."""
        viewers = request.app.state.hub.subscriber_count
        return f"✅ Capture relay for ESP32-CAM is running ({viewers} viewer(s) connected)"

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
