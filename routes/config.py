# ─────────────────────────────────────────────────────────────────
# routes/config.py — Camera Configuration Endpoints
#
# GET  /get-config  polled by the camera
# POST /set-config  sent by the companion app
#
# The store's file write runs in FastAPI's thread pool, so a slow
# disk never stalls the event loop that carries uploads and viewer
# sockets.
# ─────────────────────────────────────────────────────────────────

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from config_store import ConfigStore, ConfigValidationError

logger = logging.getLogger("routes")

router = APIRouter(tags=["Configuration"])


def get_config_store(request: Request) -> ConfigStore:
    return request.app.state.config_store


# ─────────────────────────────────────────────────────────────────
# GET /get-config — The full current record
# ─────────────────────────────────────────────────────────────────

@router.get("/get-config")
def get_config(store: ConfigStore = Depends(get_config_store)):
    """Returns every field, camelCase, exactly as the camera expects."""
    return store.read().to_wire()


# ─────────────────────────────────────────────────────────────────
# POST /set-config — Update any subset of the fields
# ─────────────────────────────────────────────────────────────────

@router.post("/set-config", response_class=PlainTextResponse)
async def set_config(request: Request, store: ConfigStore = Depends(get_config_store)):
    """
    Applies a partial update.

    - 400 if the body isn't JSON, or a field sent is invalid
      (the message says which constraint failed)
    - 500 if the new config couldn't be saved to disk
    - 200 otherwise
    """

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")

    try:
        await run_in_threadpool(store.update, payload)
    except ConfigValidationError as exc:
        logger.info(f"🚫 Config update refused: {exc.field} — {exc.message}")
        raise HTTPException(status_code=400, detail=exc.message)
    except OSError:
        logger.exception("❌ Failed to save configuration")
        raise HTTPException(status_code=500, detail="Server error while saving the configuration")

    return "Configuration updated successfully"
