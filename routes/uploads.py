# ─────────────────────────────────────────────────────────────────
# routes/uploads.py — Image Upload Endpoint
#
# The camera POSTs a multipart form with one field, "image".
# The route stores it, tells the viewers, then answers the camera.
# It does NOT know how files are named (assets.py) or how viewers
# are reached (notifier.py).
# ─────────────────────────────────────────────────────────────────

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from assets import AssetStore, now_ms
from models import NotificationEvent
from notifier import NotificationHub

logger = logging.getLogger("routes")

router = APIRouter(tags=["Uploads"])


def get_asset_store(request: Request) -> AssetStore:
    return request.app.state.asset_store


def get_hub(request: Request) -> NotificationHub:
    return request.app.state.hub


# ─────────────────────────────────────────────────────────────────
# POST /upload — Receive one image from the camera
# ─────────────────────────────────────────────────────────────────

@router.post("/upload", response_class=PlainTextResponse)
async def upload_image(
    request: Request,
    store: AssetStore = Depends(get_asset_store),
    hub: NotificationHub = Depends(get_hub),
):
    """
    Stores an uploaded image and announces it to connected viewers.

    Flow:
    1. No file in the "image" field → 400, nothing stored, nobody notified
    2. Write the file (in a worker thread, it's disk I/O)
    3. Write failed → 500, nobody notified
    4. Queue a new_image event for every viewer
    5. Return 200
    """

    # Parsed by hand: a plain text "image" field is a missing file (400),
    # not a FastAPI validation error (422)
    form = await request.form()
    image = form.get("image")
    if not isinstance(image, UploadFile):
        raise HTTPException(status_code=400, detail="No image received")

    data = await image.read()

    try:
        locator = await run_in_threadpool(store.store, data)
    except OSError:
        logger.exception("❌ Failed to store uploaded image")
        raise HTTPException(status_code=500, detail="Server error while storing the image")

    # The file is fully on disk before anyone hears about it
    hub.broadcast(NotificationEvent(url=locator, timestamp=now_ms()))

    return "Image received and stored successfully"
