# ─────────────────────────────────────────────────────────────────
# routes/realtime.py — Viewer WebSocket
#
# Viewers (the Android app) keep one socket open on /ws and receive
#     {"event": "new_image", "data": {"url": ..., "timestamp": ...}}
# each time the camera uploads. Nothing they send is acted on.
# ─────────────────────────────────────────────────────────────────

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger("routes")

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws")
async def viewer_socket(websocket: WebSocket):
    hub = websocket.app.state.hub

    # Registered before accept, so once the client sees the socket
    # open it is guaranteed to get the next broadcast
    subscriber = hub.subscribe(websocket)
    pump = None
    receive = None
    try:
        await websocket.accept()
        pump = asyncio.create_task(subscriber.pump())

        while True:
            receive = asyncio.ensure_future(websocket.receive())
            done, _ = await asyncio.wait({receive, pump}, return_when=asyncio.FIRST_COMPLETED)

            if pump in done:
                receive.cancel()
                # re-raises whatever made the send fail
                pump.result()
                break

            if receive.result()["type"] == "websocket.disconnect":
                break

    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.warning(f"⚠️  Viewer socket closed after send failure: {exc}")
    finally:
        if receive is not None:
            receive.cancel()
        if pump is not None:
            pump.cancel()
        hub.unsubscribe(subscriber)
