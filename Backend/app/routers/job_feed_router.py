# app/routers/job_feed_router.py
import asyncio
import contextlib
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.change_feed import ChangeEvent, job_feed

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.websocket("/feed")
async def job_feed_socket(websocket: WebSocket):
    """
    Pushes one message per committed insert/update/delete on jobs.
    Clients re-fetch /api/jobs on every message; the payload is informational.
    """
    loop = asyncio.get_running_loop()
    queue: "asyncio.Queue[ChangeEvent]" = asyncio.Queue()

    # publishers run in worker threads
    subscription = job_feed.subscribe(lambda change: loop.call_soon_threadsafe(queue.put_nowait, change))
    await websocket.accept()

    async def pump():
        while True:
            change = await queue.get()
            await websocket.send_json(change.as_dict())

    sender = asyncio.create_task(pump())
    try:
        # nothing is expected from the client; this returns when it disconnects
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Job feed client disconnected")
    finally:
        subscription.cancel()
        sender.cancel()
        try:
            with contextlib.suppress(asyncio.CancelledError):
                await sender
        except Exception:
            # the client went away mid-send
            logger.warning("Job feed sender stopped with an error", exc_info=True)
