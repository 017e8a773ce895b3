"""REST endpoints for circle chat messages.

POST /messages                     — persist a message and queue its live broadcast
GET  /circles/{circle_id}/messages — history in commit order, optionally after a cursor
GET  /realtime/stats               — live connection and circle counts
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from the_hub.hub_models import MessageCreate
from the_hub.realtime import ChatHub
from the_hub.store import MessageStoreError

logger = logging.getLogger(__name__)


def build_messages_router(hub: ChatHub, prefix: str = "/api") -> APIRouter:
    """Build the APIRouter for message ingest and history bound to ``hub``."""
    router = APIRouter(prefix=prefix)

    @router.post("/messages", status_code=201)
    async def create_message(request: Request):
        try:
            payload = MessageCreate.model_validate(await request.json())
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return JSONResponse(status_code=400, content={"error": f"Invalid JSON: {e}"})
        except ValidationError as e:
            logger.debug(f"[INGEST] Rejected message payload: {e}")
            return JSONResponse(status_code=400, content={"error": str(e)})
        try:
            message = await hub.post_message(payload.circle_id, payload.sender_id, payload.content)
        except MessageStoreError as e:
            logger.error(f"[INGEST] Failed to persist message for circle {payload.circle_id}: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})
        return message.to_wire()

    @router.get("/circles/{circle_id}/messages")
    async def list_messages(circle_id: str, since: Optional[str] = Query(default=None)):
        try:
            messages = await hub.history(circle_id, since)
        except MessageStoreError as e:
            logger.error(f"[HISTORY] Failed to read messages for circle {circle_id}: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})
        return [m.to_wire() for m in messages]

    @router.get("/realtime/stats")
    async def realtime_stats():
        return {
            "connections": hub.registry.active_count,
            "circles": hub.registry.circle_count,
            "pendingBroadcasts": hub.dispatcher.pending,
        }

    return router
