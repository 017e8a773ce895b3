"""Server integration helpers (framework-agnostic).

Host apps call these to register the realtime WebSocket endpoint and the message API.
"""

import logging

from fastapi import APIRouter
from starlette.websockets import WebSocket, WebSocketDisconnect

from the_hub.api import build_messages_router
from the_hub.config import HubConfig
from the_hub.realtime import ChatHub

logger = logging.getLogger(__name__)


def build_ws_router(hub: ChatHub, ws_path: str = "/ws") -> APIRouter:
    """Build the APIRouter holding the realtime chat WebSocket endpoint."""
    router = APIRouter()

    @router.websocket(ws_path)
    async def websocket_chat(ws: WebSocket):
        await ws.accept()
        connection = hub.on_connection_opened(ws)
        logger.info(f"[WS] Client connected as {connection.id} "
                    f"(active connections: {hub.registry.active_count})")
        try:
            while True:
                frame = await ws.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                raw = frame.get("text")
                if raw is None:
                    raw = frame.get("bytes")
                hub.on_frame_received(connection, raw)
        except WebSocketDisconnect:
            logger.info(f"[WS] Client {connection.id} disconnected")
        except Exception as e:
            logger.error(f"[WS] Error on connection {connection.id}: {type(e).__name__}: {e}")
        finally:
            hub.registry.mark_closing(connection)
            hub.on_connection_closed(connection)

    return router


def get_router(hub: ChatHub, config: HubConfig) -> APIRouter:
    """Return the combined APIRouter for WebSocket + HTTP endpoints."""
    router = APIRouter()
    router.include_router(build_messages_router(hub, prefix=config.api_prefix))
    router.include_router(build_ws_router(hub, ws_path=config.ws_path))
    return router
