"""Interpretation of inbound control frames.

A frame ``{"type": "join", "circleId": "..."}`` adds the circle to the connection's
interests. Joins are additive, there is no leave frame. Anything else is dropped
without closing the connection or answering the sender.
"""

import json
import logging
from typing import Optional, Union

from pydantic import ValidationError

from the_hub.hub_models import JoinFrame
from .connection_registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)


def parse_join_frame(raw: Union[str, bytes]) -> Optional[JoinFrame]:
    """Parse a raw frame into a join declaration, or None if it is not one."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        logger.debug("[JOIN] Dropping non-JSON frame")
        return None
    if not isinstance(data, dict):
        logger.debug("[JOIN] Dropping frame that is not a JSON object")
        return None
    if data.get("type") != "join":
        logger.debug(f"[JOIN] Ignoring frame of type {data.get('type')!r}")
        return None
    try:
        return JoinFrame.model_validate(data)
    except ValidationError:
        logger.debug("[JOIN] Dropping malformed join frame")
        return None


def handle_frame(registry: ConnectionRegistry, connection: Connection, raw: Union[str, bytes]) -> bool:
    """Apply one inbound frame. Returns True if it was a valid join."""
    frame = parse_join_frame(raw)
    if frame is None:
        return False
    registry.join(connection, frame.circle_id)
    return True
