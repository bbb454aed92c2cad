"""
Building `send` params and parsing `receive` envelopes.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from signal_bridge.models.envelope import Envelope

logger = logging.getLogger(__name__)


def build_send_params(
    conversation_id: str,
    is_group: bool,
    message: str = "",
    attachments: Optional[list[str]] = None,
) -> dict[str, Any]:
    """Address a `send` request at a contact or a group."""
    params: dict[str, Any] = {"message": message}
    if attachments:
        params["attachments"] = list(attachments)
    if is_group:
        params["groupId"] = conversation_id
    else:
        params["recipient"] = [conversation_id]
    return params


def parse_envelope(params: dict[str, Any]) -> Optional[Envelope]:
    """Parse the envelope of a `receive` notification. Returns None if invalid."""
    # Older signal-cli releases nest the envelope under params.result.
    raw = params.get("envelope")
    if raw is None and isinstance(params.get("result"), dict):
        raw = params["result"].get("envelope")
    if not isinstance(raw, dict):
        logger.debug("receive notification without an envelope")
        return None
    try:
        return Envelope.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Dropping malformed envelope: {e.error_count()} validation error(s)")
        return None
