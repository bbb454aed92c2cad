"""
Encoding of outbound requests and decoding of inbound records.
"""

import json
from typing import Any, Optional

from pydantic import ValidationError

from signal_bridge.errors import MessageDecodeError
from signal_bridge.models.rpc import (
    JSONRPC_VERSION, ErrorResponse, Notification, Request, Response, RPCMessage,
)


def encode_request(request_id: int, method: str, params: Optional[dict[str, Any]] = None) -> bytes:
    """Serialize a request as a single newline-terminated line."""
    request = Request(id=request_id, method=method, params=params or {})
    body = {
        "jsonrpc": JSONRPC_VERSION,
        "method": request.method,
        "params": request.params,
        "id": request.id,
    }
    return (json.dumps(body, ensure_ascii=False) + "\n").encode("utf-8")


def decode_message(record: str) -> Optional[RPCMessage]:
    """Parse one record from the daemon.

    Returns None for lines that are not JSON objects at all (signal-cli mixes
    plain log output into its stdout). Raises MessageDecodeError when a line
    looks like an object but is not a valid JSON-RPC message.
    """
    text = record.strip()
    if not text.startswith("{"):
        return None
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise MessageDecodeError(f"Invalid JSON: {e}", record=text)
    except RecursionError:
        raise MessageDecodeError("JSON nested too deeply", record=text)
    if not isinstance(raw, dict):
        raise MessageDecodeError("JSON-RPC message is not an object", record=text)

    try:
        if "method" in raw:
            if raw.get("id") is not None:
                return Request.model_validate(raw)
            return Notification.model_validate(raw)
        if "error" in raw:
            return ErrorResponse.model_validate(raw)
        if "result" in raw or "id" in raw:
            return Response.model_validate(raw)
    except ValidationError as e:
        raise MessageDecodeError(f"Malformed JSON-RPC message: {e.error_count()} error(s)", record=text)
    raise MessageDecodeError("Unrecognized JSON-RPC message", record=text)
