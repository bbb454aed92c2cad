"""
signal-bridge error types.
"""

from typing import Any, Optional


class BridgeError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class FramingError(BridgeError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("framing_error", message, details)


class MessageDecodeError(BridgeError):
    def __init__(self, message: str, record: str = ""):
        super().__init__("decode_error", message, {"record": record[:200]})


class ProtocolError(BridgeError):
    """The daemon answered a request with a JSON-RPC error."""

    def __init__(self, message: str, rpc_code: Optional[int] = None, request_id: Any = None):
        super().__init__("protocol_error", message, {"rpc_code": rpc_code, "request_id": request_id})
        self.rpc_code = rpc_code
        self.request_id = request_id


class ProcessUnavailableError(BridgeError):
    def __init__(self, message: str = "signal-cli is not running. Call start() first."):
        super().__init__("process_unavailable", message)


class ConfigError(BridgeError):
    def __init__(self, message: str):
        super().__init__("config_error", message)
