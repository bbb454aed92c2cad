"""
JSON-RPC 2.0 message shapes exchanged with signal-cli.
"""

from typing import Any, Optional, Union
from pydantic import BaseModel

JSONRPC_VERSION = "2.0"

RequestId = Union[int, str]


class Request(BaseModel):
    id: RequestId
    method: str
    params: dict[str, Any] = {}
    jsonrpc: str = JSONRPC_VERSION


class Response(BaseModel):
    id: Optional[RequestId] = None
    result: Any = None


class RpcError(BaseModel):
    code: Optional[int] = None
    message: str = ""
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    id: Optional[RequestId] = None
    error: RpcError


class Notification(BaseModel):
    method: str
    params: dict[str, Any] = {}


RPCMessage = Union[Request, Response, ErrorResponse, Notification]
