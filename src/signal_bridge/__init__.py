"""
signal-bridge — signal-cli JSON-RPC bridge for Python.

Runs `signal-cli jsonRpc` as a subprocess and turns its event stream into
per-conversation buffers.
"""

from signal_bridge.client import SignalBridge
from signal_bridge.buffer import BufferState, ConversationBuffer
from signal_bridge.config import BridgeConfig, load_config, save_config
from signal_bridge.directory import ConversationDirectory
from signal_bridge.errors import (
    BridgeError, ConfigError, FramingError, MessageDecodeError, ProcessUnavailableError, ProtocolError,
)
from signal_bridge.models.entry import Entry, EntryKind, Severity
from signal_bridge.transport.process import ConnectionState

__version__ = "0.1.0"
__all__ = [
    "SignalBridge",
    "BufferState",
    "ConversationBuffer",
    "BridgeConfig",
    "load_config",
    "save_config",
    "ConversationDirectory",
    "BridgeError",
    "ConfigError",
    "FramingError",
    "MessageDecodeError",
    "ProcessUnavailableError",
    "ProtocolError",
    "Entry",
    "EntryKind",
    "Severity",
    "ConnectionState",
]
