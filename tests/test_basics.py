"""Basic unit tests for the signal-bridge package."""

from signal_bridge import (
    BridgeError,
    ConfigError,
    FramingError,
    MessageDecodeError,
    ProcessUnavailableError,
    ProtocolError,
    SignalBridge,
    __version__,
)
from signal_bridge.dispatcher import RECEIVE_METHOD


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert SignalBridge is not None


def test_error_hierarchy():
    for cls in (ConfigError, FramingError, MessageDecodeError, ProcessUnavailableError, ProtocolError):
        assert issubclass(cls, BridgeError)


def test_error_attributes():
    err = BridgeError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    proto = ProtocolError("Untrusted identity", rpc_code=-1, request_id=7)
    assert proto.code == "protocol_error"
    assert proto.details == {"rpc_code": -1, "request_id": 7}

    assert ProcessUnavailableError().code == "process_unavailable"
    assert MessageDecodeError("bad", record="{x").details == {"record": "{x"}


def test_method_constants():
    assert RECEIVE_METHOD == "receive"
