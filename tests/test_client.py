"""SignalBridge wiring without a live daemon."""

import pytest

from signal_bridge import BridgeConfig, ConfigError, ProcessUnavailableError, SignalBridge
from signal_bridge.collaborators import NullNotifier, PlaceholderMediaRenderer
from signal_bridge.models.entry import EntryKind
from signal_bridge.transport.process import ConnectionState, ProcessSupervisor


def make_bridge(**overrides) -> SignalBridge:
    cfg = BridgeConfig(command=["cat"], **overrides)
    return SignalBridge(cfg, notifier=NullNotifier())


@pytest.mark.asyncio
async def test_requires_account_or_command_at_start():
    bridge = SignalBridge(BridgeConfig(), notifier=NullNotifier())
    assert bridge.state == ConnectionState.STOPPED
    with pytest.raises(ConfigError):
        await bridge.start()
    assert not bridge.running


@pytest.mark.asyncio
async def test_supervisor_without_command_refuses_to_start():
    sup = ProcessSupervisor(None, on_message=lambda m: None)
    with pytest.raises(ProcessUnavailableError):
        await sup.start()
    assert sup.state == ConnectionState.STOPPED


def test_default_daemon_command():
    assert BridgeConfig(account="+1000").daemon_command() == ["signal-cli", "-a", "+1000", "jsonRpc"]


def test_initial_state():
    bridge = make_bridge()
    assert bridge.state == ConnectionState.STOPPED
    assert not bridge.running
    assert bridge.conversations() == []


def test_buffer_created_once():
    bridge = make_bridge()
    assert bridge.buffer("+1555") is bridge.buffer("+1555")


def test_send_while_stopped_is_rejected_before_any_change():
    bridge = make_bridge()
    bridge.buffer("+1555").insert("draft")
    with pytest.raises(ProcessUnavailableError):
        bridge.send_message("+1555", "hi")
    with pytest.raises(ProcessUnavailableError):
        bridge.send_attachments("+1555", ["/tmp/x.png"])
    with pytest.raises(ProcessUnavailableError):
        bridge.submit("+1555")
    assert bridge.buffer("+1555").entries == ()
    assert bridge.buffer("+1555").input_text == "draft"
    assert bridge.conversations() == []
    assert bridge.supervisor.correlator.next_id() == 1


def test_chunked_receive_reaches_buffer_and_handlers():
    bridge = make_bridge()
    seen = []
    remove = bridge.add_entry_handler(lambda cid, entry: seen.append((cid, entry.text)))
    line = b'{"jsonrpc":"2.0","method":"receive","params":{"envelope":{"sourceNumber":"+1555","sourceName":"Ann","dataMessage":{"message":"hi"}}}}\n'
    bridge.supervisor.feed(line[:17])
    assert seen == []
    bridge.supervisor.feed(line[17:])
    assert seen == [("+1555", "hi")]
    assert bridge.conversations() == [("+1555", "Ann")]
    assert bridge.display_name("+1555") == "Ann"

    remove()
    bridge.supervisor.feed(line)
    assert len(seen) == 1
    assert len(bridge.buffer("+1555").entries) == 2


def test_noise_and_bad_lines_do_not_stop_the_stream(caplog):
    bridge = make_bridge()
    bridge.supervisor.feed(
        b"INFO  signal-cli starting\n"
        b'{"jsonrpc":"2.0","method":\n'
        b'{"jsonrpc":"2.0","method":"receive","params":{"envelope":{"sourceNumber":"+2","dataMessage":{"message":"ok"}}}}\n'
    )
    assert [e.text for e in bridge.buffer("+2").entries] == ["ok"]
    assert "Invalid JSON" in caplog.text


def test_reveal_hook_uses_config():
    revealed = []
    bridge = SignalBridge(
        BridgeConfig(command=["cat"], auto_reveal=True),
        notifier=NullNotifier(),
        media=PlaceholderMediaRenderer(),
        on_reveal=revealed.append,
    )
    bridge.supervisor.feed(
        b'{"jsonrpc":"2.0","method":"receive","params":{"envelope":{"sourceNumber":"+3","dataMessage":{"message":"x"}}}}\n'
    )
    assert revealed == ["+3"]
    assert bridge.buffer("+3").entries[0].kind == EntryKind.INCOMING


def test_placeholder_media_renderer():
    media = PlaceholderMediaRenderer()
    assert media.render_attachment("/a/b.jpg", "image/jpeg") == "[image: /a/b.jpg]"
    assert media.render_attachment("/a/b.pdf", "application/pdf") == "[file: /a/b.pdf]"
    assert media.render_sticker("p", 1, "\U0001F600") == "[sticker \U0001F600]"
    assert media.render_sticker("p", 1, None) == "[sticker]"


def test_deeply_nested_line_does_not_stop_following_records(caplog):
    bridge = make_bridge()
    nested = b'{"a":' + b"[" * 20000 + b"]" * 20000 + b"}\n"
    good = b'{"jsonrpc":"2.0","method":"receive","params":{"envelope":{"sourceNumber":"+4","dataMessage":{"message":"still here"}}}}\n'
    bridge.supervisor.feed(nested + good)
    assert [e.text for e in bridge.buffer("+4").entries] == ["still here"]
    assert "nested too deeply" in caplog.text
