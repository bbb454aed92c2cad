"""ConversationBuffer: append ordering, boundary, input region discipline."""

from signal_bridge.buffer import PROMPT, BufferState, ConversationBuffer
from signal_bridge.models.entry import Entry, EntryKind, Severity


def incoming(text: str, sender: str = "Ann") -> Entry:
    return Entry(kind=EntryKind.INCOMING, text=text, sender_id="+1555", sender_name=sender)


def test_new_buffer_is_idle_and_empty():
    buf = ConversationBuffer("+1555")
    assert buf.entries == ()
    assert buf.text == PROMPT
    assert buf.boundary == len(PROMPT)
    assert buf.state == BufferState.IDLE


def test_appends_preserve_order_and_boundary_follows():
    buf = ConversationBuffer("+1555")
    entries = [incoming(f"message {i}") for i in range(20)]
    last_boundary = buf.boundary
    for entry in entries:
        buf.append_entry(entry)
        assert buf.boundary > last_boundary
        assert buf.boundary == len(buf.history_text) + len(PROMPT)
        assert buf.text.endswith(PROMPT)
        last_boundary = buf.boundary
    assert list(buf.entries) == entries
    lines = buf.history_text.splitlines()
    assert [line.split(": ", 1)[1] for line in lines] == [f"message {i}" for i in range(20)]


def test_take_input_trims_and_clears():
    buf = ConversationBuffer("+1555")
    buf.insert("  hello there \n")
    assert buf.state == BufferState.COMPOSING
    assert buf.take_input() == "hello there"
    assert buf.input_text == ""
    assert buf.state == BufferState.IDLE
    assert buf.take_input() == ""


def test_append_evicts_uncommitted_input():
    buf = ConversationBuffer("+1555")
    buf.insert("half-typed")
    buf.append_entry(incoming("hi"))
    assert buf.input_text == ""
    assert buf.state == BufferState.IDLE
    assert "half-typed" not in buf.text
    assert buf.text.endswith("hi\n" + PROMPT)


def test_guard_cursor_clamps_into_input_region():
    buf = ConversationBuffer("+1555")
    buf.append_entry(incoming("hi"))
    buf.insert("abc")
    assert buf.guard_cursor(0) == buf.boundary
    assert buf.guard_cursor(buf.boundary - 1) == buf.boundary
    assert buf.guard_cursor(buf.boundary + 2) == buf.boundary + 2
    assert buf.guard_cursor(10_000) == len(buf.text)


def test_edits_never_touch_history():
    buf = ConversationBuffer("+1555")
    buf.append_entry(incoming("hi"))
    history = buf.history_text
    cursor = buf.insert("world", pos=0)
    assert buf.input_text == "world"
    assert cursor == len(buf.text)
    buf.insert("hello ", pos=buf.boundary)
    assert buf.input_text == "hello world"
    assert buf.delete(0, buf.boundary + 6) == buf.boundary
    assert buf.input_text == "world"
    assert buf.history_text == history


def test_system_message_has_no_sender():
    buf = ConversationBuffer("G1")
    entry = buf.append_system_message("Error: Untrusted identity", Severity.ERROR)
    assert entry.kind == EntryKind.SYSTEM
    assert entry.sender_id is None and entry.sender_name is None
    assert buf.entries == (entry,)
    assert "*** error: Error: Untrusted identity" in buf.history_text


def test_on_append_hook():
    seen = []
    buf = ConversationBuffer("+1555", on_append=lambda cid, e: seen.append((cid, e.text)))
    buf.append_entry(incoming("one"))
    buf.append_system_message("two")
    assert seen == [("+1555", "one"), ("+1555", "two")]


def test_entry_render_with_media():
    entry = Entry(kind=EntryKind.INCOMING, text="", sender_name="Ann", media=("[image: /tmp/a]",))
    rendered = entry.render()
    assert rendered.splitlines()[0].endswith("Ann:")
    assert rendered.splitlines()[1] == "    [image: /tmp/a]"
