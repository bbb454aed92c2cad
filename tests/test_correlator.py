"""RequestCorrelator: id allocation and one-shot resolution."""

from signal_bridge.correlator import RequestCorrelator


def test_ids_start_at_one_and_increase():
    c = RequestCorrelator()
    ids = [c.next_id() for _ in range(100)]
    assert ids[0] == 1
    assert all(b > a for a, b in zip(ids, ids[1:]))
    assert len(set(ids)) == len(ids)


def test_resolve_returns_context_once():
    c = RequestCorrelator()
    rid = c.next_id()
    c.register(rid, "+1555")
    assert rid in c
    assert c.pending == 1
    assert c.resolve(rid) == "+1555"
    assert c.resolve(rid) is None
    assert rid not in c
    assert c.pending == 0


def test_unknown_and_unregistered_ids_resolve_to_none():
    c = RequestCorrelator()
    rid = c.next_id()
    assert c.resolve(rid) is None
    assert c.resolve(9999) is None
    assert c.resolve("abc") is None
    assert c.resolve(None) is None


def test_reset_keeps_counter():
    c = RequestCorrelator()
    first = c.next_id()
    c.register(first, "G1")
    c.reset()
    assert c.pending == 0
    assert c.resolve(first) is None
    assert c.next_id() == first + 1
