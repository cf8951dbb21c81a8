import pytest

from jshellpanel.events import (
    ErrorEvent, ExecEvent, ExecEventType, ListenerList, PanelEvent, PanelEventType,
)


def test_listeners_called_in_order_once():
    calls = []
    first = lambda e: calls.append(("first", e))
    second = lambda e: calls.append(("second", e))
    listeners = ListenerList()
    listeners.add(first)
    listeners.add(second)
    listeners.add(first)
    assert len(listeners) == 2
    listeners.notify("evt")
    assert calls == [("first", "evt"), ("second", "evt")]


def test_remove_unknown_listener_is_ignored():
    listeners = ListenerList()
    listeners.remove(print)
    assert not listeners


def test_failing_listener_does_not_block_others():
    calls = []

    def broken(_):
        raise RuntimeError("boom")

    listeners = ListenerList()
    listeners.add(broken)
    listeners.add(calls.append)
    listeners.notify(1)
    assert calls == [1]


def test_listener_may_unregister_itself():
    listeners = ListenerList()
    calls = []

    def once(e):
        calls.append(e)
        listeners.remove(once)

    listeners.add(once)
    listeners.notify("a")
    listeners.notify("b")
    assert calls == ["a"]


def test_non_callable_rejected():
    with pytest.raises(TypeError):
        ListenerList().add("not a function")


def test_event_objects():
    err = ErrorEvent(None, "failed")
    assert not err.has_exception
    err = ErrorEvent(None, "failed", ValueError("x"))
    assert err.has_exception
    assert str(ExecEvent(None, ExecEventType.SCRIPT_RUN)) == "ExecEvent(SCRIPT_RUN)"
    assert "path=a.jsh" in str(PanelEvent(None, PanelEventType.SCRIPT_LOAD_SUCCESS, "a.jsh"))
