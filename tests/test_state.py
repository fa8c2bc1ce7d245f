from __future__ import annotations

from types import SimpleNamespace

import pytest

from core import state


@pytest.fixture
def session(monkeypatch) -> dict:
    fake = SimpleNamespace(session_state={})
    monkeypatch.setattr(state, "st", fake)
    state.ensure_defaults()
    return fake.session_state


def test_defaults_do_not_overwrite(session) -> None:
    session["TIME_RANGE"] = "long_term"
    state.ensure_defaults()
    assert session["TIME_RANGE"] == "long_term"
    assert session["RECEIPT_TYPE"] == "tracks"


def test_items_fetched_once_per_key(session) -> None:
    calls: list[int] = []

    def loader() -> list[int]:
        calls.append(1)
        return [len(calls)]

    assert state.items_for(("spotify", "tracks"), loader) == [1]
    assert state.items_for(("spotify", "tracks"), loader) == [1]
    assert state.items_for(("spotify", "artists"), loader) == [2]
    assert len(calls) == 2


def test_failed_fetch_clears_previous_items(session) -> None:
    state.items_for(("a",), lambda: ["old"])

    def boom() -> list:
        raise RuntimeError("down")

    with pytest.raises(RuntimeError):
        state.items_for(("b",), boom)
    assert session["ITEMS"] is None
    assert session["ITEMS_KEY"] is None


def test_drop_items(session) -> None:
    state.items_for(("a",), lambda: ["x"])
    state.drop_items()
    assert session["ITEMS"] is None
