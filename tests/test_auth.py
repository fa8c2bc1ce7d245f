from __future__ import annotations

import pytest

from services.auth import TOKEN_PARAM, consume_access_token, login_url


def test_token_is_consumed_once() -> None:
    params = {TOKEN_PARAM: " abc123 ", "other": "x"}
    assert consume_access_token(params) == "abc123"
    assert params == {"other": "x"}
    assert consume_access_token(params) is None


@pytest.mark.parametrize("value", ["", "   ", []])
def test_blank_token_is_removed(value) -> None:
    params = {TOKEN_PARAM: value}
    assert consume_access_token(params) is None
    assert TOKEN_PARAM not in params


def test_repeated_param_uses_last_value() -> None:
    assert consume_access_token({TOKEN_PARAM: ["old", "new"]}) == "new"


def test_login_url() -> None:
    assert login_url("http://localhost:8888/") == "http://localhost:8888/login"
