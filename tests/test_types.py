"""Tests for _types module."""
import logging

import pytest

from kingdomengine._types import compare, is_valid_operator


@pytest.mark.parametrize(
    "left, op, right, expected",
    [
        (5, ">=", 5, True),
        (4, ">=", 5, False),
        (5, ">", 5, False),
        (4, "<=", 5, True),
        (5, "<", 5, False),
        (5, "=", 5, True),
        (5, "==", 4, False),
        (5, "!=", 4, True),
    ],
)
def test_compare(left, op, right, expected):
    assert compare(left, op, right) is expected


def test_unknown_operator_falls_back_to_ge(caplog):
    with caplog.at_level(logging.WARNING):
        assert compare(10, "~", 5)
        assert not compare(1, "~", 5)
    assert "Unknown operator" in caplog.text


def test_is_valid_operator():
    assert is_valid_operator(">=")
    assert not is_valid_operator("=>")
