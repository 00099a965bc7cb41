from __future__ import annotations

import logging
import operator
from typing import Callable

logger = logging.getLogger(__name__)

ResourceMap = dict[str, float]

_OPS: dict[str, Callable[[float, float], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
}


def compare(left: float, op: str, right: float) -> bool:
    """Compare two values using a string operator.

    Unknown operators fall back to ``>=`` so a mistyped config entry still
    behaves like the common threshold check.
    """
    fn = _OPS.get(op)
    if fn is None:
        logger.warning("Unknown operator %r, falling back to '>='", op)
        fn = operator.ge
    return fn(left, right)


def is_valid_operator(op: str) -> bool:
    return op in _OPS
