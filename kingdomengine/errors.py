"""Categorized error reporting for the simulation core.

Public transitions never raise across their boundary: a failure is logged
with its category and context, and the caller gets back either the state it
passed in or a safe zero value. The only exception is :class:`ConfigError`,
raised when a new game is built from a malformed configuration.
"""

from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


class ErrorCategory(Enum):
    VALIDATION = "validation"
    CALCULATION = "calculation"
    STATE = "state"
    CONFIG = "config"


@dataclass(frozen=True)
class GameError:
    """A logged failure, returned for callers that want to inspect it."""

    message: str
    category: ErrorCategory
    context: str
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: float = 0.0


class ConfigError(ValueError):
    """Raised when a GameConfig fails validation at startup."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(
            "Invalid GameConfig:\n" + "\n".join(f"  - {e}" for e in self.errors)
        )


def _logger_for(context: str) -> logging.Logger:
    return logging.getLogger(f"kingdomengine.{context}")


def handle_game_error(
    message: str,
    category: ErrorCategory,
    context: str,
    **details: Any,
) -> GameError:
    """Log a categorized error and return its record.

    Validation problems are expected at runtime (bad keys, unaffordable
    choices) and log at WARNING; everything else logs at ERROR.
    """
    error = GameError(
        message=message,
        category=category,
        context=context,
        details=details,
        timestamp=time.time(),
    )
    level = logging.WARNING if category is ErrorCategory.VALIDATION else logging.ERROR
    if details:
        _logger_for(context).log(level, "[%s] %s %r", category.value, message, details)
    else:
        _logger_for(context).log(level, "[%s] %s", category.value, message)
    return error


def _make_handler(category: ErrorCategory, context: str) -> Callable[..., GameError]:
    def _handler(message: str, **details: Any) -> GameError:
        return handle_game_error(message, category, context, **details)

    return _handler


def validation_handler(context: str) -> Callable[..., GameError]:
    return _make_handler(ErrorCategory.VALIDATION, context)


def calculation_handler(context: str) -> Callable[..., GameError]:
    return _make_handler(ErrorCategory.CALCULATION, context)


def state_handler(context: str) -> Callable[..., GameError]:
    return _make_handler(ErrorCategory.STATE, context)


_RETURN_STATE = object()


def guarded(
    category: ErrorCategory,
    context: str,
    fallback: Any = _RETURN_STATE,
) -> Callable[[F], F]:
    """Wrap a core entry point so unexpected exceptions are logged, not raised.

    By default the wrapped function's ``state`` argument is returned on
    failure; pass *fallback* (a value or a zero-argument callable) to return
    something else.
    """

    def decorator(fn: F) -> F:
        log = _logger_for(context)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except ConfigError:
                raise
            except Exception:
                log.exception("[%s] %s failed", category.value, fn.__name__)
                if fallback is _RETURN_STATE:
                    return _find_state(args, kwargs)
                if callable(fallback):
                    return fallback()
                return fallback

        return wrapper  # type: ignore[return-value]

    return decorator


def _find_state(args: tuple, kwargs: dict[str, Any]) -> Any:
    if "state" in kwargs:
        return kwargs["state"]
    from kingdomengine.state import GameState

    for arg in args:
        if isinstance(arg, GameState):
            return arg
    return None
