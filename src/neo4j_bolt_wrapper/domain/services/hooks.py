"""Caller supplied hooks and the central error funnel."""

from typing import Any, Callable, Optional

from loguru import logger

from ...exceptions import BoltWrapperError

# (query, params, elapsed_ms, statistics)
LogHook = Callable[[str, dict[str, Any], int, dict[str, Any]], Any]
ErrorHook = Callable[[BoltWrapperError], Any]


class ErrorReporter:
    """Route every wrapper error to the error hook, or log it when none is set."""

    def __init__(self, hook: Optional[ErrorHook] = None) -> None:
        self.hook = hook

    def __call__(self, error: BoltWrapperError) -> None:
        if self.hook is not None:
            self.hook(error)
            return
        logger.error(f"Database error occurred: {error.message} {error.code or ''}".rstrip())


def call_log_hook(
    hook: Optional[LogHook],
    query: str,
    params: Optional[dict[str, Any]] = None,
    elapsed: int = 0,
    statistics: Optional[dict[str, Any]] = None,
) -> None:
    if hook is not None:
        hook(query, params or {}, elapsed, statistics or {})
