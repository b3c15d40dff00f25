from typing import Any, Callable, Optional

from loguru import logger

from ...exceptions import BoltWrapperError, DriverTransportError, TransactionError
from ..models import Response
from .connection_manager import Connection, ConnectionManager
from .hooks import ErrorReporter, LogHook, call_log_hook


class TransactionController:
    """Explicit transaction control over the managed connection."""

    def __init__(
        self,
        manager: ConnectionManager,
        report_error: ErrorReporter,
        log_hook: Optional[LogHook] = None,
    ) -> None:
        self._manager = manager
        self._report_error = report_error
        self.log_hook = log_hook

    def begin(self, extra: Optional[dict[str, Any]] = None) -> bool:
        extra = extra or {}
        return self._execute("BEGIN", lambda conn: conn.driver.begin(extra))

    def commit(self) -> bool:
        return self._execute("COMMIT", lambda conn: conn.driver.commit())

    def rollback(self) -> bool:
        return self._execute("ROLLBACK", lambda conn: conn.driver.rollback())

    def _execute(
        self, action: str, request: Callable[[Connection], Response]
    ) -> bool:
        logger.debug(f"{action} requested")
        try:
            with self._manager.exclusive() as connection:
                try:
                    response = request(connection)
                except DriverTransportError as exc:
                    raise TransactionError(str(exc)) from exc
            if not response.is_success:
                raise TransactionError(response.describe(), response.code)
        except BoltWrapperError as exc:
            self._report_error(exc)
            return False
        call_log_hook(self.log_hook, f"{action} TRANSACTION")
        return True
