import threading
from typing import Any, Optional

from ...config import BoltSettings
from ...exceptions import BoltWrapperError
from ..models import QueryResult, ResultRow, Statistics
from .connection_manager import ConnectionManager, DriverFactory
from .hooks import ErrorHook, ErrorReporter, LogHook
from .result_mapper import ResultMapper
from .transaction_controller import TransactionController


class QueryFacade:
    """
    Public entry point for running queries over a single Bolt connection.

    Every method reports failures through the error hook (or the default
    logger) and returns an empty value instead of raising.

    Example:
        >>> db = QueryFacade.from_settings()
        >>> db.query("RETURN $n AS num", {"n": 123})
        [{'num': 123}]
        >>> db.statistic("rows")
        1
    """

    def __init__(
        self,
        manager: ConnectionManager,
        log_hook: Optional[LogHook] = None,
        error_hook: Optional[ErrorHook] = None,
    ) -> None:
        self._manager = manager
        self._reporter = ErrorReporter(error_hook)
        self._mapper = ResultMapper(log_hook)
        self._transactions = TransactionController(manager, self._reporter, log_hook)
        self._statistics: Statistics = {}
        self._statistics_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[BoltSettings] = None,
        driver_factory: Optional[DriverFactory] = None,
        **hooks: Any,
    ) -> "QueryFacade":
        manager = ConnectionManager(settings or BoltSettings(), driver_factory)
        return cls(manager, **hooks)

    @property
    def log_hook(self) -> Optional[LogHook]:
        return self._mapper.log_hook

    @log_hook.setter
    def log_hook(self, hook: Optional[LogHook]) -> None:
        self._mapper.log_hook = hook
        self._transactions.log_hook = hook

    @property
    def error_hook(self) -> Optional[ErrorHook]:
        return self._reporter.hook

    @error_hook.setter
    def error_hook(self, hook: Optional[ErrorHook]) -> None:
        self._reporter.hook = hook

    def query_result(
        self,
        query: str,
        params: Optional[dict[str, Any]] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> QueryResult:
        """Run a query and return its rows together with its own statistics."""
        try:
            with self._manager.exclusive() as connection:
                result = self._mapper.execute(connection, query, params, extra)
        except BoltWrapperError as exc:
            self._reporter(exc)
            return QueryResult()
        with self._statistics_lock:
            self._statistics = result.statistics
        return result

    def query(
        self,
        query: str,
        params: Optional[dict[str, Any]] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> list[ResultRow]:
        return self.query_result(query, params, extra).rows

    def query_first_field(
        self,
        query: str,
        params: Optional[dict[str, Any]] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Value of the first field of the first row, or ``None``."""
        rows = self.query(query, params, extra)
        if not rows:
            return None
        return next(iter(rows[0].values()), None)

    def query_first_column(
        self,
        query: str,
        params: Optional[dict[str, Any]] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> list[Any]:
        """Values of the first row's first field, taken from every row."""
        rows = self.query(query, params, extra)
        if not rows or not rows[0]:
            return []
        key = next(iter(rows[0]))
        return [row[key] for row in rows]

    def begin(self, extra: Optional[dict[str, Any]] = None) -> bool:
        return self._transactions.begin(extra)

    def commit(self) -> bool:
        return self._transactions.commit()

    def rollback(self) -> bool:
        return self._transactions.rollback()

    def statistic(self, key: str) -> int:
        """
        Counter from the last executed query.

        Possible keys: ``rows`` plus the server counters such as
        ``nodes-created``, ``relationships-deleted`` or ``labels-added``
        (see ``STATISTIC_KEYS``). Unknown keys yield 0.
        """
        with self._statistics_lock:
            value = self._statistics.get(key, 0)
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0

    def close(self) -> None:
        self._manager.cleanup()

    def __enter__(self) -> "QueryFacade":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
