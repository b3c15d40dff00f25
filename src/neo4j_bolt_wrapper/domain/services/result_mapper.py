from typing import Any, Optional

from loguru import logger

from ...exceptions import DriverTransportError, QueryError
from ..models import QueryResult, Statistics
from .connection_manager import Connection
from .hooks import LogHook, call_log_hook


class ResultMapper:
    """Turn a RUN/PULL exchange into rows and statistics."""

    def __init__(self, log_hook: Optional[LogHook] = None) -> None:
        self.log_hook = log_hook

    def execute(
        self,
        connection: Connection,
        query: str,
        params: Optional[dict[str, Any]] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> QueryResult:
        """
        Run ``query`` and pull its complete result stream.

        Args:
            connection: An established connection, held exclusively by the caller.
            query: The Cypher statement.
            params: Query parameters.
            extra: RUN metadata such as ``tx_timeout`` or ``tx_metadata``.

        Returns:
            QueryResult with one dict per record, keyed by the RUN fields.

        Raises:
            QueryError: If RUN fails, or PULL yields FAILURE/IGNORED, or the
                transport breaks mid-exchange.
        """
        params = params or {}
        extra = extra or {}
        driver = connection.driver
        logger.debug(f"RUN {query[:100]!r}")

        try:
            run_response = driver.run(query, params, extra)
            if not run_response.is_success:
                raise QueryError(
                    run_response.describe(), run_response.code, run_response
                )
            run = run_response.content if isinstance(run_response.content, dict) else {}

            records: list[Any] = []
            for response in driver.pull():
                if response.is_failure:
                    # The message comes from the RUN content, not the failing
                    # response; kept for compatibility with existing callers.
                    raise QueryError(run_response.describe(), response.code, response)
                records.append(response.content)
        except DriverTransportError as exc:
            raise QueryError(str(exc)) from exc

        summary = records.pop() if records else {}
        if not isinstance(summary, dict):
            summary = {}
        statistics: Statistics = dict(summary.get("stats") or {})
        statistics["rows"] = len(records)
        elapsed = int(run.get("t_first") or 0) + int(summary.get("t_last") or 0)

        call_log_hook(self.log_hook, query, params, elapsed, statistics)
        logger.debug(f"Query returned {len(records)} rows in {elapsed} ms")

        fields = list(run.get("fields") or [])
        rows = [dict(zip(fields, record)) for record in records]
        return QueryResult(rows=rows, statistics=statistics, elapsed=elapsed)
