"""Result types produced by the query pipeline."""

from dataclasses import dataclass, field
from typing import Any

ResultRow = dict[str, Any]
Statistics = dict[str, Any]

# Counter names reported by the server in the ``stats`` map of a pull summary.
STATISTIC_KEYS = (
    "nodes-created",
    "nodes-deleted",
    "properties-set",
    "relationships-created",
    "relationships-deleted",
    "labels-added",
    "labels-removed",
    "indexes-added",
    "indexes-removed",
    "constraints-added",
    "constraints-removed",
)


@dataclass
class QueryResult:
    """Rows and statistics of one completed query."""

    rows: list[ResultRow] = field(default_factory=list)
    statistics: Statistics = field(default_factory=dict)
    elapsed: int = 0

    def __len__(self) -> int:
        return len(self.rows)

    def __bool__(self) -> bool:
        return bool(self.rows)
