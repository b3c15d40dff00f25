from .protocol import Response, Signature, parse_version
from .results import STATISTIC_KEYS, QueryResult, ResultRow, Statistics

__all__ = [
    "Response",
    "Signature",
    "parse_version",
    "STATISTIC_KEYS",
    "QueryResult",
    "ResultRow",
    "Statistics",
]
