"""Minimal query and transaction façade over a single Bolt connection."""

from .config import AuthSettings, BoltSettings, LoggingSettings, load_runtime_settings
from .domain.models import QueryResult, Response, Signature
from .domain.services import ConnectionManager, QueryFacade
from .exceptions import (
    BoltConnectionError,
    BoltWrapperError,
    DriverTransportError,
    QueryError,
    TransactionError,
)

__version__ = "0.1.0"

__all__ = [
    "AuthSettings",
    "BoltSettings",
    "LoggingSettings",
    "load_runtime_settings",
    "QueryResult",
    "Response",
    "Signature",
    "ConnectionManager",
    "QueryFacade",
    "BoltConnectionError",
    "BoltWrapperError",
    "DriverTransportError",
    "QueryError",
    "TransactionError",
]
