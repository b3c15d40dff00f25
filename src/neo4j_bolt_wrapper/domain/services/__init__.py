"""Domain service layer."""

from .connection_manager import (
    Connection,
    ConnectionManager,
    ConnectionState,
    Transport,
)
from .hooks import ErrorHook, ErrorReporter, LogHook
from .query_facade import QueryFacade
from .result_mapper import ResultMapper
from .transaction_controller import TransactionController

__all__ = [
    "Connection",
    "ConnectionManager",
    "ConnectionState",
    "Transport",
    "ErrorHook",
    "ErrorReporter",
    "LogHook",
    "QueryFacade",
    "ResultMapper",
    "TransactionController",
]
