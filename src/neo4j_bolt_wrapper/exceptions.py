"""Exceptions raised by the Bolt wrapper."""

from typing import Any, Optional


class BoltWrapperError(Exception):
    """Base exception for database errors surfaced by the wrapper."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class BoltConnectionError(BoltWrapperError):
    """Transport or handshake failure, or a connection that can no longer be used."""

    pass


class QueryError(BoltWrapperError):
    """Raised when a run or pull request does not succeed."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        response: Optional[Any] = None,
    ) -> None:
        """
        Args:
            message: Human readable description of the failure.
            code: Server error code, when one was reported.
            response: The failing protocol response, if any.
        """
        self.response = response
        super().__init__(message, code)


class TransactionError(BoltWrapperError):
    """Raised when begin, commit or rollback does not succeed."""

    pass


class DriverTransportError(Exception):
    """Raised by protocol drivers when the transport itself fails."""

    pass
