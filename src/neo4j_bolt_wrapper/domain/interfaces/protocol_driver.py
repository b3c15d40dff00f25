"""Interface of the low-level protocol driver consumed by the wrapper."""
from typing import Any, Optional, Protocol

from ..models.protocol import Response


class ProtocolDriver(Protocol):
    """
    Structural interface for a Bolt-style protocol driver.

    Implementations own transport, message encoding and version negotiation.
    Server-side failures come back as ``FAILURE``/``IGNORED`` responses;
    transport failures raise ``DriverTransportError``.
    """

    @property
    def protocol_version(self) -> Optional[str]:
        """Negotiated ``"major.minor"`` version, or ``None`` while unknown."""
        raise NotImplementedError

    def connect(self) -> None:
        raise NotImplementedError

    def hello(self, auth: Optional[dict[str, Any]] = None) -> Response:
        raise NotImplementedError

    def logon(self, auth: dict[str, Any]) -> Response:
        raise NotImplementedError

    def run(
        self,
        query: str,
        params: Optional[dict[str, Any]] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> Response:
        raise NotImplementedError

    def pull(self) -> list[Response]:
        """Return every response of the pull batch, summary last."""
        raise NotImplementedError

    def begin(self, extra: Optional[dict[str, Any]] = None) -> Response:
        raise NotImplementedError

    def commit(self) -> Response:
        raise NotImplementedError

    def rollback(self) -> Response:
        raise NotImplementedError

    def goodbye(self) -> None:
        raise NotImplementedError
