import atexit
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from loguru import logger

from ...config import BoltSettings
from ...exceptions import BoltConnectionError, DriverTransportError
from ...logging_setup import mask_auth
from ..interfaces import ProtocolDriver
from ..models import Response, parse_version

# Bolt 5.1 moved credentials from HELLO into a separate LOGON message.
LOGON_PROTOCOL_VERSION = (5, 1)
ENCRYPTED_SCHEME_MARKER = "+s://"


@dataclass(frozen=True)
class Transport:
    """Where and how the driver should dial the server."""

    host: str
    port: int
    timeout: float
    encrypted: bool = False
    verify_peer: bool = False
    protocol_version: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: BoltSettings) -> "Transport":
        encrypted = settings.host.find(ENCRYPTED_SCHEME_MARKER) > 0
        return cls(
            host=settings.host,
            port=settings.port,
            timeout=settings.timeout,
            encrypted=encrypted,
            verify_peer=encrypted,
            protocol_version=settings.protocol_version,
        )


@dataclass
class Connection:
    """Handle on the single live driver owned by a ``ConnectionManager``."""

    host: str
    port: int
    timeout: float
    driver: ProtocolDriver
    auth: dict[str, Any] = field(default_factory=dict, repr=False)
    requested_version: Optional[str] = None
    protocol_version: Optional[str] = None
    handshake_completed: bool = False


class ConnectionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"
    TERMINATED = "terminated"


DriverFactory = Callable[[Transport], ProtocolDriver]


def default_driver_factory(transport: Transport) -> ProtocolDriver:
    from ...infrastructure.neo4j_driver import Neo4jBoltDriver

    return Neo4jBoltDriver(transport)


class ConnectionManager:
    """Thread-safe owner of one lazily built, never rebuilt connection."""

    def __init__(
        self,
        settings: Optional[BoltSettings] = None,
        driver_factory: Optional[DriverFactory] = None,
        register_cleanup: Optional[Callable[[Callable[[], None]], Any]] = None,
        unregister_cleanup: Optional[Callable[[Callable[[], None]], Any]] = None,
    ) -> None:
        self._settings = settings or BoltSettings()
        self._driver_factory = driver_factory or default_driver_factory
        self._register_cleanup = register_cleanup or atexit.register
        self._unregister_cleanup = unregister_cleanup or atexit.unregister
        self._cleanup_registered = False
        self._connection: Optional[Connection] = None
        self._failure: Optional[BoltConnectionError] = None
        self._state = ConnectionState.UNINITIALIZED
        self._lock = threading.RLock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    def get_connection(self) -> Connection:
        """Return the connection, building it on first use."""
        with self._lock:
            if self._state is ConnectionState.READY and self._connection:
                return self._connection
            if self._state is ConnectionState.FAILED:
                raise BoltConnectionError(
                    f"Connection unavailable after failed attempt: {self._failure}",
                    self._failure.code if self._failure else None,
                )
            if self._state is ConnectionState.TERMINATED:
                raise BoltConnectionError("Connection has been closed")

            self._state = ConnectionState.CONNECTING
            try:
                self._connection = self._build()
            except BoltConnectionError as exc:
                self._state = ConnectionState.FAILED
                self._failure = exc
                raise
            except Exception as exc:
                logger.error(f"Unexpected error while connecting: {exc!r}")
                self._state = ConnectionState.FAILED
                self._failure = BoltConnectionError(str(exc) or type(exc).__name__)
                raise self._failure from exc
            self._state = ConnectionState.READY
            self._register_cleanup(self.cleanup)
            self._cleanup_registered = True
            return self._connection

    @contextmanager
    def exclusive(self) -> Iterator[Connection]:
        """Hold the connection for one complete request/response exchange."""
        with self._lock:
            yield self.get_connection()

    def _build(self) -> Connection:
        transport = Transport.from_settings(self._settings)
        auth = self._settings.auth.as_descriptor()
        logger.info(
            f"Opening Bolt connection to {transport.host}:{transport.port} "
            f"({'encrypted' if transport.encrypted else 'plain'} transport)"
        )
        try:
            driver = self._driver_factory(transport)
            driver.connect()
            connection = Connection(
                host=transport.host,
                port=transport.port,
                timeout=transport.timeout,
                driver=driver,
                auth=auth,
                requested_version=transport.protocol_version,
            )
            self._handshake(connection)
        except DriverTransportError as exc:
            logger.error(f"Transport failure while connecting: {exc}")
            raise BoltConnectionError(str(exc)) from exc
        logger.info(
            f"Bolt connection ready (protocol {connection.protocol_version or 'unknown'})"
        )
        return connection

    def _handshake(self, connection: Connection) -> None:
        driver = connection.driver
        version = parse_version(driver.protocol_version)
        logger.debug(f"Handshake with auth {mask_auth(connection.auth)}")
        if version is None or version < LOGON_PROTOCOL_VERSION:
            self._expect_success(driver.hello(connection.auth), "HELLO")
        else:
            self._expect_success(driver.hello(), "HELLO")
            self._expect_success(driver.logon(connection.auth), "LOGON")
        connection.protocol_version = driver.protocol_version
        connection.handshake_completed = True

    @staticmethod
    def _expect_success(response: Response, step: str) -> None:
        if not response.is_success:
            logger.error(f"{step} rejected: {response.describe()}")
            raise BoltConnectionError(response.describe(), response.code)

    def cleanup(self) -> None:
        """Send GOODBYE once; errors are discarded so shutdown never fails."""
        with self._lock:
            connection = self._connection
            self._connection = None
            self._state = ConnectionState.TERMINATED
            if self._cleanup_registered:
                self._unregister_cleanup(self.cleanup)
                self._cleanup_registered = False
        if connection is None:
            return
        try:
            connection.driver.goodbye()
            logger.info("Bolt connection closed.")
        except Exception as exc:
            logger.debug(f"Ignoring error during GOODBYE: {exc}")
