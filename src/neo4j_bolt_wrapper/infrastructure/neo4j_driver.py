"""ProtocolDriver implementation backed by the official ``neo4j`` package."""
from typing import Any, Optional

from loguru import logger
from neo4j import Auth, Driver, GraphDatabase, Query, Result, Session, Transaction
from neo4j.exceptions import DriverError, Neo4jError
from neo4j.exceptions import TransactionError as Neo4jTransactionError

from ..domain.models import Response, Signature, parse_version
from ..domain.services.connection_manager import Transport
from ..exceptions import DriverTransportError
from ..logging_setup import mask_auth

USER_AGENT = "neo4j-bolt-wrapper/0.1"


def to_neo4j_auth(auth: Optional[dict[str, Any]]) -> Optional[Auth]:
    """Build a ``neo4j.Auth`` token from an auth descriptor."""
    if not auth or auth.get("scheme", "none") == "none":
        return None
    extra = {
        key: value
        for key, value in auth.items()
        if key not in {"scheme", "principal", "credentials", "realm"}
    }
    return Auth(
        auth["scheme"],
        auth.get("principal"),
        auth.get("credentials"),
        auth.get("realm"),
        **extra,
    )


def failure(exc: Exception) -> Response:
    return Response(
        Signature.FAILURE,
        {
            "code": getattr(exc, "code", None) or type(exc).__name__,
            "message": getattr(exc, "message", None) or str(exc),
        },
    )


class Neo4jBoltDriver:
    """
    Expose the ``neo4j`` driver through the HELLO/LOGON/RUN/PULL vocabulary.

    The neo4j driver performs its own HELLO/LOGON on first contact, so the
    server is only dialed once credentials are known. Time to first record
    is reported with the PULL summary because the public API only exposes
    it after the result has been consumed.
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport
        self.uri: Optional[str] = None
        self._driver: Optional[Driver] = None
        self._session: Optional[Session] = None
        self._tx: Optional[Transaction] = None
        self._result: Optional[Result] = None
        self._negotiated: Optional[str] = None

    @property
    def protocol_version(self) -> Optional[str]:
        return self._negotiated or self.transport.protocol_version

    def connect(self) -> None:
        host = self.transport.host
        if "://" in host:
            self.uri = f"{host}:{self.transport.port}"
        else:
            self.uri = f"bolt://{host}:{self.transport.port}"
        logger.debug(f"Bolt URI resolved to {self.uri}")

    def hello(self, auth: Optional[dict[str, Any]] = None) -> Response:
        if auth is None:
            # Credentials follow in LOGON.
            return Response(Signature.SUCCESS, {})
        return self._open(auth)

    def logon(self, auth: dict[str, Any]) -> Response:
        return self._open(auth)

    def _open(self, auth: dict[str, Any]) -> Response:
        if self.uri is None:
            self.connect()
        logger.debug(f"Opening neo4j driver for {self.uri} as {mask_auth(auth)}")
        try:
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=to_neo4j_auth(auth),
                user_agent=USER_AGENT,
                connection_timeout=self.transport.timeout,
                connection_acquisition_timeout=self.transport.timeout,
                max_connection_pool_size=1,
            )
            self._driver.verify_connectivity()
            info = self._driver.get_server_info()
        except Neo4jError as exc:
            self._close_driver()
            return failure(exc)
        except (DriverError, OSError) as exc:
            self._close_driver()
            raise DriverTransportError(str(exc)) from exc

        negotiated = parse_version(tuple(info.protocol_version))
        requested = parse_version(self.transport.protocol_version)
        if requested is not None and negotiated != requested:
            self._close_driver()
            return Response(
                Signature.FAILURE,
                {
                    "code": "ProtocolVersionMismatch",
                    "message": f"Server negotiated Bolt {negotiated}, requested {requested}",
                },
            )
        self._negotiated = f"{negotiated[0]}.{negotiated[1]}" if negotiated else None
        self._session = self._driver.session()
        return Response(
            Signature.SUCCESS,
            {"server": info.agent, "protocol_version": self._negotiated},
        )

    def run(
        self,
        query: str,
        params: Optional[dict[str, Any]] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> Response:
        self._result = None
        try:
            metadata, timeout = tx_options(extra)
        except (TypeError, ValueError) as exc:
            return invalid_options(exc)
        try:
            if self._tx is not None:
                result = self._tx.run(query, params or {})
            else:
                result = self._require_session().run(
                    Query(query, metadata=metadata, timeout=timeout),
                    params or {},
                )
            fields = list(result.keys())
        except (Neo4jError, Neo4jTransactionError) as exc:
            return failure(exc)
        except (DriverError, OSError) as exc:
            raise DriverTransportError(str(exc)) from exc
        self._result = result
        return Response(Signature.SUCCESS, {"fields": fields, "t_first": 0})

    def pull(self) -> list[Response]:
        if self._result is None:
            return [Response(Signature.IGNORED, {})]
        result, self._result = self._result, None
        responses: list[Response] = []
        try:
            for record in result:
                responses.append(Response(Signature.RECORD, list(record.values())))
            summary = result.consume()
        except (Neo4jError, Neo4jTransactionError) as exc:
            responses.append(failure(exc))
            return responses
        except (DriverError, OSError) as exc:
            raise DriverTransportError(str(exc)) from exc

        metadata = getattr(summary, "metadata", None) or {}
        elapsed = (summary.result_available_after or 0) + (
            summary.result_consumed_after or 0
        )
        responses.append(
            Response(
                Signature.SUCCESS,
                {
                    "stats": dict(metadata.get("stats") or {}),
                    "t_last": elapsed,
                    "type": summary.query_type,
                    "db": summary.database,
                },
            )
        )
        return responses

    def begin(self, extra: Optional[dict[str, Any]] = None) -> Response:
        try:
            metadata, timeout = tx_options(extra)
        except (TypeError, ValueError) as exc:
            return invalid_options(exc)
        try:
            self._tx = self._require_session().begin_transaction(
                metadata=metadata, timeout=timeout
            )
        except (Neo4jError, Neo4jTransactionError) as exc:
            return failure(exc)
        except (DriverError, OSError) as exc:
            raise DriverTransportError(str(exc)) from exc
        return Response(Signature.SUCCESS, {})

    def commit(self) -> Response:
        return self._finish("commit")

    def rollback(self) -> Response:
        return self._finish("rollback")

    def _finish(self, action: str) -> Response:
        if self._tx is None:
            return Response(
                Signature.FAILURE,
                {"code": "NoTransaction", "message": f"Cannot {action}: no open transaction"},
            )
        tx, self._tx = self._tx, None
        try:
            getattr(tx, action)()
        except (Neo4jError, Neo4jTransactionError) as exc:
            return failure(exc)
        except (DriverError, OSError) as exc:
            raise DriverTransportError(str(exc)) from exc
        return Response(Signature.SUCCESS, {})

    def goodbye(self) -> None:
        if self._tx is not None:
            self._tx.close()
            self._tx = None
        if self._session is not None:
            self._session.close()
            self._session = None
        self._close_driver()

    def _require_session(self) -> Session:
        if self._session is None:
            raise DriverTransportError("Driver is not authenticated; call hello first")
        return self._session

    def _close_driver(self) -> None:
        if self._driver is not None:
            self._driver.close()
            self._driver = None


def tx_options(
    extra: Optional[dict[str, Any]],
) -> tuple[Optional[dict[str, Any]], Optional[float]]:
    """
    Read ``tx_metadata`` and ``tx_timeout`` (milliseconds) from RUN/BEGIN extras.

    Returns the metadata and the timeout in seconds. Raises ``TypeError`` or
    ``ValueError`` for values the neo4j driver would not accept.
    """
    extra = extra or {}
    metadata = extra.get("tx_metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise TypeError(f"tx_metadata must be a map, got {type(metadata).__name__}")
    milliseconds = extra.get("tx_timeout")
    if milliseconds is None:
        return metadata, None
    if isinstance(milliseconds, bool):
        raise TypeError("tx_timeout must be a number of milliseconds")
    timeout = float(milliseconds) / 1000.0
    if timeout < 0:
        raise ValueError(f"tx_timeout must not be negative, got {milliseconds}")
    return metadata, timeout


def invalid_options(exc: Exception) -> Response:
    logger.warning(f"Rejected transaction options: {exc}")
    return Response(
        Signature.FAILURE,
        {"code": "InvalidTransactionOptions", "message": str(exc)},
    )
