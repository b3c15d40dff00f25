"""Pytest configuration and shared fixtures for the test suite."""

from typing import Any, Optional
from unittest.mock import Mock

import pytest

from neo4j_bolt_wrapper.config import AuthSettings, BoltSettings
from neo4j_bolt_wrapper.domain.models import Response, Signature
from neo4j_bolt_wrapper.domain.services import ConnectionManager, QueryFacade


class FakeDriver:
    """Scripted ProtocolDriver recording every request it receives."""

    def __init__(self, protocol_version: Optional[str] = "4.4") -> None:
        self.protocol_version = protocol_version
        self.calls: list[tuple] = []
        self.hello_response = Response(Signature.SUCCESS, {"server": "Neo4j/5.0.0"})
        self.logon_response = Response(Signature.SUCCESS, {})
        self.begin_response = Response(Signature.SUCCESS, {})
        self.commit_response = Response(Signature.SUCCESS, {"bookmark": "bm:1"})
        self.rollback_response = Response(Signature.SUCCESS, {})
        self.run_responses: list[Response] = []
        self.pull_batches: list[list[Response]] = []
        self.connect_error: Optional[Exception] = None
        self.goodbye_error: Optional[Exception] = None

    def script_query(
        self,
        fields: list[str],
        records: list[list[Any]],
        stats: Optional[dict[str, Any]] = None,
        t_first: int = 0,
        t_last: int = 0,
    ) -> None:
        self.run_responses.append(
            Response(Signature.SUCCESS, {"fields": fields, "t_first": t_first})
        )
        summary: dict[str, Any] = {"t_last": t_last}
        if stats is not None:
            summary["stats"] = stats
        self.pull_batches.append(
            [Response(Signature.RECORD, record) for record in records]
            + [Response(Signature.SUCCESS, summary)]
        )

    def connect(self) -> None:
        self.calls.append(("connect",))
        if self.connect_error:
            raise self.connect_error

    def hello(self, auth=None) -> Response:
        self.calls.append(("hello", auth))
        return self.hello_response

    def logon(self, auth) -> Response:
        self.calls.append(("logon", auth))
        return self.logon_response

    def run(self, query, params=None, extra=None) -> Response:
        self.calls.append(("run", query, params, extra))
        return self.run_responses.pop(0)

    def pull(self) -> list[Response]:
        self.calls.append(("pull",))
        return self.pull_batches.pop(0)

    def begin(self, extra=None) -> Response:
        self.calls.append(("begin", extra))
        return self.begin_response

    def commit(self) -> Response:
        self.calls.append(("commit",))
        return self.commit_response

    def rollback(self) -> Response:
        self.calls.append(("rollback",))
        return self.rollback_response

    def goodbye(self) -> None:
        self.calls.append(("goodbye",))
        if self.goodbye_error:
            raise self.goodbye_error

    def requests(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def bolt_settings() -> BoltSettings:
    return BoltSettings(
        host="127.0.0.1",
        port=7687,
        timeout=2.5,
        auth=AuthSettings(scheme="basic", principal="neo4j", credentials="secret"),
    )


@pytest.fixture
def register_cleanup() -> Mock:
    return Mock()


@pytest.fixture
def unregister_cleanup() -> Mock:
    return Mock()


@pytest.fixture
def manager(
    bolt_settings, fake_driver, register_cleanup, unregister_cleanup
) -> ConnectionManager:
    return ConnectionManager(
        bolt_settings,
        driver_factory=lambda transport: fake_driver,
        register_cleanup=register_cleanup,
        unregister_cleanup=unregister_cleanup,
    )


@pytest.fixture
def facade(manager) -> QueryFacade:
    return QueryFacade(manager)
