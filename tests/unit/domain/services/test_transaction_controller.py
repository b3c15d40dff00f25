from unittest.mock import Mock

import pytest

from neo4j_bolt_wrapper.domain.models import Response, Signature
from neo4j_bolt_wrapper.domain.services import TransactionController
from neo4j_bolt_wrapper.exceptions import (
    BoltConnectionError,
    DriverTransportError,
    TransactionError,
)


@pytest.fixture
def reporter():
    return Mock()


@pytest.fixture
def log_hook():
    return Mock()


@pytest.fixture
def controller(manager, reporter, log_hook):
    return TransactionController(manager, reporter, log_hook)


@pytest.mark.parametrize(
    "action, marker",
    [
        ("begin", "BEGIN TRANSACTION"),
        ("commit", "COMMIT TRANSACTION"),
        ("rollback", "ROLLBACK TRANSACTION"),
    ],
)
def test_success_logs_marker(controller, fake_driver, reporter, log_hook, action, marker):
    assert getattr(controller, action)() is True

    assert fake_driver.requests()[-1] == action
    log_hook.assert_called_once_with(marker, {}, 0, {})
    reporter.assert_not_called()


@pytest.mark.parametrize("action", ["begin", "commit", "rollback"])
def test_failure_reports_once(controller, fake_driver, reporter, log_hook, action):
    setattr(
        fake_driver,
        f"{action}_response",
        Response(
            Signature.FAILURE,
            {"code": "Neo.ClientError.Transaction.TransactionNotFound", "message": "no tx"},
        ),
    )

    assert getattr(controller, action)() is False

    reporter.assert_called_once()
    error = reporter.call_args.args[0]
    assert isinstance(error, TransactionError)
    assert error.code == "Neo.ClientError.Transaction.TransactionNotFound"
    log_hook.assert_not_called()


def test_ignored_response_is_a_failure(controller, fake_driver, reporter):
    fake_driver.commit_response = Response(Signature.IGNORED, {})
    assert controller.commit() is False
    assert isinstance(reporter.call_args.args[0], TransactionError)


def test_begin_forwards_extra(controller, fake_driver):
    controller.begin({"tx_timeout": 500, "mode": "r"})
    assert fake_driver.calls[-1] == ("begin", {"tx_timeout": 500, "mode": "r"})


def test_begin_defaults_extra_to_empty_mapping(controller, fake_driver):
    controller.begin()
    assert fake_driver.calls[-1] == ("begin", {})


def test_nested_begin_is_not_rejected_locally(controller, fake_driver):
    assert controller.begin() is True
    assert controller.begin() is True
    assert fake_driver.requests().count("begin") == 2


def test_transport_failure_returns_false(controller, fake_driver, reporter, mocker):
    mocker.patch.object(fake_driver, "rollback", side_effect=DriverTransportError("eof"))
    assert controller.rollback() is False
    assert isinstance(reporter.call_args.args[0], TransactionError)


def test_connection_failure_returns_false(controller, fake_driver, reporter):
    fake_driver.hello_response = Response(Signature.FAILURE, {"message": "refused"})
    assert controller.begin() is False
    reporter.assert_called_once()
    assert isinstance(reporter.call_args.args[0], BoltConnectionError)
    assert "begin" not in fake_driver.requests()
