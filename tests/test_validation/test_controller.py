"""Tests for the validation controller."""

from __future__ import annotations

from typing import Callable

import pytest
from lsprotocol.types import MessageType

from jenkinsls.errors import AuthError, JenkinsApiError, JenkinsApiErrorKind, NetworkError
from jenkinsls.jenkins.models import ValidationFailure, ValidationOutcome, ValidationSuccess
from jenkinsls.validation.controller import ValidationController

URI = "file:///work/Jenkinsfile"
ERROR_BODY = (
    "Errors encountered validating Jenkinsfile:\n"
    "WorkflowScript: 10: Unexpected input @ line 10, column 5.\n"
    "WorkflowScript: 20: Missing closing brace @ line 20, column 3.\n"
)


class FakeJenkinsClient:
    """Returns a canned outcome (or raises) and can run a hook mid-request."""

    def __init__(
        self,
        outcome: ValidationOutcome | None = None,
        error: Exception | None = None,
        during_request: Callable[[], None] | None = None,
    ) -> None:
        self.outcome = outcome or ValidationSuccess()
        self.error = error
        self.during_request = during_request
        self.calls: list[str] = []

    async def validate(self, text: str) -> ValidationOutcome:
        self.calls.append(text)
        if self.during_request is not None:
            self.during_request()
        if self.error is not None:
            raise self.error
        return self.outcome


def _controller(publisher, **kwargs) -> tuple[ValidationController, FakeJenkinsClient]:
    client = FakeJenkinsClient(**kwargs)
    return ValidationController(client, publisher), client


@pytest.mark.asyncio
async def test_success_publishes_empty_list_with_version(publisher) -> None:
    controller, client = _controller(publisher)
    controller.open(URI, "pipeline {}", 3)

    await controller.validate(URI)

    assert client.calls == ["pipeline {}"]
    assert len(publisher.published) == 1
    params = publisher.published[0]
    assert params.uri == URI
    assert params.diagnostics == []
    assert params.version == 3
    assert publisher.messages == []


@pytest.mark.asyncio
async def test_error_publishes_parsed_diagnostics(publisher) -> None:
    controller, _ = _controller(publisher, outcome=ValidationFailure(raw_text=ERROR_BODY))
    controller.open(URI, "pipeline {", 2)

    await controller.validate(URI)

    params = publisher.published[-1]
    assert params.version == 2
    assert [d.message for d in params.diagnostics] == [
        "Unexpected input",
        "Missing closing brace",
    ]
    assert [(d.range.start.line, d.range.start.character) for d in params.diagnostics] == [
        (9, 4),
        (19, 2),
    ]


@pytest.mark.asyncio
async def test_unparseable_error_publishes_empty_and_warns(publisher, caplog) -> None:
    controller, _ = _controller(
        publisher, outcome=ValidationFailure(raw_text="java.lang.NullPointerException")
    )
    controller.open(URI, "x", 1)

    with caplog.at_level("WARNING"):
        await controller.validate(URI)

    assert publisher.published[-1].diagnostics == []
    assert "no error location could be parsed" in caplog.text


@pytest.mark.asyncio
async def test_unknown_document_is_ignored(publisher) -> None:
    controller, client = _controller(publisher)

    await controller.validate(URI)

    assert client.calls == []
    assert publisher.published == []


@pytest.mark.asyncio
async def test_stale_result_is_discarded(publisher) -> None:
    controller, _ = _controller(
        publisher,
        outcome=ValidationFailure(raw_text=ERROR_BODY),
        during_request=lambda: controller.change(URI, "edited", 5),
    )
    controller.open(URI, "original", 3)

    await controller.validate(URI)

    assert publisher.published == []
    current = controller.store.get(URI)
    assert current is not None and current.version == 5


@pytest.mark.asyncio
async def test_result_for_closed_document_is_discarded(publisher) -> None:
    controller, _ = _controller(
        publisher,
        outcome=ValidationFailure(raw_text=ERROR_BODY),
        during_request=lambda: controller.store.remove(URI),
    )
    controller.open(URI, "original", 3)

    await controller.validate(URI)

    assert publisher.published == []


@pytest.mark.asyncio
async def test_auth_error_shows_message_and_publishes_nothing(publisher) -> None:
    controller, _ = _controller(publisher, error=AuthError("Authentication failed."))
    controller.open(URI, "x", 1)

    await controller.validate(URI)

    assert publisher.published == []
    assert len(publisher.messages) == 1
    message = publisher.messages[0]
    assert message.type == MessageType.Error
    assert "authentication" in message.message.lower()
    assert "API token" in message.message


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        NetworkError("connection refused"),
        JenkinsApiError(JenkinsApiErrorKind.validator_missing, "Validation endpoint not found."),
        JenkinsApiError(JenkinsApiErrorKind.unexpected_status, "500 - boom", status_code=500),
    ],
)
async def test_other_errors_leave_diagnostics_untouched(publisher, error) -> None:
    controller, _ = _controller(publisher, error=error)
    controller.open(URI, "x", 1)

    await controller.validate(URI)

    assert publisher.published == []
    assert len(publisher.messages) == 1
    assert publisher.messages[0].type == MessageType.Error
    assert error.message in publisher.messages[0].message


@pytest.mark.asyncio
async def test_unexpected_exception_is_reported(publisher, caplog) -> None:
    controller, _ = _controller(publisher, error=RuntimeError("kaboom"))
    controller.open(URI, "x", 1)

    with caplog.at_level("ERROR"):
        await controller.validate(URI)

    assert publisher.published == []
    assert "kaboom" in publisher.messages[0].message
    assert "Unexpected error validating" in caplog.text


@pytest.mark.asyncio
async def test_error_does_not_touch_store(publisher) -> None:
    controller, _ = _controller(publisher, error=NetworkError("reset"))
    controller.open(URI, "text", 9)

    await controller.validate(URI)

    snapshot = controller.store.get(URI)
    assert snapshot is not None and (snapshot.text, snapshot.version) == ("text", 9)


def test_close_removes_and_clears(publisher) -> None:
    controller, _ = _controller(publisher)
    controller.open(URI, "text", 4)

    controller.close(URI)

    assert URI not in controller.store
    params = publisher.published[-1]
    assert params.uri == URI
    assert params.diagnostics == []
    assert params.version == 4


def test_close_unknown_document_still_clears(publisher) -> None:
    controller, _ = _controller(publisher)

    controller.close(URI)

    assert publisher.published[-1].diagnostics == []
    assert publisher.published[-1].version is None


def test_change_does_not_validate(publisher) -> None:
    controller, client = _controller(publisher)
    controller.open(URI, "a", 1)

    controller.change(URI, "b", 2)

    assert client.calls == []
    snapshot = controller.store.get(URI)
    assert snapshot is not None and (snapshot.text, snapshot.version) == ("b", 2)
