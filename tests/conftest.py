"""Shared test fixtures and configuration."""

import sys
from pathlib import Path

# Add jenkinsfile_ls/ to Python path so `from jenkinsls.xxx` imports work
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "jenkinsfile_ls"))

import pytest
from lsprotocol.types import PublishDiagnosticsParams, ShowMessageParams

from jenkinsls.config import Config

JENKINS_URL = "https://jenkins.example.com"

ENV_VARS = (
    "JENKINS_URL",
    "JENKINS_HOST",
    "JENKINS_USER_ID",
    "JENKINS_USERNAME",
    "JENKINS_API_TOKEN",
    "JENKINS_TOKEN",
    "JENKINS_PASSWORD",
    "JENKINS_INSECURE",
)


class RecordingPublisher:
    """Stands in for the language server: records what would go to the editor."""

    def __init__(self) -> None:
        self.published: list[PublishDiagnosticsParams] = []
        self.messages: list[ShowMessageParams] = []

    def text_document_publish_diagnostics(self, params: PublishDiagnosticsParams) -> None:
        self.published.append(params)

    def window_show_message(self, params: ShowMessageParams) -> None:
        self.messages.append(params)


@pytest.fixture(autouse=True)
def clean_jenkins_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own JENKINS_* variables out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> Config:
    return Config(jenkins_url=JENKINS_URL, username="alice", api_token="s3cret")


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
