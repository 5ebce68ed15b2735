"""Error taxonomy shared by the config loader, Jenkins client and controller."""

from __future__ import annotations

from enum import Enum


class JenkinsLSError(Exception):
    """Base class for every error raised by jenkinsls."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(JenkinsLSError):
    """Missing or invalid configuration, including unreadable TOML files."""

    def __str__(self) -> str:
        return f"Configuration error: {self.message}"


class NetworkError(JenkinsLSError):
    """Transport-level failure talking to Jenkins (DNS, TLS, reset, timeout)."""

    def __str__(self) -> str:
        return f"Network error: {self.message}"


class AuthError(JenkinsLSError):
    """Jenkins answered 401 on one of its endpoints."""

    def __str__(self) -> str:
        return f"Authentication failed: {self.message}"


class JenkinsApiErrorKind(str, Enum):
    crumb_endpoint_missing = "crumb_endpoint_missing"
    validator_missing = "validator_missing"
    unexpected_status = "unexpected_status"
    invalid_response = "invalid_response"


class JenkinsApiError(JenkinsLSError):
    """Non-2xx, non-401 answer from Jenkins, tagged with what went wrong."""

    def __init__(
        self,
        kind: JenkinsApiErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    def __str__(self) -> str:
        return f"Jenkins API error: {self.message}"
