"""Async Jenkins client -- crumb handshake and Jenkinsfile submission."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from jenkinsls.config import Config
from jenkinsls.errors import AuthError, JenkinsApiError, JenkinsApiErrorKind, NetworkError
from jenkinsls.jenkins.models import (
    SUCCESS_MESSAGE,
    Crumb,
    ValidationFailure,
    ValidationOutcome,
    ValidationSuccess,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30.0
CRUMB_PATH = "/crumbIssuer/api/json"
VALIDATE_PATH = "/pipeline-model-converter/validate"
JENKINSFILE_FIELD = "jenkinsfile"


class JenkinsClient:
    """Talks to one Jenkins controller over a shared connection pool.

    Every request carries HTTP basic auth built from the configured username
    and API token. Nothing is cached between validations; each call to
    validate() fetches a fresh crumb.
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._base_url = config.jenkins_url.rstrip("/")
        self._client = self._build_client()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _build_client(self) -> httpx.AsyncClient:
        if self._config.insecure:
            logger.warning(
                "TLS certificate verification is DISABLED for %s", self._base_url
            )
        return httpx.AsyncClient(
            base_url=self._base_url,
            auth=httpx.BasicAuth(self._config.username, self._config.api_token),
            timeout=httpx.Timeout(REQUEST_TIMEOUT),
            verify=not self._config.insecure,
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client.is_closed:
            self._client = self._build_client()
        return self._client

    async def get_crumb(self) -> Crumb:
        """Fetch a CSRF crumb.

        A 404 raises JenkinsApiError with kind crumb_endpoint_missing: the
        controller has CSRF protection disabled and validate() falls back to
        an empty crumb.
        """
        client = self._get_client()
        try:
            resp = await client.get(CRUMB_PATH)
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to reach {self._base_url}: {e}") from e

        if resp.is_success:
            try:
                return Crumb.model_validate(resp.json())
            except (ValueError, ValidationError) as e:
                raise JenkinsApiError(
                    JenkinsApiErrorKind.invalid_response,
                    f"Crumb issuer returned an unexpected body: {resp.text[:200]}",
                    status_code=resp.status_code,
                ) from e
        if resp.status_code == httpx.codes.UNAUTHORIZED:
            raise AuthError("HTTP 401 from the crumb issuer")
        if resp.status_code == httpx.codes.NOT_FOUND:
            raise JenkinsApiError(
                JenkinsApiErrorKind.crumb_endpoint_missing,
                "Crumb issuer endpoint not found. CSRF protection may be disabled.",
                status_code=resp.status_code,
            )
        raise JenkinsApiError(
            JenkinsApiErrorKind.unexpected_status,
            f"Failed to get crumb: {resp.status_code} - {resp.text}",
            status_code=resp.status_code,
        )

    async def submit(self, text: str, crumb: Crumb) -> str:
        """POST the Jenkinsfile to the validator and return the response body."""
        client = self._get_client()
        logger.debug(
            "Submitting Jenkinsfile to %s%s (%d chars)",
            self._base_url,
            VALIDATE_PATH,
            len(text),
        )
        try:
            resp = await client.post(
                VALIDATE_PATH,
                headers={crumb.crumb_request_field: crumb.crumb},
                files={JENKINSFILE_FIELD: (None, text.encode("utf-8"))},
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to reach {self._base_url}: {e}") from e

        if resp.is_success:
            return resp.text
        if resp.status_code == httpx.codes.UNAUTHORIZED:
            raise AuthError("HTTP 401 from the validator")
        if resp.status_code == httpx.codes.NOT_FOUND:
            raise JenkinsApiError(
                JenkinsApiErrorKind.validator_missing,
                "Validation endpoint not found. "
                "Ensure the pipeline-model-definition plugin is installed.",
                status_code=resp.status_code,
            )
        raise JenkinsApiError(
            JenkinsApiErrorKind.unexpected_status,
            f"Validation request failed: {resp.status_code} - {resp.text}",
            status_code=resp.status_code,
        )

    async def validate(self, text: str) -> ValidationOutcome:
        """Validate a Jenkinsfile: crumb, then submit, then classify the answer."""
        try:
            crumb = await self.get_crumb()
        except JenkinsApiError as e:
            if e.kind is not JenkinsApiErrorKind.crumb_endpoint_missing:
                raise
            logger.debug("No crumb issuer on %s, continuing without crumb", self._base_url)
            crumb = Crumb.empty()

        body = await self.submit(text, crumb)
        if SUCCESS_MESSAGE in body:
            return ValidationSuccess()
        return ValidationFailure(raw_text=body)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if not self._client.is_closed:
            await self._client.aclose()
