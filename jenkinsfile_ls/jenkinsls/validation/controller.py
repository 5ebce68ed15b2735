"""Validation controller -- ties the document store, Jenkins client and parser together."""

from __future__ import annotations

import logging
from typing import Protocol

from lsprotocol.types import (
    Diagnostic,
    MessageType,
    PublishDiagnosticsParams,
    ShowMessageParams,
)

from jenkinsls.diagnostics import parse_jenkins_response
from jenkinsls.errors import AuthError, JenkinsLSError
from jenkinsls.jenkins.client import JenkinsClient
from jenkinsls.jenkins.models import ValidationSuccess
from jenkinsls.validation.store import DocumentSnapshot, DocumentStore

logger = logging.getLogger(__name__)


class DiagnosticsPublisher(Protocol):
    """The parts of the language server the controller talks back through."""

    def text_document_publish_diagnostics(self, params: PublishDiagnosticsParams) -> None: ...

    def window_show_message(self, params: ShowMessageParams) -> None: ...


class ValidationController:
    """Owns the open documents and publishes Jenkins diagnostics for them.

    validate() snapshots the document before the network round-trip and
    re-reads the store afterwards: if the editor has moved to another version
    (or closed the document) in the meantime the result is dropped. Published
    diagnostics always carry the version they were computed for.
    """

    def __init__(self, client: JenkinsClient, publisher: DiagnosticsPublisher) -> None:
        self._client = client
        self._publisher = publisher
        self._store = DocumentStore()

    @property
    def store(self) -> DocumentStore:
        return self._store

    def open(self, uri: str, text: str, version: int) -> DocumentSnapshot:
        logger.info("Document opened: %s (version %d)", uri, version)
        return self._store.put(uri, text, version)

    def change(self, uri: str, text: str, version: int) -> DocumentSnapshot:
        logger.debug("Document changed: %s (version %d)", uri, version)
        return self._store.put(uri, text, version)

    def close(self, uri: str) -> None:
        """Forget the document and clear its diagnostics in the editor."""
        logger.info("Document closed: %s", uri)
        removed = self._store.remove(uri)
        self._publish(uri, [], removed.version if removed is not None else None)

    async def validate(self, uri: str) -> None:
        snapshot = self._store.get(uri)
        if snapshot is None:
            logger.warning("Document not found in store: %s", uri)
            return

        logger.info("Validating document: %s (version %d)", uri, snapshot.version)

        try:
            outcome = await self._client.validate(snapshot.text)
        except AuthError as e:
            logger.error("Authentication error: %s", e.message)
            self._show_error(
                f"Jenkins authentication failed ({e.message}). "
                "Check the configured username and API token."
            )
            return
        except JenkinsLSError as e:
            logger.error("Validation error for %s: %s", uri, e)
            self._show_error(f"Jenkinsfile validation failed: {e}")
            return
        except Exception as e:
            logger.exception("Unexpected error validating %s", uri)
            self._show_error(f"Jenkinsfile validation failed unexpectedly: {e}")
            return

        current = self._store.get(uri)
        if current is None or current.version != snapshot.version:
            logger.debug(
                "Discarding stale diagnostics for %s (validated v%d, current %s)",
                uri,
                snapshot.version,
                f"v{current.version}" if current is not None else "closed",
            )
            return

        if isinstance(outcome, ValidationSuccess):
            logger.info("Validation successful: %s", uri)
            diagnostics: list[Diagnostic] = []
        else:
            diagnostics = parse_jenkins_response(outcome.raw_text)
            logger.info("Validation returned %d error(s): %s", len(diagnostics), uri)
            if not diagnostics:
                logger.warning(
                    "Jenkins rejected %s but no error location could be parsed: %s",
                    uri,
                    outcome.raw_text[:500],
                )

        self._publish(uri, diagnostics, snapshot.version)

    def _publish(self, uri: str, diagnostics: list[Diagnostic], version: int | None) -> None:
        self._publisher.text_document_publish_diagnostics(
            PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics, version=version)
        )

    def _show_error(self, message: str) -> None:
        self._publisher.window_show_message(
            ShowMessageParams(type=MessageType.Error, message=message)
        )
