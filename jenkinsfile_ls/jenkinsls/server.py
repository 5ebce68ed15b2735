"""LSP adapter -- binds pygls notifications to the validation controller."""

from __future__ import annotations

import asyncio
import logging

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from jenkinsls import __version__
from jenkinsls.jenkins.client import JenkinsClient
from jenkinsls.validation.controller import ValidationController

logger = logging.getLogger(__name__)

SERVER_NAME = "jenkinsfile-ls"


class JenkinsfileLanguageServer(LanguageServer):
    """Language server that validates Jenkinsfiles on open and save.

    Validation runs in background tasks so a slow Jenkins round-trip never
    holds up the next notification; the store is always updated before the
    task is spawned.
    """

    def __init__(self, client: JenkinsClient) -> None:
        super().__init__(
            name=SERVER_NAME,
            version=__version__,
            text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
        )
        self.jenkins = client
        self.controller = ValidationController(client, self)
        self._validations: set[asyncio.Task[None]] = set()

    def validate_in_background(self, uri: str) -> asyncio.Task[None]:
        """Start validating uri without blocking the notification loop."""
        task = asyncio.ensure_future(self.controller.validate(uri))
        self._validations.add(task)
        task.add_done_callback(self._validations.discard)
        return task

    def on_initialized(self, _params: lsp.InitializedParams) -> None:
        logger.info("Jenkinsfile LSP server initialized")
        self.window_log_message(
            lsp.LogMessageParams(
                type=lsp.MessageType.Info,
                message=f"Jenkinsfile LSP server initialized ({self.jenkins.base_url})",
            )
        )

    async def on_shutdown(self, _params: None) -> None:
        logger.info("Shutting down Jenkinsfile LSP server")
        await self.jenkins.close()

    def on_did_open(self, params: lsp.DidOpenTextDocumentParams) -> asyncio.Task[None]:
        doc = params.text_document
        self.controller.open(doc.uri, doc.text, doc.version)
        return self.validate_in_background(doc.uri)

    def on_did_change(self, params: lsp.DidChangeTextDocumentParams) -> None:
        # Full sync: the last change holds the whole document. Validation
        # waits for the next save.
        if not params.content_changes:
            return
        doc = params.text_document
        self.controller.change(doc.uri, params.content_changes[-1].text, doc.version)

    def on_did_save(self, params: lsp.DidSaveTextDocumentParams) -> asyncio.Task[None]:
        logger.info("Document saved: %s", params.text_document.uri)
        return self.validate_in_background(params.text_document.uri)

    def on_did_close(self, params: lsp.DidCloseTextDocumentParams) -> None:
        self.controller.close(params.text_document.uri)


def create_server(client: JenkinsClient) -> JenkinsfileLanguageServer:
    server = JenkinsfileLanguageServer(client)

    @server.feature(lsp.INITIALIZED)
    def initialized(params: lsp.InitializedParams) -> None:
        server.on_initialized(params)

    @server.feature(lsp.SHUTDOWN)
    async def shutdown(params: None) -> None:
        await server.on_shutdown(params)

    @server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
    def did_open(params: lsp.DidOpenTextDocumentParams) -> asyncio.Task[None]:
        return server.on_did_open(params)

    @server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
    def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
        server.on_did_change(params)

    @server.feature(lsp.TEXT_DOCUMENT_DID_SAVE)
    def did_save(params: lsp.DidSaveTextDocumentParams) -> asyncio.Task[None]:
        return server.on_did_save(params)

    @server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
    def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
        server.on_did_close(params)

    return server
