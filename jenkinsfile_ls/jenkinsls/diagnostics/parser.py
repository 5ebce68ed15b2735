"""Translate Jenkins validator output into LSP diagnostics."""

from __future__ import annotations

import logging
import re

from lsprotocol.types import Diagnostic, DiagnosticSeverity, Position, Range

from jenkinsls.jenkins.models import SUCCESS_MESSAGE

logger = logging.getLogger(__name__)

DIAGNOSTIC_SOURCE = "jenkinsfile-ls"

# WorkflowScript: <n>: <message> @ line <line>, column <col>.
# The leading <n> repeats the line number and is ignored.
ERROR_PATTERN = re.compile(
    r"WorkflowScript:\s+\d+:\s+(.+?)\s+@\s+line\s+(\d+),\s+column\s+(\d+)\."
)

# LSP positions are uinteger
_MAX_POSITION = 2**31 - 1


def _to_zero_based(raw: str) -> int | None:
    try:
        value = int(raw)
    except ValueError:
        return None
    if value > _MAX_POSITION:
        return None
    return max(0, value - 1)


def parse_jenkins_response(response: str) -> list[Diagnostic]:
    """Parse a validator response into diagnostics, in the order Jenkins reported them.

    Jenkins reports one error per line, e.g.
    ``WorkflowScript: 46: unexpected token: } @ line 46, column 1.``
    Lines in any other shape are skipped. A response containing the success
    message yields no diagnostics regardless of what else it contains.
    """
    if SUCCESS_MESSAGE in response:
        return []

    diagnostics: list[Diagnostic] = []
    for line in response.splitlines():
        match = ERROR_PATTERN.search(line)
        if match is None:
            continue

        message, raw_line, raw_col = match.groups()
        line_no = _to_zero_based(raw_line)
        col_no = _to_zero_based(raw_col)
        if line_no is None or col_no is None:
            logger.debug("Skipping diagnostic with unusable position: %r", line)
            continue

        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line_no, character=col_no),
                    end=Position(line=line_no, character=col_no),
                ),
                message=message,
                severity=DiagnosticSeverity.Error,
                source=DIAGNOSTIC_SOURCE,
            )
        )

    return diagnostics
