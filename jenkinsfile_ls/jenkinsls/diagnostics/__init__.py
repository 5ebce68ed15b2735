"""Jenkins validator output to LSP diagnostics."""

from jenkinsls.diagnostics.parser import DIAGNOSTIC_SOURCE, parse_jenkins_response

__all__ = ["DIAGNOSTIC_SOURCE", "parse_jenkins_response"]
