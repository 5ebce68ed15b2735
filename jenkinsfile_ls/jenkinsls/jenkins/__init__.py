"""Client for the Jenkins pipeline-model-converter validator."""

from jenkinsls.jenkins.client import JenkinsClient
from jenkinsls.jenkins.models import (
    SUCCESS_MESSAGE,
    Crumb,
    ValidationFailure,
    ValidationOutcome,
    ValidationSuccess,
)

__all__ = [
    "SUCCESS_MESSAGE",
    "Crumb",
    "JenkinsClient",
    "ValidationFailure",
    "ValidationOutcome",
    "ValidationSuccess",
]
