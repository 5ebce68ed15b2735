"""Data models exchanged with the Jenkins controller."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

SUCCESS_MESSAGE = "Jenkinsfile successfully validated."
DEFAULT_CRUMB_FIELD = "Jenkins-Crumb"


class Crumb(BaseModel):
    """CSRF token issued by /crumbIssuer/api/json."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    crumb: str
    crumb_request_field: str = Field(alias="crumbRequestField")

    @classmethod
    def empty(cls) -> Crumb:
        """Stand-in for controllers without a crumb issuer (CSRF protection off)."""
        return cls(crumb="", crumb_request_field=DEFAULT_CRUMB_FIELD)


class ValidationSuccess(BaseModel):
    status: Literal["success"] = "success"


class ValidationFailure(BaseModel):
    """Jenkins rejected the file; raw_text is the validator's full answer."""

    status: Literal["error"] = "error"
    raw_text: str


ValidationOutcome = Union[ValidationSuccess, ValidationFailure]
