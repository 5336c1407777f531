"""
API Schemas.

This module contains the Pydantic models used for error response bodies:
RFC 7807 problem details and the plain error attributes rendered when problem
details are disabled.
"""
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .core.constant import DEFAULT_PROBLEM_TYPE


def reason_phrase(status: int) -> Optional[str]:
    """Return the standard reason phrase for ``status``, or None for unknown codes."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return None


class ProblemDetail(BaseModel):
    """
    RFC 7807 problem detail body.

    The standard members are declared fields. Any other member is an
    *extension property*; extension properties are stored as Pydantic extras
    and serialized flat next to the standard members.
    """

    type: str = Field(
        default=DEFAULT_PROBLEM_TYPE,
        description="URI reference identifying the problem type.",
        examples=["about:blank"],
    )
    title: Optional[str] = Field(
        default=None,
        description="Short summary of the problem type. Defaults to the status reason phrase.",
        examples=["Not Found"],
    )
    status: int = Field(..., description="HTTP status code.", examples=[404])
    detail: Optional[str] = Field(
        default=None,
        description="Explanation specific to this occurrence of the problem.",
        examples=["No endpoint GET /non-existing."],
    )
    instance: Optional[str] = Field(
        default=None,
        description="URI reference identifying this occurrence, usually the request path.",
        examples=["/non-existing"],
    )

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def _default_title(self) -> "ProblemDetail":
        if self.title is None:
            self.title = reason_phrase(self.status)
        return self

    @classmethod
    def for_status(cls, status: int) -> "ProblemDetail":
        return cls(status=status)

    @classmethod
    def for_status_and_detail(cls, status: int, detail: Optional[str]) -> "ProblemDetail":
        return cls(status=status, detail=detail)

    @property
    def properties(self) -> Dict[str, Any]:
        """Extension properties, i.e. every member that is not a standard one."""
        return dict(self.model_extra or {})

    def set_property(self, name: str, value: Any) -> None:
        if name in type(self).model_fields:
            raise ValueError(f"'{name}' is a standard problem detail member, not an extension property")
        self.__pydantic_extra__[name] = value

    def to_dict(self) -> Dict[str, Any]:
        body = {name: getattr(self, name) for name in type(self).model_fields if getattr(self, name) is not None}
        body.update(self.properties)
        return body


class ErrorAttributes(BaseModel):
    """Default JSON error body used when problem details are disabled."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: int
    error: Optional[str] = None
    path: str
    message: Optional[str] = None
    exception: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
