"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agora_stage.services.authorship import normalize_flag

# Request flags arrive as booleans, "true"/"false", 0/1 or not at all.
Flag = Annotated[bool, BeforeValidator(normalize_flag)]


def optional_flag(value: Any) -> bool | None:
    """Normalise a flag that may be left out to mean "unchanged"."""
    return None if value is None else normalize_flag(value)


class ApiModel(BaseModel):
    """Base model speaking the forum's camelCase wire names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """Error payload returned for rejected operations."""

    message: str = Field(..., description="Stable error token, e.g. [[error:no-topic]]")
    tid: int | None = None
    pid: int | None = None


# Rejections rendered by the ForumError handler, for the OpenAPI docs.
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid tid or request data"},
    401: {"model": ErrorResponse, "description": "Not logged in"},
    403: {"model": ErrorResponse, "description": "No privileges"},
    404: {"model": ErrorResponse, "description": "No such topic, post or category"},
}
