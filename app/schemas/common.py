"""Shared API schemas: camelCase base model and response envelopes."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: {success: true, data, message}."""

    success: bool = True
    data: T
    message: str | None = None


class ErrorResponse(BaseModel):
    """Error envelope: {success: false, code, message, details?}."""

    success: bool = False
    code: str
    message: str
    details: Any | None = None
