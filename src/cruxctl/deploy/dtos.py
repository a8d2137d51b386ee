"""Request DTOs for deployment operations."""

from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cruxctl.core.exceptions import ValidationError
from cruxctl.core.utils import is_valid_prefix

M = TypeVar("M", bound=BaseModel)


class RequestModel(BaseModel):
    """Base for request bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


def _check_prefix(v: str | None) -> str | None:
    if v is not None and not is_valid_prefix(v):
        raise ValueError("prefix may only contain lowercase letters, digits and dashes")
    return v


class ImageRequest(RequestModel):
    name: str = Field(min_length=1)
    tag: str = "latest"
    config: dict[str, str] = Field(default_factory=dict)


class CreateDeploymentRequest(RequestModel):
    node_id: str
    prefix: str
    product: str = Field(min_length=1)
    version: str = Field(min_length=1)
    note: str | None = None
    environment: dict[str, str] = Field(default_factory=dict)
    images: list[ImageRequest] = Field(default_factory=list)

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str | None) -> str | None:
        return _check_prefix(v)


class PatchDeploymentRequest(RequestModel):
    note: str | None = None
    prefix: str | None = None
    environment: dict[str, str] | None = None

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str | None) -> str | None:
        return _check_prefix(v)


class PatchInstanceRequest(RequestModel):
    config: dict[str, str | None] = Field(default_factory=dict)


class PaginationQuery(RequestModel):
    skip: int = Field(default=0, ge=0)
    take: int = Field(default=100, ge=1, le=100)


def parse_request(model: type[M], data: M | dict[str, Any]) -> M:
    """Validate a request body, raising our ValidationError on failure."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid {model.__name__}: {problems}")
