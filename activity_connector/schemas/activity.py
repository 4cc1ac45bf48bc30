"""Pydantic schemas for GitHub activity records and paginated responses.

Records are stored by the ingestion side as JSON with camelCase keys, so
the models read and write camelCase aliases while exposing snake_case
attributes in Python.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Commit(_CamelModel):
    """A single commit as ingested for a repository."""

    message: str = Field(..., description="Commit message.")
    author: str | None = Field(default=None, description="Commit author name.")
    timestamp: datetime | None = Field(default=None, description="Commit time (ISO-8601).")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _from_date_parts(cls, value: Any) -> Any:
        # [year, month, day, hour, minute, second, nanos] as some serializers write it
        if isinstance(value, (list, tuple)) and 3 <= len(value) <= 7:
            try:
                parts = [int(p) for p in value]
            except (TypeError, ValueError) as exc:
                raise ValueError(f"invalid date parts: {value!r}") from exc
            if len(parts) == 7:
                parts[6] //= 1000
            return datetime(*parts)
        return value


class Repository(_CamelModel):
    """A repository owned by a user, with its most recent commits attached."""

    name: str = Field(..., description="Repository name, unique per user.")
    description: str | None = Field(default=None, description="Repository description.")
    recent_commits: list[Commit] = Field(
        default_factory=list,
        description="Most recent commits, newest first.",
    )

    @field_validator("recent_commits", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class Page(_CamelModel, Generic[T]):
    """One offset-based slice of an ordered collection.

    ``items`` is the slice ``[page*size, min((page+1)*size, total))`` at the
    instant of the read. Totals may change between page requests.
    """

    items: list[T] = Field(default_factory=list, description="Items on this page.")
    page: int = Field(..., description="Zero-based page index that was requested.")
    size: int = Field(..., description="Page size.")
    total_elements: int = Field(..., description="Size of the whole collection.")

    @computed_field(alias="totalPages")  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size > 0 else 0

    @computed_field(alias="hasNext")  # type: ignore[prop-decorator]
    @property
    def has_next(self) -> bool:
        return 0 <= self.page < self.total_pages - 1

    @computed_field(alias="hasPrevious")  # type: ignore[prop-decorator]
    @property
    def has_previous(self) -> bool:
        return self.page > 0


class UserActivity(_CamelModel):
    """Every repository of a user with recent commits attached (unpaginated)."""

    username: str
    repositories: list[Repository] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Body returned for every rejected request."""

    error: str = Field(..., description="Short error title, e.g. 'Rate Limit Exceeded'.")
    message: str = Field(..., description="Human-readable explanation.")
    status: int = Field(..., description="HTTP status code.")
    retryAfterSeconds: int | None = Field(
        default=None,
        description="Seconds until the rate limit window resets (429 only).",
    )
    request_id: str | None = Field(default=None, description="Correlation id of the request.")
