"""Typed records for the Edlink Graph API v2.

See https://ed.link/docs/guides/v2.0/graph-api/events and
https://ed.link/docs/guides/v2.0/graph-api/people.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EdlinkRecord(BaseModel):
    """Base for Graph API records.  Unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    created_date: str | None = None
    updated_date: str | None = None


class EdlinkEvent(EdlinkRecord):
    """A change or activity, e.g. ``person.created``."""

    type: str | None = None
    data: dict[str, Any] | None = None


class EdlinkRole(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None
    type: str | None = None


class EdlinkGradeLevel(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None


class EdlinkPerson(EdlinkRecord):
    """A student, teacher, administrator, etc."""

    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    email: str | None = None
    phone: str | None = None
    locale: str | None = None
    time_zone: str | None = None
    picture_url: str | None = None
    birthday: str | None = None
    gender: str | None = None
    roles: list[EdlinkRole] = Field(default_factory=list)
    school_ids: list[str] = Field(default_factory=list)
    grade_levels: list[EdlinkGradeLevel] = Field(default_factory=list)
    graduation_year: int | None = None
    district_id: str | None = None
    demographics: dict[str, Any] | None = None
    properties: dict[str, Any] | None = None
    external_object_type: str | None = None

    @field_validator("roles", "school_ids", "grade_levels", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def name(self) -> str | None:
        return self.display_name or self.first_name


class PageEnvelope(BaseModel):
    """Raw page body: ``{"$data": [...], "$next": "<url>" | null}``.

    A missing or null ``$data`` is an empty page.
    """

    data: list[Any] = Field(default_factory=list, alias="$data")
    next: str | None = Field(default=None, alias="$next")

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, v: Any) -> Any:
        return [] if v is None else v
