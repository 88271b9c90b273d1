"""Request shapes for project, element and state writes."""

from __future__ import annotations

import uuid

from pydantic import Field, field_validator

from statebook.common.enums import StateType
from statebook.core.serialization.schemas import WireModel


class ProjectCreateRequest(WireModel):
    name: str = Field(min_length=1)
    description: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class ElementUpdateRequest(WireModel):
    title: str | None = Field(None, min_length=1)
    figma_url: str | None = Field(None, min_length=1)
    project_id: uuid.UUID | None = None

    @field_validator("title", "figma_url", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class StateCreateRequest(WireModel):
    type: StateType
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    condition: str | None = None
    severity: str | None = None
    locale: str = "en"
    sort_order: int | None = None


class StateUpdateRequest(WireModel):
    """Sparse patch: only the fields present in the body are written."""

    type: StateType | None = None
    title: str | None = None
    message: str | None = None
    condition: str | None = None
    severity: str | None = None
    locale: str | None = None
    sort_order: int | None = None

    def changes(self) -> dict:
        data = self.model_dump(mode="json", exclude_unset=True)
        # condition and severity may be cleared with null; the rest ignore null
        return {
            key: value
            for key, value in data.items()
            if value is not None or key in ("condition", "severity")
        }
