"""Wire DTOs.

Field names go out in camelCase (``figmaUrl``, ``sortOrder``) and every
timestamp is rendered as an ISO-8601 string in UTC.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from statebook.common.enums import StateType
from statebook.db.models import Element, ElementState, Project


def isoformat(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectResponse(WireModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    created_at: str
    updated_at: str

    @classmethod
    def from_orm_instance(cls, project: Project) -> "ProjectResponse":
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            created_at=isoformat(project.created_at),
            updated_at=isoformat(project.updated_at),
        )


class ElementResponse(WireModel):
    id: uuid.UUID
    title: str
    figma_url: str
    figma_file_key: str | None = None
    figma_node_id: str | None = None
    image_path: str
    image_name: str
    image_type: str
    image_size: int
    project_id: uuid.UUID | None = None
    created_at: str
    updated_at: str

    @classmethod
    def from_orm_instance(cls, element: Element) -> "ElementResponse":
        return cls(
            id=element.id,
            title=element.title,
            figma_url=element.figma_url,
            figma_file_key=element.figma_file_key,
            figma_node_id=element.figma_node_id,
            image_path=element.image_path,
            image_name=element.image_name,
            image_type=element.image_type,
            image_size=element.image_size,
            project_id=element.project_id,
            created_at=isoformat(element.created_at),
            updated_at=isoformat(element.updated_at),
        )


class StateResponse(WireModel):
    id: uuid.UUID
    element_id: uuid.UUID
    type: StateType
    title: str
    message: str
    condition: str | None = None
    severity: str | None = None
    locale: str = "en"
    sort_order: int
    created_at: str
    updated_at: str

    @classmethod
    def from_orm_instance(cls, state: ElementState) -> "StateResponse":
        return cls(
            id=state.id,
            element_id=state.element_id,
            type=state.type,
            title=state.title,
            message=state.message,
            condition=state.condition,
            severity=state.severity,
            locale=state.locale,
            sort_order=state.sort_order,
            created_at=isoformat(state.created_at),
            updated_at=isoformat(state.updated_at),
        )


class ProjectDetailResponse(ProjectResponse):
    elements: list[ElementResponse]


class ElementDetailResponse(ElementResponse):
    states: list[StateResponse]


class ExportBundle(WireModel):
    element: ElementResponse
    states: list[StateResponse]
