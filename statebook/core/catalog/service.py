"""Persistence operations for projects, elements and their states.

Every function works inside the caller's ``AsyncSession``; the request
dependency commits on success and rolls back on error, so a multi-statement
operation such as ``delete_element`` lands as one transaction.
"""

from __future__ import annotations

import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from statebook.common.enums import StateType
from statebook.common.exceptions import NotFoundError, ValidationError
from statebook.common.logging import get_logger
from statebook.core.catalog.schemas import (
    ElementUpdateRequest,
    ProjectCreateRequest,
    StateCreateRequest,
    StateUpdateRequest,
)
from statebook.core.figma.parser import parse_figma_url
from statebook.db.models import Element, ElementState, Project
from statebook.db.models.element import DEFAULT_ELEMENT_TITLE
from statebook.integrations.storage import StoredUpload

logger = get_logger("catalog.service")

INVALID_FIGMA_URL = "Invalid Figma URL."


# ---------- Projects ----------


async def create_project(db: AsyncSession, body: ProjectCreateRequest) -> Project:
    project = Project(name=body.name, description=body.description)
    db.add(project)
    await db.flush()
    await db.refresh(project)
    logger.info("Created project %s name='%s'", project.id, project.name)
    return project


async def list_projects(db: AsyncSession) -> list[Project]:
    result = await db.execute(select(Project).order_by(Project.created_at.asc()))
    return list(result.scalars().all())


async def get_project(db: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await db.get(Project, project_id)
    if not project:
        raise NotFoundError("Project", str(project_id))
    return project


async def delete_project(db: AsyncSession, project_id: uuid.UUID) -> None:
    """Delete a project and detach its elements (their projectId becomes null)."""
    project = await get_project(db, project_id)
    await db.execute(
        update(Element)
        .where(Element.project_id == project_id)
        .values(project_id=None, updated_at=Element.updated_at)
        .execution_options(synchronize_session="fetch")
    )
    await db.delete(project)
    await db.flush()
    logger.info("Deleted project %s", project_id)


async def ensure_project(db: AsyncSession, project_id: uuid.UUID | None) -> None:
    if project_id is not None and await db.get(Project, project_id) is None:
        raise ValidationError.for_field("projectId", "Project does not exist.")


# ---------- Elements ----------


async def create_element(
    db: AsyncSession,
    figma_url: str,
    image: StoredUpload,
    title: str | None = None,
    project_id: uuid.UUID | None = None,
) -> Element:
    parsed = parse_figma_url(figma_url)
    if not parsed.is_valid:
        raise ValidationError.for_field("figmaUrl", INVALID_FIGMA_URL)
    await ensure_project(db, project_id)

    element = Element(
        title=(title or "").strip() or DEFAULT_ELEMENT_TITLE,
        figma_url=figma_url.strip(),
        figma_file_key=parsed.file_key,
        figma_node_id=parsed.node_id,
        image_path=image.path,
        image_name=image.name,
        image_type=image.type,
        image_size=image.size,
        project_id=project_id,
    )
    db.add(element)
    await db.flush()
    await db.refresh(element)
    logger.info("Created element %s file_key=%s node_id=%s", element.id, parsed.file_key, parsed.node_id)
    return element


async def get_element(db: AsyncSession, element_id: uuid.UUID) -> Element:
    element = await db.get(Element, element_id)
    if not element:
        raise NotFoundError("Element", str(element_id))
    return element


async def list_elements(db: AsyncSession, project_id: uuid.UUID | None = None) -> list[Element]:
    query = select(Element)
    if project_id is not None:
        query = query.where(Element.project_id == project_id)
    query = query.order_by(Element.updated_at.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_element(db: AsyncSession, element_id: uuid.UUID, body: ElementUpdateRequest) -> Element:
    element = await get_element(db, element_id)
    fields = body.model_fields_set

    if "title" in fields and body.title is not None:
        element.title = body.title
    if "project_id" in fields:
        await ensure_project(db, body.project_id)
        element.project_id = body.project_id
    if "figma_url" in fields and body.figma_url is not None:
        parsed = parse_figma_url(body.figma_url)
        if not parsed.is_valid:
            raise ValidationError.for_field("figmaUrl", INVALID_FIGMA_URL)
        element.figma_url = body.figma_url
        element.figma_file_key = parsed.file_key
        element.figma_node_id = parsed.node_id

    await db.flush()
    await db.refresh(element)
    return element


async def replace_element_image(db: AsyncSession, element_id: uuid.UUID, image: StoredUpload) -> Element:
    element = await get_element(db, element_id)
    element.image_path = image.path
    element.image_name = image.name
    element.image_type = image.type
    element.image_size = image.size
    await db.flush()
    await db.refresh(element)
    logger.info("Replaced image on element %s (%s, %d bytes)", element_id, image.type, image.size)
    return element


async def delete_element(db: AsyncSession, element_id: uuid.UUID) -> int:
    """Delete an element together with every state it owns.

    Returns the number of states removed.
    """
    element = await get_element(db, element_id)
    # states are loaded with the element; the delete cascade removes them
    removed = len(element.states)
    await db.delete(element)
    await db.flush()
    logger.info("Deleted element %s with %d states", element_id, removed)
    return removed


# ---------- States ----------


async def next_sort_order(db: AsyncSession, element_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.max(ElementState.sort_order)).where(ElementState.element_id == element_id)
    )
    return (result.scalar() or 0) + 1


async def create_state(db: AsyncSession, element_id: uuid.UUID, body: StateCreateRequest) -> ElementState:
    element = await get_element(db, element_id)
    sort_order = body.sort_order if body.sort_order is not None else await next_sort_order(db, element.id)

    state = ElementState(
        element_id=element.id,
        type=StateType(body.type).value,
        title=body.title,
        message=body.message,
        condition=body.condition,
        severity=body.severity,
        locale=body.locale or "en",
        sort_order=sort_order,
    )
    db.add(state)
    await db.flush()
    await db.refresh(state)
    return state


async def get_state(db: AsyncSession, state_id: uuid.UUID) -> ElementState:
    state = await db.get(ElementState, state_id)
    if not state:
        raise NotFoundError("State", str(state_id))
    return state


async def list_states(db: AsyncSession, element_id: uuid.UUID) -> list[ElementState]:
    # created_at keeps duplicate sort orders in insertion order
    result = await db.execute(
        select(ElementState)
        .where(ElementState.element_id == element_id)
        .order_by(ElementState.sort_order.asc(), ElementState.created_at.asc())
    )
    return list(result.scalars().all())


async def update_state(db: AsyncSession, state_id: uuid.UUID, body: StateUpdateRequest) -> ElementState:
    state = await get_state(db, state_id)
    for key, value in body.changes().items():
        setattr(state, key, value)
    await db.flush()
    await db.refresh(state)
    return state


async def delete_state(db: AsyncSession, state_id: uuid.UUID) -> None:
    state = await get_state(db, state_id)
    await db.delete(state)
    await db.flush()
