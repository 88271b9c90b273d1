import uuid

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from statebook.api.deps import get_db, get_upload_store
from statebook.common.enums import ExportFormat, Lang
from statebook.common.exceptions import ValidationError
from statebook.config import settings
from statebook.core.catalog import service
from statebook.core.catalog.schemas import ElementUpdateRequest, StateCreateRequest
from statebook.core.figma.parser import parse_figma_url
from statebook.core.serialization.export import export_filename, serialize_states_json, serialize_states_text
from statebook.core.serialization.schemas import ElementDetailResponse, ElementResponse, StateResponse
from statebook.integrations.storage import StoredUpload, UploadStore

router = APIRouter(prefix="/elements", tags=["Elements"])


async def _store_image(image: UploadFile | None, store: UploadStore) -> StoredUpload:
    if image is None or not image.filename:
        raise ValidationError.for_field("image", "Image upload is required.")
    content = await image.read()
    return await store.store(
        content=content,
        name=image.filename,
        content_type=image.content_type or "",
        size=len(content),
    )


def _parse_project_id(raw: str) -> uuid.UUID | None:
    raw = raw.strip()
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise ValidationError.for_field("projectId", "Invalid project id.")


# ---------- Endpoints ----------


@router.get("", response_model=list[ElementResponse])
async def list_elements(
    project_id: uuid.UUID | None = Query(None, alias="projectId"),
    db: AsyncSession = Depends(get_db),
):
    elements = await service.list_elements(db, project_id=project_id)
    return [ElementResponse.from_orm_instance(e) for e in elements]


@router.post("", response_model=ElementResponse, status_code=201)
async def create_element(
    figma_url: str = Form("", alias="figmaUrl"),
    title: str = Form(""),
    project_id: str = Form("", alias="projectId"),
    image: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    store: UploadStore = Depends(get_upload_store),
):
    figma_url = figma_url.strip()
    if not figma_url:
        raise ValidationError.for_field("figmaUrl", "Figma URL is required.")
    if not parse_figma_url(figma_url).is_valid:
        raise ValidationError.for_field("figmaUrl", service.INVALID_FIGMA_URL)
    parsed_project_id = _parse_project_id(project_id)
    await service.ensure_project(db, parsed_project_id)

    stored = await _store_image(image, store)
    element = await service.create_element(
        db,
        figma_url=figma_url,
        image=stored,
        title=title,
        project_id=parsed_project_id,
    )
    return ElementResponse.from_orm_instance(element)


@router.get("/{element_id}", response_model=ElementDetailResponse)
async def get_element(element_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    element = await service.get_element(db, element_id)
    states = await service.list_states(db, element.id)
    base = ElementResponse.from_orm_instance(element)
    return ElementDetailResponse(
        **base.model_dump(),
        states=[StateResponse.from_orm_instance(s) for s in states],
    )


@router.patch("/{element_id}", response_model=ElementResponse)
async def update_element(
    element_id: uuid.UUID,
    body: ElementUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    element = await service.update_element(db, element_id, body)
    return ElementResponse.from_orm_instance(element)


@router.delete("/{element_id}", status_code=204)
async def delete_element(element_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await service.delete_element(db, element_id)


@router.post("/{element_id}/image", response_model=ElementResponse)
async def replace_image(
    element_id: uuid.UUID,
    image: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    store: UploadStore = Depends(get_upload_store),
):
    await service.get_element(db, element_id)
    stored = await _store_image(image, store)
    element = await service.replace_element_image(db, element_id, stored)
    return ElementResponse.from_orm_instance(element)


@router.get("/{element_id}/states", response_model=list[StateResponse])
async def list_states(element_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await service.get_element(db, element_id)
    states = await service.list_states(db, element_id)
    return [StateResponse.from_orm_instance(s) for s in states]


@router.post("/{element_id}/states", response_model=StateResponse, status_code=201)
async def create_state(
    element_id: uuid.UUID,
    body: StateCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    state = await service.create_state(db, element_id, body)
    return StateResponse.from_orm_instance(state)


@router.get("/{element_id}/export")
async def export_states(
    element_id: uuid.UUID,
    export_format: ExportFormat = Query(ExportFormat.TEXT, alias="format"),
    lang: Lang | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Export an element's states as grouped plain text or a JSON bundle."""
    element = await service.get_element(db, element_id)
    states = [StateResponse.from_orm_instance(s) for s in await service.list_states(db, element.id)]
    dto = ElementResponse.from_orm_instance(element)

    if export_format is ExportFormat.JSON:
        filename = export_filename(dto.title, "json")
        return Response(
            content=serialize_states_json(dto, states),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return PlainTextResponse(serialize_states_text(states, lang or settings.DEFAULT_LANG))
