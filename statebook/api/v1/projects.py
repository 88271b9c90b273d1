import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from statebook.api.deps import get_db
from statebook.core.catalog import service
from statebook.core.catalog.schemas import ProjectCreateRequest
from statebook.core.serialization.schemas import ElementResponse, ProjectDetailResponse, ProjectResponse

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=list[ProjectResponse])
async def list_projects(db: AsyncSession = Depends(get_db)):
    projects = await service.list_projects(db)
    return [ProjectResponse.from_orm_instance(p) for p in projects]


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(body: ProjectCreateRequest, db: AsyncSession = Depends(get_db)):
    project = await service.create_project(db, body)
    return ProjectResponse.from_orm_instance(project)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    project = await service.get_project(db, project_id)
    elements = await service.list_elements(db, project_id=project.id)
    base = ProjectResponse.from_orm_instance(project)
    return ProjectDetailResponse(
        **base.model_dump(),
        elements=[ElementResponse.from_orm_instance(e) for e in elements],
    )


@router.delete("/{project_id}", status_code=204)
async def delete_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await service.delete_project(db, project_id)
