import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from statebook.api.deps import get_db
from statebook.api.errors import register_exception_handlers
from statebook.api.middleware import RequestLogMiddleware
from statebook.api.v1.router import v1_router
from statebook.common.enums import CopyMode, StateType
from statebook.common.exceptions import NotFoundError
from statebook.common.i18n import default_state_copy, resolve_lang, state_type_label
from statebook.common.logging import get_logger, setup_logging
from statebook.config import settings
from statebook.core.catalog import service
from statebook.core.serialization.export import serialize_states_text, state_copy_text
from statebook.core.serialization.schemas import ElementResponse, ProjectResponse, StateResponse
from statebook.db.session import database
from statebook.integrations.storage import BlobClient

BASE_DIR = Path(__file__).resolve().parent

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Ensure local storage directory exists
    Path(settings.STORAGE_LOCAL_PATH).mkdir(parents=True, exist_ok=True)
    logger.info("Statebook starting (env=%s, storage=%s)", settings.APP_ENV, settings.STORAGE_BACKEND)
    yield
    await database.dispose()


app = FastAPI(
    title="Statebook API",
    description="Document UI state copy against Figma references",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
origins = settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLogMiddleware)
register_exception_handlers(app)

# Static files, uploaded blobs & templates
app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
app.mount("/storage", StaticFiles(directory=settings.STORAGE_LOCAL_PATH, check_dir=False), name="storage")
templates = Jinja2Templates(directory=BASE_DIR / "templates")
templates.env.globals.update(
    state_types=list(StateType),
    state_type_label=state_type_label,
    state_copy_text=state_copy_text,
    copy_modes=CopyMode,
)

# API routes
app.include_router(v1_router, prefix="/api/v1")


# --- Page routes ---


def _is_view_mode(request: Request) -> bool:
    params = request.query_params
    return params.get("view") in ("1", "true") or params.get("mode") == "view"


def _not_found(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "not_found.html", {}, status_code=404)


@app.get("/", response_class=HTMLResponse)
async def library_page(request: Request, project: str | None = None, db: AsyncSession = Depends(get_db)):
    try:
        selected_project = uuid.UUID(project) if project else None
    except ValueError:
        selected_project = None
    elements = await service.list_elements(db, project_id=selected_project)
    projects = await service.list_projects(db)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "elements": [ElementResponse.from_orm_instance(e) for e in elements],
            "projects": [ProjectResponse.from_orm_instance(p) for p in projects],
            "selected_project": selected_project,
            "max_upload_mb": settings.UPLOAD_MAX_SIZE_MB,
        },
    )


@app.get("/e/{element_id}", response_class=HTMLResponse)
async def element_page(request: Request, element_id: str, db: AsyncSession = Depends(get_db)):
    try:
        element = await service.get_element(db, uuid.UUID(element_id))
    except (ValueError, NotFoundError):
        return _not_found(request)

    states = [StateResponse.from_orm_instance(s) for s in await service.list_states(db, element.id)]
    dto = ElementResponse.from_orm_instance(element)
    lang = resolve_lang(request.query_params.get("lang") or settings.DEFAULT_LANG)

    if _is_view_mode(request):
        return templates.TemplateResponse(
            request,
            "element_view.html",
            {
                "element": dto,
                "states": states,
                "lang": lang.value,
                "export_text": serialize_states_text(states, lang),
            },
        )

    projects = [ProjectResponse.from_orm_instance(p) for p in await service.list_projects(db)]
    default_title, default_message = default_state_copy(lang)
    editor_payload = {
        "element": dto.model_dump(mode="json", by_alias=True),
        "states": [s.model_dump(mode="json", by_alias=True) for s in states],
        "defaults": {"title": default_title, "message": default_message},
        "debounceMs": settings.AUTOSAVE_DEBOUNCE_MS,
    }
    return templates.TemplateResponse(
        request,
        "element.html",
        {
            "element": dto,
            "states": states,
            "projects": projects,
            "lang": lang.value,
            "editor_payload": editor_payload,
        },
    )


@app.get("/p/{project_id}", response_class=HTMLResponse)
async def project_page(request: Request, project_id: str, db: AsyncSession = Depends(get_db)):
    try:
        project = await service.get_project(db, uuid.UUID(project_id))
    except (ValueError, NotFoundError):
        return _not_found(request)

    elements = await service.list_elements(db, project_id=project.id)
    return templates.TemplateResponse(
        request,
        "project.html",
        {
            "project": ProjectResponse.from_orm_instance(project),
            "elements": [ElementResponse.from_orm_instance(e) for e in elements],
        },
    )


@app.get("/health")
async def health_check():
    storage = await BlobClient().status()
    return {
        "status": "healthy" if storage["healthy"] else "degraded",
        "service": "statebook",
        "version": "1.0.0",
        "env": settings.APP_ENV,
        "storage": storage,
    }
