from fastapi import APIRouter

from statebook.api.v1.elements import router as elements_router
from statebook.api.v1.projects import router as projects_router
from statebook.api.v1.states import router as states_router

v1_router = APIRouter()

v1_router.include_router(projects_router)
v1_router.include_router(elements_router)
v1_router.include_router(states_router)
