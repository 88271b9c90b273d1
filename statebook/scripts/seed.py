"""
Seed script for Statebook.

Creates a demo project with one element and a handful of documented states.
The element image is a 1x1 PNG written through the configured upload store.

Usage:
    python -m statebook.scripts.seed
"""

import asyncio
import base64

from sqlalchemy import select

from statebook.common.enums import StateType
from statebook.common.logging import setup_logging
from statebook.core.catalog import service
from statebook.core.catalog.schemas import ProjectCreateRequest, StateCreateRequest
from statebook.db.models import Project
from statebook.db.session import database
from statebook.integrations.storage import UploadStore

DEMO_PROJECT = "Core UI Library"
DEMO_FIGMA_URL = "https://www.figma.com/design/AbC123xyz/Core-UI?node-id=12-34"

# 1x1 transparent PNG
PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

DEMO_STATES = [
    StateCreateRequest(
        type=StateType.EMPTY,
        title="Empty form",
        message="Enter your email and password to sign in.",
        condition="First visit, no input yet",
    ),
    StateCreateRequest(
        type=StateType.INFO,
        title="Signing in",
        message="Signing you in…",
        condition="Submit pressed, request in flight",
    ),
    StateCreateRequest(
        type=StateType.ERROR,
        title="Wrong password",
        message="Email or password is incorrect. Try again or reset your password.",
        condition="401 from auth endpoint",
        severity="high",
    ),
    StateCreateRequest(
        type=StateType.SUCCESS,
        title="Signed in",
        message="Welcome back!",
        condition="Redirect to dashboard",
    ),
]


async def main() -> None:
    setup_logging()
    async with database.session() as session:
        result = await session.execute(select(Project).where(Project.name == DEMO_PROJECT))
        if result.scalar_one_or_none() is not None:
            print("Database already seeded -- skipping.")
            return

        project = await service.create_project(
            session,
            ProjectCreateRequest(name=DEMO_PROJECT, description="Shared components and their states"),
        )

        stored = await UploadStore().store(
            content=PLACEHOLDER_PNG,
            name="login-form.png",
            content_type="image/png",
        )
        element = await service.create_element(
            session,
            figma_url=DEMO_FIGMA_URL,
            image=stored,
            title="Login Form",
            project_id=project.id,
        )

        for body in DEMO_STATES:
            await service.create_state(session, element.id, body)

        await session.commit()
        print(f"Seeded: 1 project, 1 element, {len(DEMO_STATES)} states")

    await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
