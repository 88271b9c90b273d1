"""Async HTTP client for the ``/api/v1`` surface."""

from __future__ import annotations

import uuid
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from statebook.common.enums import ExportFormat, StateType
from statebook.common.logging import get_logger
from statebook.core.catalog.schemas import StateCreateRequest, StateUpdateRequest
from statebook.core.serialization.schemas import (
    ElementDetailResponse,
    ElementResponse,
    ProjectDetailResponse,
    ProjectResponse,
    StateResponse,
)

logger = get_logger("editor.client")


class ApiError(Exception):
    """Transport failure, locally rejected request body, or non-2xx response."""

    def __init__(self, message: str, status_code: int | None = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


def _request_body(model: type[BaseModel], **fields: Any) -> dict[str, Any]:
    """Validate a write locally and dump it in wire form; invalid input becomes ``ApiError``."""
    try:
        body = model(**fields)
    except ValidationError as e:
        raise ApiError(f"Invalid {model.__name__}", detail=e.errors(include_url=False)) from e
    return body.model_dump(mode="json", by_alias=True, exclude_unset=True)


class StatebookClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "StatebookClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = await self._client.request(method, f"/api/v1{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(f"{method} {path} failed: {e}") from e

        if resp.is_error:
            try:
                detail = resp.json().get("detail")
            except ValueError:
                detail = resp.text
            raise ApiError(f"{method} {path} returned {resp.status_code}", resp.status_code, detail)
        return resp

    # ---------- Projects ----------

    async def list_projects(self) -> list[ProjectResponse]:
        resp = await self._request("GET", "/projects")
        return [ProjectResponse.model_validate(p) for p in resp.json()]

    async def create_project(self, name: str, description: str | None = None) -> ProjectResponse:
        resp = await self._request("POST", "/projects", json={"name": name, "description": description})
        return ProjectResponse.model_validate(resp.json())

    async def get_project(self, project_id: uuid.UUID) -> ProjectDetailResponse:
        resp = await self._request("GET", f"/projects/{project_id}")
        return ProjectDetailResponse.model_validate(resp.json())

    async def delete_project(self, project_id: uuid.UUID) -> None:
        await self._request("DELETE", f"/projects/{project_id}")

    # ---------- Elements ----------

    async def list_elements(self, project_id: uuid.UUID | None = None) -> list[ElementResponse]:
        params = {"projectId": str(project_id)} if project_id else None
        resp = await self._request("GET", "/elements", params=params)
        return [ElementResponse.model_validate(e) for e in resp.json()]

    async def create_element(
        self,
        figma_url: str,
        image: bytes,
        filename: str,
        content_type: str,
        title: str | None = None,
        project_id: uuid.UUID | None = None,
    ) -> ElementResponse:
        data = {"figmaUrl": figma_url, "title": title or ""}
        if project_id:
            data["projectId"] = str(project_id)
        resp = await self._request(
            "POST", "/elements", data=data, files={"image": (filename, image, content_type)}
        )
        return ElementResponse.model_validate(resp.json())

    async def get_element(self, element_id: uuid.UUID) -> ElementDetailResponse:
        resp = await self._request("GET", f"/elements/{element_id}")
        return ElementDetailResponse.model_validate(resp.json())

    async def update_element(self, element_id: uuid.UUID, **fields: Any) -> ElementResponse:
        body = {}
        if "title" in fields:
            body["title"] = fields["title"]
        if "figma_url" in fields:
            body["figmaUrl"] = fields["figma_url"]
        if "project_id" in fields:
            body["projectId"] = str(fields["project_id"]) if fields["project_id"] else None
        resp = await self._request("PATCH", f"/elements/{element_id}", json=body)
        return ElementResponse.model_validate(resp.json())

    async def replace_image(
        self, element_id: uuid.UUID, image: bytes, filename: str, content_type: str
    ) -> ElementResponse:
        resp = await self._request(
            "POST", f"/elements/{element_id}/image", files={"image": (filename, image, content_type)}
        )
        return ElementResponse.model_validate(resp.json())

    async def delete_element(self, element_id: uuid.UUID) -> None:
        await self._request("DELETE", f"/elements/{element_id}")

    async def export(
        self, element_id: uuid.UUID, fmt: ExportFormat | str = ExportFormat.TEXT, lang: str | None = None
    ) -> str:
        params = {"format": ExportFormat(fmt).value}
        if lang:
            params["lang"] = lang
        resp = await self._request("GET", f"/elements/{element_id}/export", params=params)
        return resp.text

    # ---------- States ----------

    async def list_states(self, element_id: uuid.UUID) -> list[StateResponse]:
        resp = await self._request("GET", f"/elements/{element_id}/states")
        return [StateResponse.model_validate(s) for s in resp.json()]

    async def create_state(
        self,
        element_id: uuid.UUID,
        type: StateType | str,
        title: str,
        message: str,
        **optional: Any,
    ) -> StateResponse:
        body = _request_body(StateCreateRequest, type=type, title=title, message=message, **optional)
        resp = await self._request("POST", f"/elements/{element_id}/states", json=body)
        return StateResponse.model_validate(resp.json())

    async def update_state(self, state_id: uuid.UUID, patch: dict[str, Any]) -> StateResponse:
        body = _request_body(StateUpdateRequest, **patch)
        resp = await self._request("PATCH", f"/states/{state_id}", json=body)
        return StateResponse.model_validate(resp.json())

    async def delete_state(self, state_id: uuid.UUID) -> None:
        await self._request("DELETE", f"/states/{state_id}")
