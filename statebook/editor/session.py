"""Editor state machine for one element's states.

Holds the ordered state list in memory, applies edits optimistically and
persists them through ``StatebookClient``:

* field edits are debounced per state id; a new edit replaces the pending
  timer for that id, so at most one save per id is waiting to fire, and the
  fields edited during the quiet period are sent together;
* reordering swaps neighbours in the unfiltered list, renumbers the whole
  list 1..N and saves the two touched states straight away;
* a failed save produces an error notice and keeps the local edit.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Literal

from statebook.common.enums import StateType
from statebook.common.i18n import default_state_copy
from statebook.common.logging import get_logger
from statebook.config import settings
from statebook.core.serialization.schemas import ElementResponse, StateResponse
from statebook.editor.client import ApiError, StatebookClient

logger = get_logger("editor")

EDITABLE_FIELDS = frozenset({"type", "title", "message", "condition", "severity", "locale"})
FOCUS_SECONDS = 0.8


@dataclass(frozen=True)
class Notice:
    level: Literal["success", "error"]
    message: str


def filter_states(
    states: Iterable[StateResponse],
    selected_types: Iterable[StateType] = (),
    query: str = "",
) -> list[StateResponse]:
    """Visible subset: type in the selected set (empty = any) and text match on query."""
    types = {StateType(t) for t in selected_types}
    needle = query.strip().lower()
    visible = []
    for state in states:
        if types and StateType(state.type) not in types:
            continue
        if needle:
            haystack = " ".join(
                [state.title, state.message, state.condition or "", state.severity or "", state.locale or ""]
            ).lower()
            if needle not in haystack:
                continue
        visible.append(state)
    return visible


class EditorSession:
    def __init__(
        self,
        client: StatebookClient,
        element: ElementResponse,
        states: Iterable[StateResponse],
        *,
        debounce: float | None = None,
        lang: str = "en",
        on_notice: Callable[[Notice], None] | None = None,
    ) -> None:
        self.client = client
        self.element = element
        self.states: list[StateResponse] = sorted(states, key=lambda s: s.sort_order)
        self.selected_types: set[StateType] = set()
        self.query = ""
        self.lang = lang
        self.debounce = settings.AUTOSAVE_DEBOUNCE_MS / 1000 if debounce is None else debounce
        self.focused_state_id: uuid.UUID | None = None
        self.notices: list[Notice] = []
        self.closed = False

        self._on_notice = on_notice
        self._timers: dict[uuid.UUID, asyncio.TimerHandle] = {}
        self._pending: dict[uuid.UUID, dict[str, Any]] = {}
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    async def open(cls, client: StatebookClient, element_id: uuid.UUID, **kwargs: Any) -> "EditorSession":
        element = await client.get_element(element_id)
        states = element.states
        return cls(client, ElementResponse(**element.model_dump(exclude={"states"})), states, **kwargs)

    # ---------- Filtering ----------

    @property
    def visible_states(self) -> list[StateResponse]:
        return filter_states(self.states, self.selected_types, self.query)

    @property
    def has_filters(self) -> bool:
        return bool(self.selected_types) or bool(self.query.strip())

    @property
    def reorder_enabled(self) -> bool:
        return not self.has_filters

    def toggle_type(self, state_type: StateType | str) -> None:
        state_type = StateType(state_type)
        if state_type in self.selected_types:
            self.selected_types.discard(state_type)
        else:
            self.selected_types.add(state_type)

    def set_query(self, query: str) -> None:
        self.query = query

    # ---------- Lookup ----------

    def _index(self, state_id: uuid.UUID) -> int:
        for index, state in enumerate(self.states):
            if state.id == state_id:
                return index
        return -1

    def get(self, state_id: uuid.UUID) -> StateResponse | None:
        index = self._index(state_id)
        return self.states[index] if index != -1 else None

    # ---------- Autosave ----------

    @property
    def pending_ids(self) -> set[uuid.UUID]:
        return set(self._timers)

    @property
    def is_saving(self) -> bool:
        return bool(self._timers) or any(not t.done() for t in self._tasks)

    def _notify(self, level: Literal["success", "error"], message: str) -> None:
        notice = Notice(level, message)
        self.notices.append(notice)
        if self._on_notice is not None:
            self._on_notice(notice)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _persist(self, state_id: uuid.UUID, patch: dict[str, Any]) -> bool:
        try:
            await self.client.update_state(state_id, patch)
        except ApiError as e:
            logger.warning("Autosave failed for state %s: %s", state_id, e)
            self._notify("error", "Autosave failed")
            return False
        return True

    def _fire(self, state_id: uuid.UUID) -> None:
        self._timers.pop(state_id, None)
        patch = self._pending.pop(state_id, None)
        if patch:
            self._spawn(self._persist(state_id, patch))

    def schedule_save(self, state_id: uuid.UUID, patch: dict[str, Any]) -> None:
        self._pending.setdefault(state_id, {}).update(patch)
        existing = self._timers.pop(state_id, None)
        if existing is not None:
            existing.cancel()
        loop = asyncio.get_running_loop()
        self._timers[state_id] = loop.call_later(self.debounce, self._fire, state_id)

    def edit_state(self, state_id: uuid.UUID, **fields: Any) -> StateResponse:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        index = self._index(state_id)
        if index == -1:
            raise KeyError(state_id)
        if "type" in fields:
            fields["type"] = StateType(fields["type"])

        updated = self.states[index].model_copy(update=fields)
        self.states[index] = updated
        self.schedule_save(state_id, fields)
        return updated

    async def flush(self) -> None:
        """Fire every pending save now and wait for all saves in flight."""
        for state_id in list(self._timers):
            self._timers[state_id].cancel()
            self._fire(state_id)
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ---------- Ordering ----------

    def move_state(self, state_id: uuid.UUID, direction: Literal["up", "down"]) -> bool:
        """Swap with the neighbour above or below and save both new positions.

        Refused while a type filter or search query is active.
        """
        if not self.reorder_enabled:
            return False
        index = self._index(state_id)
        if index == -1:
            return False
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(self.states):
            return False

        reordered = list(self.states)
        reordered[index], reordered[target] = reordered[target], reordered[index]
        self.states = [s.model_copy(update={"sort_order": i + 1}) for i, s in enumerate(reordered)]

        for position in (index, target):
            moved = self.states[position]
            self._spawn(self._persist(moved.id, {"sort_order": moved.sort_order}))
        return True

    # ---------- Create / duplicate / delete ----------

    def _clear_focus(self, state_id: uuid.UUID) -> None:
        if self.focused_state_id == state_id:
            self.focused_state_id = None

    async def create_state(self) -> StateResponse | None:
        title, message = default_state_copy(self.lang)
        try:
            created = await self.client.create_state(
                self.element.id,
                type=StateType.INFO,
                title=title,
                message=message,
                sort_order=len(self.states) + 1,
            )
        except ApiError as e:
            logger.warning("Create state failed on element %s: %s", self.element.id, e)
            self._notify("error", "Failed to add state")
            return None
        if self.closed:
            return created

        self.states.append(created)
        self.focused_state_id = created.id
        asyncio.get_running_loop().call_later(FOCUS_SECONDS, self._clear_focus, created.id)
        self._notify("success", "State added")
        return created

    async def duplicate_state(self, state_id: uuid.UUID) -> StateResponse | None:
        source = self.get(state_id)
        if source is None:
            return None
        try:
            created = await self.client.create_state(
                self.element.id,
                type=source.type,
                title=f"{source.title} (copy)",
                message=source.message,
                condition=source.condition,
                severity=source.severity,
                locale=source.locale,
                sort_order=len(self.states) + 1,
            )
        except ApiError as e:
            logger.warning("Duplicate of state %s failed: %s", state_id, e)
            self._notify("error", "Failed to duplicate state")
            return None
        if not self.closed:
            self.states.append(created)
            self._notify("success", "State duplicated")
        return created

    async def delete_state(self, state_id: uuid.UUID) -> bool:
        try:
            await self.client.delete_state(state_id)
        except ApiError as e:
            logger.warning("Delete of state %s failed: %s", state_id, e)
            self._notify("error", "Failed to delete state")
            return False
        timer = self._timers.pop(state_id, None)
        if timer is not None:
            timer.cancel()
        self._pending.pop(state_id, None)
        if not self.closed:
            self.states = [s for s in self.states if s.id != state_id]
            self._notify("success", "State deleted")
        return True

    # ---------- Element ----------

    async def update_element(self, **fields: Any) -> ElementResponse | None:
        try:
            updated = await self.client.update_element(self.element.id, **fields)
        except ApiError as e:
            logger.warning("Element %s update failed: %s", self.element.id, e)
            self._notify("error", "Failed to save element")
            return None
        if not self.closed:
            self.element = updated
        return updated

    # ---------- Keyboard ----------

    def handle_key(self, key: str, *, ctrl: bool = False, meta: bool = False) -> bool:
        """Ctrl/Cmd+Enter adds a state for as long as the session is open."""
        if self.closed or key != "Enter" or not (ctrl or meta):
            return False
        self._spawn(self.create_state())
        return True

    async def close(self) -> None:
        await self.flush()
        self.closed = True
