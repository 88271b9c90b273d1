"""Plain-text and JSON exports of an element's states."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

from statebook.common.enums import CopyMode, Lang, StateType
from statebook.common.i18n import state_type_label
from statebook.core.serialization.schemas import ElementResponse, ExportBundle, StateResponse


def _field(state: Any, name: str, default: Any = None) -> Any:
    if isinstance(state, Mapping):
        return state.get(name, default)
    return getattr(state, name, default)


def state_copy_text(state: Any, mode: CopyMode | str = CopyMode.MESSAGE) -> str:
    """Clipboard text for a single state.

    ``title-message`` yields ``"<title>: <message>"`` unless the title is blank,
    every other case yields the bare message.
    """
    title = _field(state, "title") or ""
    message = _field(state, "message") or ""
    if CopyMode(mode) is CopyMode.TITLE_MESSAGE and title.strip():
        return f"{title}: {message}"
    return message


def _sort_key(state: Any) -> int:
    value = _field(state, "sort_order")
    if value is None:
        value = _field(state, "sortOrder", 0)
    return value


def group_by_type(states: Iterable[Any]) -> dict[str, list[Any]]:
    """Group states by type, keeping types in the order they are first seen."""
    grouped: dict[str, list[Any]] = {}
    for state in states:
        raw_type = _field(state, "type") or StateType.OTHER
        key = raw_type.value if isinstance(raw_type, StateType) else str(raw_type)
        grouped.setdefault(key, []).append(state)
    return grouped


def serialize_states_text(states: Iterable[Any], lang: Lang | str = Lang.EN) -> str:
    chunks: list[str] = []
    for state_type, items in group_by_type(states).items():
        chunks.append(state_type_label(lang, state_type).upper())
        for state in sorted(items, key=_sort_key):
            title = (_field(state, "title") or "").strip()
            message = _field(state, "message") or ""
            chunks.append(f"- {title}: {message}" if title else f"- {message}")
        chunks.append("")
    return "\n".join(chunks).strip()


def build_export_bundle(element: ElementResponse, states: Iterable[StateResponse]) -> ExportBundle:
    return ExportBundle(element=element, states=sorted(states, key=lambda s: s.sort_order))


def serialize_states_json(element: ElementResponse, states: Iterable[StateResponse]) -> str:
    bundle = build_export_bundle(element, states)
    return json.dumps(bundle.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


def export_filename(title: str, extension: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-") or "element"
    return f"{slug}.{extension}"
