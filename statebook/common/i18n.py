"""Localised labels used by exports and new-state defaults."""

from __future__ import annotations

from statebook.common.enums import Lang, StateType

STATE_TYPE_LABELS: dict[Lang, dict[StateType, str]] = {
    Lang.EN: {
        StateType.ERROR: "Error",
        StateType.WARNING: "Warning",
        StateType.SUCCESS: "Success",
        StateType.INFO: "Info",
        StateType.HELPER: "Helper",
        StateType.EMPTY: "Empty",
        StateType.ACCESSIBILITY: "Accessibility",
        StateType.OTHER: "Other",
    },
    Lang.RU: {
        StateType.ERROR: "Ошибка",
        StateType.WARNING: "Предупреждение",
        StateType.SUCCESS: "Успех",
        StateType.INFO: "Инфо",
        StateType.HELPER: "Подсказка",
        StateType.EMPTY: "Пустое состояние",
        StateType.ACCESSIBILITY: "Доступность",
        StateType.OTHER: "Другое",
    },
}

DEFAULT_STATE_COPY: dict[Lang, tuple[str, str]] = {
    Lang.EN: ("New state", "Describe what the user sees."),
    Lang.RU: ("Новое состояние", "Опишите, что видит пользователь."),
}


def resolve_lang(value: str | None) -> Lang:
    try:
        return Lang(value or Lang.EN.value)
    except ValueError:
        return Lang.EN


def state_type_label(lang: Lang | str, state_type: StateType | str) -> str:
    labels = STATE_TYPE_LABELS[resolve_lang(lang.value if isinstance(lang, Lang) else lang)]
    try:
        return labels[StateType(state_type)]
    except ValueError:
        return str(state_type)


def default_state_copy(lang: Lang | str = Lang.EN) -> tuple[str, str]:
    return DEFAULT_STATE_COPY[resolve_lang(lang.value if isinstance(lang, Lang) else lang)]
