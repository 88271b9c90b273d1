import asyncio

import pytest
from httpx import ASGITransport

from conftest import FIGMA_URL, PNG_BYTES
from statebook.common.enums import StateType
from statebook.editor.client import ApiError, StatebookClient
from statebook.editor.session import EditorSession, Notice, filter_states

DEBOUNCE = 0.05


@pytest.fixture
async def api(app):
    async with StatebookClient("http://test", transport=ASGITransport(app=app)) as client:
        yield client


@pytest.fixture
async def element(api):
    created = await api.create_element(FIGMA_URL, PNG_BYTES, "login.png", "image/png", title="Login Form")
    await api.create_state(created.id, type=StateType.ERROR, title="Required", message="Enter your email.")
    await api.create_state(created.id, type=StateType.SUCCESS, title="Saved", message="All set.")
    await api.create_state(created.id, type=StateType.INFO, title="Hint", message="Use your work email.")
    return created


@pytest.fixture
async def session(api, element):
    editor = await EditorSession.open(api, element.id, debounce=DEBOUNCE)
    yield editor
    if not editor.closed:
        await editor.close()


def _count_calls(monkeypatch, client, name):
    calls = []
    original = getattr(client, name)

    async def wrapper(*args, **kwargs):
        calls.append((args, kwargs))
        return await original(*args, **kwargs)

    monkeypatch.setattr(client, name, wrapper)
    return calls


@pytest.mark.asyncio
async def test_open_loads_sorted_states(session):
    assert [s.title for s in session.states] == ["Required", "Saved", "Hint"]
    assert [s.sort_order for s in session.states] == [1, 2, 3]
    assert session.element.title == "Login Form"


@pytest.mark.asyncio
async def test_edits_within_quiet_period_coalesce(session, api, monkeypatch):
    calls = _count_calls(monkeypatch, api, "update_state")
    state = session.states[0]

    session.edit_state(state.id, title="Req")
    session.edit_state(state.id, title="Required field")
    session.edit_state(state.id, message="Please enter your email.")
    assert session.get(state.id).title == "Required field"
    assert session.pending_ids == {state.id}
    assert calls == []

    await asyncio.sleep(DEBOUNCE * 4)
    await session.flush()

    assert len(calls) == 1
    assert calls[0][0][1] == {"title": "Required field", "message": "Please enter your email."}
    saved = (await api.get_element(session.element.id)).states[0]
    assert saved.title == "Required field"
    assert saved.message == "Please enter your email."


@pytest.mark.asyncio
async def test_edits_to_different_states_save_separately(session, api, monkeypatch):
    calls = _count_calls(monkeypatch, api, "update_state")
    first, second = session.states[0], session.states[1]

    session.edit_state(first.id, title="A")
    session.edit_state(second.id, title="B")
    await session.flush()

    assert sorted(c[0][0] for c in calls) == sorted([first.id, second.id])


@pytest.mark.asyncio
async def test_edit_rejects_unknown_fields(session):
    with pytest.raises(ValueError):
        session.edit_state(session.states[0].id, sort_order=9)


@pytest.mark.asyncio
async def test_reorder_persists_and_is_self_inverse(session, api):
    original = [s.id for s in session.states]
    moved = session.states[1]

    assert session.move_state(moved.id, "up")
    assert [s.id for s in session.states] == [original[1], original[0], original[2]]
    assert [s.sort_order for s in session.states] == [1, 2, 3]
    await session.flush()

    persisted = await api.list_states(session.element.id)
    assert [s.id for s in persisted] == [original[1], original[0], original[2]]

    assert session.move_state(moved.id, "down")
    await session.flush()
    assert [s.id for s in session.states] == original
    assert [s.id for s in await api.list_states(session.element.id)] == original


@pytest.mark.asyncio
async def test_reorder_at_edges_is_noop(session):
    assert not session.move_state(session.states[0].id, "up")
    assert not session.move_state(session.states[-1].id, "down")


@pytest.mark.asyncio
async def test_filters_and_reorder_lock(session):
    session.toggle_type(StateType.ERROR)
    assert [s.title for s in session.visible_states] == ["Required"]
    assert not session.reorder_enabled
    assert not session.move_state(session.states[1].id, "up")

    session.toggle_type(StateType.ERROR)
    session.set_query("work email")
    assert [s.title for s in session.visible_states] == ["Hint"]
    assert not session.reorder_enabled

    session.set_query("  ")
    assert session.reorder_enabled
    assert len(session.visible_states) == 3


@pytest.mark.asyncio
async def test_filter_states_combines_type_and_query(session):
    visible = filter_states(session.states, [StateType.ERROR, StateType.SUCCESS], "set")
    assert [s.title for s in visible] == ["Saved"]


@pytest.mark.asyncio
async def test_autosave_failure_keeps_local_edit(session, api):
    notices = []
    session._on_notice = notices.append
    doomed = session.states[0]
    await api.delete_state(doomed.id)

    session.edit_state(doomed.id, title="Gone")
    await session.flush()

    assert session.get(doomed.id).title == "Gone"
    assert Notice("error", "Autosave failed") in session.notices
    assert notices == session.notices


@pytest.mark.asyncio
async def test_create_state_appends_with_defaults(session):
    created = await session.create_state()

    assert created is not None
    assert created.title == "New state"
    assert created.message == "Describe what the user sees."
    assert created.type is StateType.INFO
    assert created.sort_order == 4
    assert session.states[-1].id == created.id
    assert session.focused_state_id == created.id


@pytest.mark.asyncio
async def test_focus_clears_after_delay(session, monkeypatch):
    monkeypatch.setattr("statebook.editor.session.FOCUS_SECONDS", 0.01)
    created = await session.create_state()
    await asyncio.sleep(0.05)
    assert session.focused_state_id is None
    assert session.get(created.id) is not None


@pytest.mark.asyncio
async def test_duplicate_state(session):
    source = session.states[0]
    copy = await session.duplicate_state(source.id)

    assert copy.title == "Required (copy)"
    assert copy.message == source.message
    assert copy.type == source.type
    assert copy.sort_order == 4
    assert copy.id != source.id


@pytest.mark.asyncio
async def test_delete_cancels_pending_save(session, api, monkeypatch):
    calls = _count_calls(monkeypatch, api, "update_state")
    target = session.states[0]

    session.edit_state(target.id, title="Never saved")
    assert await session.delete_state(target.id)
    await asyncio.sleep(DEBOUNCE * 3)
    await session.flush()

    assert calls == []
    assert session.get(target.id) is None
    assert Notice("error", "Autosave failed") not in session.notices


@pytest.mark.asyncio
async def test_ctrl_enter_adds_state(session):
    assert not session.handle_key("Enter")
    assert session.handle_key("Enter", ctrl=True)
    assert session.handle_key("Enter", meta=True)
    await session.flush()
    assert len(session.states) == 5


@pytest.mark.asyncio
async def test_close_flushes_and_stops_applying(session, api):
    state = session.states[0]
    session.edit_state(state.id, message="Flushed on close.")
    await session.close()

    assert session.closed
    assert not session.handle_key("Enter", ctrl=True)
    saved = await api.get_element(session.element.id)
    assert saved.states[0].message == "Flushed on close."

    created = await session.create_state()
    assert created is not None
    assert len(session.states) == 3


@pytest.mark.asyncio
async def test_update_element(session):
    updated = await session.update_element(title="Sign-in form")
    assert updated.title == "Sign-in form"
    assert session.element.title == "Sign-in form"

    assert await session.update_element(figma_url="https://example.com/nope") is None
    assert session.notices[-1] == Notice("error", "Failed to save element")


@pytest.mark.asyncio
async def test_edit_and_reload_round_trip(api, element):
    editor = await EditorSession.open(api, element.id, debounce=DEBOUNCE)
    created = await editor.create_state()
    editor.edit_state(created.id, type=StateType.WARNING, title="Slow network", condition="> 3s")
    editor.move_state(created.id, "up")
    await editor.close()

    reopened = await EditorSession.open(api, element.id, debounce=DEBOUNCE)
    assert [s.title for s in reopened.states] == ["Required", "Saved", "Slow network", "Hint"]
    slow = reopened.states[2]
    assert slow.type is StateType.WARNING
    assert slow.condition == "> 3s"
    assert slow.sort_order == 3

    text = await api.export(element.id)
    assert "WARNING\n- Slow network: Describe what the user sees." in text
    await reopened.close()


@pytest.mark.asyncio
async def test_client_raises_api_error(api):
    with pytest.raises(ApiError) as exc:
        await api.get_project("00000000-0000-0000-0000-000000000000")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_of_blank_message_reports_notice(session, api):
    source = session.states[0]
    session.edit_state(source.id, message="")
    await session.flush()
    assert (await api.get_element(session.element.id)).states[0].message == ""

    assert await session.duplicate_state(source.id) is None
    assert session.notices[-1] == Notice("error", "Failed to duplicate state")
    assert len(session.states) == 3


@pytest.mark.asyncio
async def test_client_rejects_invalid_state_body_as_api_error(api, element):
    with pytest.raises(ApiError) as exc:
        await api.create_state(element.id, type=StateType.INFO, title="Blank", message="")
    assert exc.value.status_code is None
    assert exc.value.detail[0]["loc"] == ("message",)
