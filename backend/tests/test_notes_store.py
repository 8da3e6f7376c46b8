import pytest
from sqlalchemy import func, select

from taskify.storage.db import NoteTagRow
from taskify.storage.local_store import LocalNotesStore, LocalStorage
from taskify.storage.notes_store import NotesStore


@pytest.fixture(params=["remote", "local"])
def store(request, session_factory, tmp_path):
    if request.param == "remote":
        return NotesStore(session_factory, "alice")
    return LocalNotesStore(LocalStorage(tmp_path / "guest" / "default"))


def test_create_keeps_tag_order_and_drops_blank_tags(store):
    note = store.create_note(title="Standup", content="notes", tags=["work", "  ", "daily", " team "])

    assert note.tags == ("work", "daily", "team")
    assert store.get_note(note.id).tags == ("work", "daily", "team")
    assert note.is_pinned is False


def test_content_defaults_to_empty(store):
    note = store.create_note(title="Blank")
    assert note.content == ""
    assert store.update_note(note.id, {"content": None}).content == ""


def test_update_replaces_tags_only_when_given(store):
    note = store.create_note(title="Trip", tags=["travel", "summer"])

    retitled = store.update_note(note.id, {"title": "Trip to Rome"})
    assert retitled.tags == ("travel", "summer")

    retagged = store.update_note(note.id, {"tags": ["summer", "italy"]})
    assert retagged.tags == ("summer", "italy")
    assert retagged.title == "Trip to Rome"
    assert retagged.updated_at > retitled.updated_at


def test_list_puts_pinned_first_then_recent(store):
    old = store.create_note(title="old")
    pinned = store.create_note(title="pinned", is_pinned=True)
    new = store.create_note(title="new")

    assert [n.id for n in store.list_notes()] == [pinned.id, new.id, old.id]

    store.update_note(old.id, {"content": "touched"})
    assert [n.id for n in store.list_notes()] == [pinned.id, old.id, new.id]


def test_list_filters_by_exact_tag(store):
    work = store.create_note(title="a", tags=["work"])
    store.create_note(title="b", tags=["workshop"])

    assert [n.id for n in store.list_notes(tag="work")] == [work.id]
    assert store.list_notes(tag="nope") == []


def test_toggle_pin(store):
    note = store.create_note(title="flip")

    pinned = store.toggle_pin(note.id)
    assert pinned.is_pinned is True
    assert pinned.updated_at > note.updated_at
    assert store.toggle_pin(note.id).is_pinned is False
    assert store.toggle_pin("00000000-0000-0000-0000-000000000000") is None


def test_search_matches_title_content_and_tags(store):
    by_title = store.create_note(title="Project kickoff")
    by_content = store.create_note(title="Minutes", content="discussed the PROJECT scope")
    by_tag = store.create_note(title="Misc", tags=["project-x"])
    store.create_note(title="Other", content="nothing")

    found = {n.id for n in store.search_notes("project")}
    assert found == {by_title.id, by_content.id, by_tag.id}


def test_search_escapes_wildcards(store):
    hit = store.create_note(title="100% done")
    store.create_note(title="1000 things")
    assert [n.id for n in store.search_notes("%")] == [hit.id]


def test_delete(store):
    note = store.create_note(title="temp", tags=["x"])
    assert store.delete_note(note.id) is True
    assert store.get_note(note.id) is None
    assert store.delete_note(note.id) is False
    assert store.search_notes("x") == []


def test_remote_delete_removes_tag_rows(session_factory):
    store = NotesStore(session_factory, "alice")
    note = store.create_note(title="tagged", tags=["a", "b"])
    store.delete_note(note.id)

    with session_factory() as session:
        assert session.scalar(select(func.count()).select_from(NoteTagRow)) == 0


def test_remote_notes_are_owner_scoped(session_factory):
    alice = NotesStore(session_factory, "alice")
    bob = NotesStore(session_factory, "bob")
    note = alice.create_note(title="diary", tags=["private"])

    assert bob.get_note(note.id) is None
    assert bob.update_note(note.id, {"title": "x"}) is None
    assert bob.toggle_pin(note.id) is None
    assert bob.delete_note(note.id) is False
    assert bob.list_notes(tag="private") == []
    assert bob.search_notes("diary") == []


def test_explicit_null_tags_or_pin_is_rejected(store):
    note = store.create_note(title="keep", tags=["a"], is_pinned=True)

    with pytest.raises(ValueError):
        store.update_note(note.id, {"tags": None})
    with pytest.raises(ValueError):
        store.update_note(note.id, {"is_pinned": None})

    kept = store.get_note(note.id)
    assert kept.tags == ("a",)
    assert kept.is_pinned is True
