"""
Unit tests for the dashboard state store.

Tests every mutator, scheduling triggers and persistence after each change.
"""

from unittest.mock import Mock

import pytest

from studydesk.core.models import (
    CardStatus,
    DashboardState,
    ResourceType,
    RevisionStatus,
    TopicStatus,
)
from studydesk.store.dashboard import DashboardStore
from studydesk.store.persistence import MemoryStorage, SnapshotRepository
from studydesk.store.schema import decode_snapshot, encode_snapshot
from studydesk.syllabus.tree import find_by_id


def _persisted(storage) -> DashboardState:
    return decode_snapshot(storage.get("upsc-dashboard-v1"))


class TestBoot:
    """Tests for loading the store."""

    def test_first_run_uses_defaults(self, repository):
        store = DashboardStore.load(repository)
        assert len(store.state.syllabus) == 4
        assert store.state.revisions == []

    def test_loads_persisted_state(self, storage, repository, store):
        store.add_task("Persisted")
        reloaded = DashboardStore.load(repository)
        assert reloaded.state == store.state

    def test_open_from_settings(self, tmp_path):
        settings = Mock(data_dir=tmp_path, dashboard_key="dash")
        store = DashboardStore.open(settings)
        store.add_task("x")
        assert (tmp_path / "dash.json").exists()


class TestSyllabus:
    """Tests for status updates and the scheduling trigger."""

    @pytest.mark.parametrize("status", [TopicStatus.READING, TopicStatus.REVISED])
    def test_trigger_statuses_schedule(self, store, status):
        assert store.update_syllabus_status("gs1-art-arch", status)
        pending = [r for r in store.state.revisions if r.topic_id == "gs1-art-arch"]
        assert [r.date for r in pending] == ["2025-01-02", "2025-01-04", "2025-01-08", "2025-01-31"]

    @pytest.mark.parametrize("status", [TopicStatus.MASTERED, TopicStatus.NOT_STARTED])
    def test_other_statuses_do_not_schedule(self, store, status):
        store.update_syllabus_status("gs1-art-arch", status)
        assert store.state.revisions == []
        assert find_by_id(store.state.syllabus, "gs1-art-arch").status is status

    def test_mastered_keeps_existing_plan(self, store):
        store.update_syllabus_status("gs1-art-arch", TopicStatus.READING)
        before = list(store.state.revisions)
        store.update_syllabus_status("gs1-art-arch", TopicStatus.MASTERED)
        assert store.state.revisions == before

    def test_retrigger_keeps_four_pending(self, store):
        store.update_syllabus_status("gs1-art-arch", TopicStatus.READING)
        store.update_syllabus_status("gs1-art-arch", TopicStatus.REVISED)
        pending = [r for r in store.state.revisions if r.is_pending]
        assert len(pending) == 4

    def test_unknown_topic_changes_nothing(self, store, storage):
        assert not store.update_syllabus_status("nope", TopicStatus.READING)
        assert store.state.revisions == []
        assert storage.get("upsc-dashboard-v1") is None

    def test_status_change_is_persisted(self, store, storage):
        store.update_syllabus_status("gs4-eth", TopicStatus.MASTERED)
        assert find_by_id(_persisted(storage).syllabus, "gs4-eth").status is TopicStatus.MASTERED

    def test_complete_revision(self, store):
        batch = store.schedule_revision("gs4-eth")
        store.complete_revision(batch[0].id)
        assert store.state.revisions[0].status is RevisionStatus.COMPLETED


class TestHabitsAndTasks:
    def test_habit_crud(self, store):
        habit = store.add_habit("Meditate")
        store.toggle_habit(habit.id)
        assert store.state.habits[-1].completed_dates == ("2025-01-01",)
        store.toggle_habit(habit.id, "2024-12-31")
        assert store.state.habits[-1].completed_dates == ("2025-01-01", "2024-12-31")
        store.delete_habit(habit.id)
        assert habit.id not in {h.id for h in store.state.habits}

    def test_task_crud(self, store):
        task = store.add_task("Revise polity")
        store.toggle_task(task.id)
        assert store.state.tasks[-1].completed
        store.update_task(task.id, "Revise economy")
        assert store.state.tasks[-1].text == "Revise economy"
        store.delete_task(task.id)
        assert task.id not in {t.id for t in store.state.tasks}

    def test_collections_are_replaced_not_mutated(self, store):
        """Lists handed out earlier stay valid after an operation."""
        tasks = store.state.tasks
        store.add_task("New")
        assert len(tasks) == 3
        assert len(store.state.tasks) == 4


class TestResourcesAndFocus:
    def test_resource_crud(self, store):
        resource = store.add_resource("gs4-eth", ResourceType.NOTE, "draft", title="Main Note")
        store.update_resource(resource.id, "final")
        assert store.state.resources[0].content == "final"
        assert store.state.resources[0].title == "Main Note"
        store.delete_resource(resource.id)
        assert store.state.resources == []

    def test_duplicate_resources_allowed(self, store):
        store.add_resource("t", ResourceType.LINK, "http://a")
        store.add_resource("t", ResourceType.LINK, "http://a")
        assert len(store.state.resources) == 2

    def test_log_focus_session(self, store):
        session = store.log_focus_session("gs4-eth", 25)
        assert session.date == "2025-01-01T09:30:00.000Z"
        assert store.state.focus_sessions == [session]


class TestBookmarks:
    def test_add_generates_id_and_date(self, store):
        bookmark = store.add_bookmark("Budget", "http://a", source="PIB")
        assert bookmark.id == "id-1"
        assert bookmark.date == "2025-01-01T09:30:00.000Z"

    def test_add_with_explicit_id(self, store):
        assert store.add_bookmark("T", "http://a", id="http://a").id == "http://a"

    def test_remove_by_id_or_link(self, store):
        """Removal matches either the id or the link."""
        first = store.add_bookmark("A", "http://a")
        store.add_bookmark("B", "http://b")
        store.remove_bookmark(first.id)
        store.remove_bookmark("http://b")
        assert store.state.bookmarks == []

    def test_remove_unknown_is_noop(self, store):
        store.add_bookmark("A", "http://a")
        store.remove_bookmark("nope")
        assert len(store.state.bookmarks) == 1

    def test_update_merges_fields(self, store):
        bookmark = store.add_bookmark("A", "http://a")
        store.update_bookmark(bookmark.id, note="read later")
        updated = store.state.bookmarks[0]
        assert updated.note == "read later"
        assert updated.title == "A"

    def test_update_rejects_unknown_field(self, store):
        with pytest.raises(TypeError):
            store.update_bookmark("x", colour="red")


class TestDecks:
    def test_deck_crud(self, store):
        deck = store.add_deck("Economy", description="Budget terms")
        card = store.add_flashcard(deck.id, "Q", "A")
        assert card.status is CardStatus.NEW
        assert store.find_deck(deck.id).cards == (card,)

        store.delete_deck(deck.id)
        assert store.state.decks == []

    def test_add_card_to_missing_deck(self, store):
        assert store.add_flashcard("nope", "Q", "A") is None

    def test_update_flashcard_status(self, store):
        deck = store.add_deck("Economy")
        card = store.add_flashcard(deck.id, "Q", "A")
        store.update_flashcard_status(deck.id, card.id, CardStatus.MASTERED)
        updated = store.find_deck(deck.id).cards[0]
        assert updated.status is CardStatus.MASTERED
        assert updated.last_reviewed == "2025-01-01T09:30:00.000Z"


class TestPersistence:
    """Each operation persists the full snapshot."""

    def test_every_mutation_saves(self, id_factory, fixed_now):
        repository = Mock(spec=SnapshotRepository)
        store = DashboardStore(repository, clock=lambda: fixed_now, id_factory=id_factory)
        store.add_task("a")
        store.add_habit("b")
        store.add_deck("c")
        assert repository.save.call_count == 3
        assert repository.save.call_args.args[0] is store.state

    def test_failed_save_keeps_memory_state(self, fixed_now):
        storage = MemoryStorage()
        storage.set = Mock(side_effect=OSError("disk full"))
        store = DashboardStore(SnapshotRepository(storage, "k"), clock=lambda: fixed_now)
        store.add_task("kept")
        assert store.state.tasks[-1].text == "kept"

    def test_restore_replaces_everything(self, store, storage):
        store.add_task("local only")
        remote = DashboardState.from_dict({"syllabus": [], "habits": [], "tasks": []})
        store.restore(remote)
        assert store.state is remote
        assert storage.get("upsc-dashboard-v1") == encode_snapshot(remote)
