"""
Unit tests for snapshot decoding, migrations and storage.

Tests the versioned decoder against current, legacy and malformed documents,
the JSON file storage and the repository's failure handling.
"""

import json
from unittest.mock import Mock

import pytest

from studydesk.core.models import (
    Bookmark,
    CardStatus,
    DashboardState,
    Deck,
    Flashcard,
    FocusSession,
    Resource,
    ResourceType,
    Revision,
)
from studydesk.errors import SnapshotDecodeError
from studydesk.store.persistence import JsonFileStorage, MemoryStorage, SnapshotRepository
from studydesk.store.schema import (
    LEGACY_BOOKMARK_TITLE,
    SCHEMA_VERSION,
    decode_snapshot,
    encode_snapshot,
)
from studydesk.syllabus.defaults import default_habits, default_state, default_syllabus, default_tasks


@pytest.fixture
def full_state():
    """Default state with one record in every collection."""
    state = default_state()
    state.revisions = [Revision(id="r1", topic_id="gs4-eth", date="2025-01-02")]
    state.resources = [
        Resource(id="n1", topic_id="gs4-eth", type=ResourceType.NOTE, content="# Ethics"),
    ]
    state.focus_sessions = [
        FocusSession(id="f1", topic_id="gs4-eth", duration=25, date="2025-01-01T09:30:00.000Z")
    ]
    state.bookmarks = [
        Bookmark(id="b1", title="Budget", link="http://a", date="2025-01-01T09:30:00.000Z", source="PIB")
    ]
    state.decks = [
        Deck(
            id="d1",
            title="Polity",
            cards=(
                Flashcard(
                    id="c1",
                    deck_id="d1",
                    front="Q",
                    back="A",
                    last_reviewed="2025-01-01T09:30:00.000Z",
                    status=CardStatus.LEARNING,
                ),
            ),
        )
    ]
    return state


class TestRoundTrip:
    """load(save(S)) == S for well-formed states."""

    def test_round_trip(self, full_state):
        assert decode_snapshot(encode_snapshot(full_state)) == full_state

    def test_encoded_document_is_versioned(self, full_state):
        assert json.loads(encode_snapshot(full_state))["version"] == SCHEMA_VERSION

    def test_repository_round_trip(self, full_state):
        repository = SnapshotRepository(MemoryStorage(), "k")
        assert repository.save(full_state)
        assert repository.load() == full_state


class TestLegacyMigration:
    """Documents from the first release (no version key)."""

    def test_legacy_url_bookmarks(self, fixed_now):
        state = decode_snapshot(json.dumps({"bookmarks": ["http://a"]}), now=fixed_now)
        assert state.bookmarks == [
            Bookmark(
                id="http://a",
                title=LEGACY_BOOKMARK_TITLE,
                link="http://a",
                date="2025-01-01T09:30:00.000Z",
            )
        ]

    def test_mixed_bookmark_list_keeps_both_kinds(self, fixed_now):
        current = {"id": "b1", "title": "Budget", "link": "http://b", "date": "2025-01-01T08:00:00.000Z"}
        state = decode_snapshot(json.dumps({"bookmarks": ["http://a", current, {"id": 1}]}), now=fixed_now)
        assert [(b.id, b.title) for b in state.bookmarks] == [
            ("http://a", LEGACY_BOOKMARK_TITLE),
            ("b1", "Budget"),
        ]

    @pytest.mark.parametrize("bookmarks", [None, "http://a", {"a": 1}])
    def test_non_list_bookmarks_become_empty(self, bookmarks):
        assert decode_snapshot(json.dumps({"bookmarks": bookmarks})).bookmarks == []

    def test_missing_collections_use_fallbacks(self):
        state = decode_snapshot("{}")
        assert state.syllabus == default_syllabus()
        assert state.habits == default_habits()
        assert state.tasks == default_tasks()
        assert state.revisions == [] and state.resources == [] and state.decks == []

    def test_empty_habit_list_is_kept(self):
        """A valid empty list is not replaced by defaults."""
        assert decode_snapshot(json.dumps({"habits": []})).habits == []


class TestSyllabusShape:
    """Stored syllabi with an outdated structure are replaced wholesale."""

    @staticmethod
    def _paper(pid, sections):
        return {
            "id": pid,
            "title": f"GS Paper {pid}",
            "status": "Not Started",
            "subtopics": [
                {"id": f"{pid}-{i}", "title": f"S{i}", "status": "Reading"} for i in range(sections)
            ],
        }

    def test_valid_custom_tree_is_kept(self):
        tree = [self._paper(f"p{i}", 4) for i in range(4)]
        state = decode_snapshot(json.dumps({"syllabus": tree}))
        assert [p.id for p in state.syllabus] == ["p0", "p1", "p2", "p3"]

    def test_paper_with_three_sections_falls_back(self):
        tree = [self._paper(f"p{i}", 4) for i in range(3)] + [self._paper("p3", 3)]
        assert decode_snapshot(json.dumps({"syllabus": tree})).syllabus == default_syllabus()

    def test_three_papers_fall_back(self):
        tree = [self._paper(f"p{i}", 5) for i in range(3)]
        assert decode_snapshot(json.dumps({"syllabus": tree})).syllabus == default_syllabus()

    def test_invalid_topic_falls_back(self):
        tree = [{"title": "no id"}]
        assert decode_snapshot(json.dumps({"syllabus": tree})).syllabus == default_syllabus()


class TestMalformed:
    """Malformed input is rejected or isolated per collection."""

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", '"text"', "null"])
    def test_non_object_raises(self, raw):
        with pytest.raises(SnapshotDecodeError):
            decode_snapshot(raw)

    def test_bad_collection_does_not_affect_others(self, full_state):
        document = json.loads(encode_snapshot(full_state))
        document["revisions"] = [{"id": "r1"}]
        state = decode_snapshot(json.dumps(document))
        assert state.revisions == []
        assert state.decks == full_state.decks

    def test_unknown_status_drops_record(self):
        document = {"revisions": [{"id": "r", "topicId": "t", "date": "d", "status": "Skipped"}]}
        assert decode_snapshot(json.dumps(document)).revisions == []

    def test_invalid_records_are_dropped_individually(self):
        document = {
            "bookmarks": [
                {"id": "b1", "title": "Budget", "link": "http://a", "date": "2025-01-01"},
                {"id": "b2", "title": "No date", "link": "http://b"},
            ],
            "revisions": [
                {"id": "r1", "topicId": "t", "date": "2025-01-02", "status": "Pending"},
                {"id": "r2", "topicId": "t", "date": "2025-01-03", "status": "pending"},
            ],
        }
        state = decode_snapshot(json.dumps(document))
        assert [b.id for b in state.bookmarks] == ["b1"]
        assert [r.id for r in state.revisions] == ["r1"]

    def test_invalid_card_does_not_drop_deck(self, full_state):
        document = json.loads(encode_snapshot(full_state))
        document["decks"][0]["cards"].append({"id": "c2", "front": "no deck id"})
        state = decode_snapshot(json.dumps(document))
        assert state.decks == full_state.decks

    def test_non_list_habits_fall_back(self):
        assert decode_snapshot(json.dumps({"habits": {"h1": "Read"}})).habits == default_habits()

    def test_all_invalid_tasks_leave_empty_list(self):
        assert decode_snapshot(json.dumps({"tasks": [{"text": "no id"}]})).tasks == []

    def test_deeply_nested_json_raises(self):
        with pytest.raises(SnapshotDecodeError):
            decode_snapshot("[" * 100000 + "]" * 100000)


class TestJsonFileStorage:
    def test_set_and_get(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "data")
        storage.set("upsc-dashboard-v1", '{"a": 1}')
        assert (tmp_path / "data" / "upsc-dashboard-v1.json").read_text(encoding="utf-8") == '{"a": 1}'
        assert storage.get("upsc-dashboard-v1") == '{"a": 1}'

    def test_missing_key(self, tmp_path):
        assert JsonFileStorage(tmp_path).get("nothing") is None

    def test_remove(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        storage.set("k", "v")
        storage.remove("k")
        storage.remove("k")
        assert storage.get("k") is None

    @pytest.mark.parametrize("key", ["../escape", "a/b", ""])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        with pytest.raises(ValueError):
            JsonFileStorage(tmp_path).set(key, "v")


class TestSnapshotRepository:
    def test_nothing_stored(self):
        assert SnapshotRepository(MemoryStorage(), "k").load() is None

    def test_corrupt_snapshot_returns_none(self):
        repository = SnapshotRepository(MemoryStorage({"k": "{oops"}), "k")
        assert repository.load() is None

    def test_read_error_returns_none(self):
        storage = Mock()
        storage.get.side_effect = OSError("permission denied")
        assert SnapshotRepository(storage, "k").load() is None

    def test_write_error_is_swallowed(self):
        storage = Mock()
        storage.set.side_effect = OSError("disk full")
        assert SnapshotRepository(storage, "k").save(DashboardState()) is False

    def test_invalid_utf8_file_returns_none(self, tmp_path):
        (tmp_path / "k.json").write_bytes(b'{"tasks": [\xff\xfe]}')
        assert SnapshotRepository(JsonFileStorage(tmp_path), "k").load() is None

    def test_deeply_nested_snapshot_returns_none(self):
        storage = MemoryStorage({"k": '{"tasks": ' + "[" * 100000 + "]" * 100000 + "}"})
        assert SnapshotRepository(storage, "k").load() is None
