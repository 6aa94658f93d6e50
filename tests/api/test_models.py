"""Tests for model storage round trips and timestamp helpers."""

from datetime import UTC, datetime, timedelta, timezone

from bson import ObjectId

from api.models import Note, NoteUpdate, Tag
from api.models.common import as_utc, parse_object_id, utc_now


class TestStorageRoundTrip:
    def test_note_round_trip(self):
        now = utc_now()
        note = Note(
            id=str(ObjectId()),
            user_id=str(ObjectId()),
            title="Title",
            content="Body",
            icon="📓",
            cover_url="/media/note-covers/x.png",
            created_at=now,
            updated_at=now,
        )

        assert Note.from_document(note.to_document()) == note

    def test_repeated_round_trips_are_stable(self):
        now = utc_now()
        note = Note(
            id=str(ObjectId()),
            user_id=str(ObjectId()),
            title="",
            content="# heading\n\nbody",
            icon=None,
            cover_url=None,
            created_at=now,
            updated_at=now + timedelta(seconds=5),
        )

        once = Note.from_document(note.to_document())
        twice = Note.from_document(once.to_document())

        assert twice == once == note
        assert twice.to_document() == note.to_document()

        tag = Tag(id=str(ObjectId()), user_id=note.user_id, name="work", color=None, created_at=now)
        assert Tag.from_document(Tag.from_document(tag.to_document()).to_document()) == tag

    def test_note_document_has_no_tags(self):
        now = utc_now()
        tag = Tag(id=str(ObjectId()), user_id=str(ObjectId()), name="t", created_at=now)
        note = Note(
            id=str(ObjectId()), user_id=tag.user_id, created_at=now, updated_at=now, tags=[tag]
        )

        assert "tags" not in note.to_document()

    def test_tag_round_trip(self):
        tag = Tag(
            id=str(ObjectId()),
            user_id=str(ObjectId()),
            name="work",
            color="#3b82f6",
            created_at=utc_now(),
        )

        assert Tag.from_document(tag.to_document()) == tag

    def test_naive_store_datetimes_read_as_utc(self):
        naive = datetime(2024, 5, 1, 12, 30)
        doc = {"_id": ObjectId(), "user_id": ObjectId(), "name": "x", "created_at": naive}

        assert Tag.from_document(doc).created_at == naive.replace(tzinfo=UTC)


class TestNoteUpdate:
    def test_only_sent_fields_are_changes(self):
        assert NoteUpdate(title="x").changes() == {"title": "x"}

    def test_explicit_null_is_a_change(self):
        assert NoteUpdate.model_validate({"icon": None}).changes() == {"icon": None}

    def test_empty_update(self):
        assert NoteUpdate().changes() == {}


class TestHelpers:
    def test_utc_now_has_millisecond_precision(self):
        assert utc_now().microsecond % 1000 == 0
        assert utc_now().tzinfo is not None

    def test_as_utc_converts_offsets(self):
        local = datetime(2024, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))

        assert as_utc(local) == datetime(2024, 1, 1, 8, 0, tzinfo=UTC)

    def test_parse_object_id(self):
        oid = ObjectId()

        assert parse_object_id(str(oid)) == oid
        assert parse_object_id(oid) is oid
        assert parse_object_id("nope") is None
        assert parse_object_id(None) is None
