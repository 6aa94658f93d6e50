"""Notes endpoints."""

import structlog
from fastapi import APIRouter, Depends

from ..models import ActionResult, Note, NoteCreate, NoteUpdate
from ..observability import get_app_metrics, get_tracer
from ..repositories import NoteRepository, TagRepository, get_note_repository, get_tag_repository

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer and metrics
tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("", response_model=ActionResult[Note], status_code=201)
async def create_note(
    note: NoteCreate | None = None, repo: NoteRepository = Depends(get_note_repository)
):
    """
    Create a new note owned by the caller.

    Title and content are optional and default to empty strings.
    """
    with tracer.start_as_current_span("create_note") as span:
        span.set_attribute("user.id", repo.identity.user_id)

        created = await repo.create(note)

        span.set_attribute("note.id", created.id)
        metrics.notes_created.add(1)

        return ActionResult(data=created)


@router.get("", response_model=ActionResult[list[Note]])
async def list_notes(repo: NoteRepository = Depends(get_note_repository)):
    """List the caller's notes, most recently modified first."""
    with tracer.start_as_current_span("list_notes") as span:
        span.set_attribute("user.id", repo.identity.user_id)

        notes = await repo.list_notes()

        span.set_attribute("notes.count", len(notes))
        logger.info("notes_listed", user_id=repo.identity.user_id, count=len(notes))

        return ActionResult(data=notes)


@router.get("/{note_id}", response_model=ActionResult[Note])
async def get_note(note_id: str, repo: NoteRepository = Depends(get_note_repository)):
    """
    Retrieve a note with its tags.

    Notes owned by someone else are reported exactly like missing ones.
    """
    with tracer.start_as_current_span("get_note") as span:
        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("note.id", note_id)

        note = await repo.get(note_id)

        logger.info("note_retrieved", user_id=repo.identity.user_id, note_id=note_id)

        return ActionResult(data=note)


@router.patch("/{note_id}", response_model=ActionResult[Note])
async def update_note(
    note_id: str, note_update: NoteUpdate, repo: NoteRepository = Depends(get_note_repository)
):
    """
    Update a note.

    Supports partial updates - only fields present in the body are written;
    ``null`` clears a field. ``updated_at`` is refreshed on every call.
    """
    with tracer.start_as_current_span("update_note") as span:
        changes = note_update.changes()

        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("note.id", note_id)
        span.set_attribute("note.fields_updated", sorted(changes))

        note = await repo.update(note_id, changes)

        return ActionResult(data=note)


@router.delete("/{note_id}", response_model=ActionResult[None])
async def delete_note(note_id: str, repo: NoteRepository = Depends(get_note_repository)):
    """
    Permanently delete a note and its tag links.

    Deleting a note that is already gone (or was never visible) succeeds
    without doing anything.
    """
    with tracer.start_as_current_span("delete_note") as span:
        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("note.id", note_id)

        deleted = await repo.delete(note_id)

        span.set_attribute("note.deleted", deleted)
        if deleted:
            metrics.notes_deleted.add(1)

        return ActionResult()


@router.put("/{note_id}/tags/{tag_id}", response_model=ActionResult[None])
async def add_tag_to_note(
    note_id: str, tag_id: str, repo: TagRepository = Depends(get_tag_repository)
):
    """Attach one of the caller's tags to one of the caller's notes."""
    with tracer.start_as_current_span("add_tag_to_note") as span:
        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("note.id", note_id)
        span.set_attribute("tag.id", tag_id)

        await repo.add_to_note(note_id, tag_id)

        return ActionResult()


@router.delete("/{note_id}/tags/{tag_id}", response_model=ActionResult[None])
async def remove_tag_from_note(
    note_id: str, tag_id: str, repo: TagRepository = Depends(get_tag_repository)
):
    """Detach a tag from a note. Detaching a tag that isn't attached is fine."""
    with tracer.start_as_current_span("remove_tag_from_note") as span:
        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("note.id", note_id)
        span.set_attribute("tag.id", tag_id)

        await repo.remove_from_note(note_id, tag_id)

        return ActionResult()
