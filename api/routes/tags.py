"""Tag endpoints."""

import structlog
from fastapi import APIRouter, Depends

from ..models import ActionResult, Note, Tag, TagCreate, TagUpdate
from ..observability import get_app_metrics, get_tracer
from ..repositories import NoteRepository, TagRepository, get_note_repository, get_tag_repository

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer and metrics
tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=ActionResult[list[Tag]])
async def list_tags(repo: TagRepository = Depends(get_tag_repository)):
    """List the caller's tags alphabetically."""
    with tracer.start_as_current_span("list_tags") as span:
        span.set_attribute("user.id", repo.identity.user_id)

        tags = await repo.list_tags()

        span.set_attribute("tags.count", len(tags))
        return ActionResult(data=tags)


@router.post("", response_model=ActionResult[Tag], status_code=201)
async def create_tag(tag: TagCreate, repo: TagRepository = Depends(get_tag_repository)):
    """
    Create a tag.

    A colour from the preset palette is picked when none is given.
    Names must be unique per user.
    """
    with tracer.start_as_current_span("create_tag") as span:
        span.set_attribute("user.id", repo.identity.user_id)

        created = await repo.create(tag.name, tag.color)

        span.set_attribute("tag.id", created.id)
        metrics.tags_created.add(1)

        return ActionResult(data=created)


@router.get("/{tag_id}", response_model=ActionResult[Tag])
async def get_tag(tag_id: str, repo: TagRepository = Depends(get_tag_repository)):
    with tracer.start_as_current_span("get_tag") as span:
        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("tag.id", tag_id)

        return ActionResult(data=await repo.get(tag_id))


@router.patch("/{tag_id}", response_model=ActionResult[Tag])
async def update_tag(
    tag_id: str, tag: TagUpdate, repo: TagRepository = Depends(get_tag_repository)
):
    """Rename a tag and optionally change its colour."""
    with tracer.start_as_current_span("update_tag") as span:
        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("tag.id", tag_id)

        return ActionResult(data=await repo.update(tag_id, tag.name, tag.color))


@router.delete("/{tag_id}", response_model=ActionResult[None])
async def delete_tag(tag_id: str, repo: TagRepository = Depends(get_tag_repository)):
    """Delete a tag. Notes it was attached to are kept."""
    with tracer.start_as_current_span("delete_tag") as span:
        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("tag.id", tag_id)

        span.set_attribute("tag.deleted", await repo.delete(tag_id))

        return ActionResult()


@router.get("/{tag_id}/notes", response_model=ActionResult[list[Note]])
async def list_notes_by_tag(tag_id: str, repo: NoteRepository = Depends(get_note_repository)):
    """Notes carrying a tag, most recently modified first."""
    with tracer.start_as_current_span("list_notes_by_tag") as span:
        span.set_attribute("user.id", repo.identity.user_id)
        span.set_attribute("tag.id", tag_id)

        notes = await repo.list_by_tag(tag_id)

        logger.info("notes_listed_by_tag", user_id=repo.identity.user_id, tag_id=tag_id, count=len(notes))
        return ActionResult(data=notes)
