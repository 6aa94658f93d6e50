"""Page-level endpoints: the dashboard and the auth entry points."""

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models import ActionResult, Note, Tag
from ..observability import get_tracer
from ..repositories import NoteRepository, TagRepository, get_note_repository, get_tag_repository

# Initialize logger
logger = structlog.get_logger(__name__)

tracer = get_tracer(__name__)

router = APIRouter(tags=["views"])


class Dashboard(BaseModel):
    notes: list[Note]
    tags: list[Tag]


class AuthView(BaseModel):
    view: str
    action: str


@router.get("/dashboard", response_model=ActionResult[Dashboard])
async def dashboard(
    notes: NoteRepository = Depends(get_note_repository),
    tags: TagRepository = Depends(get_tag_repository),
):
    """Everything the main view shows: recent notes and the tag sidebar."""
    with tracer.start_as_current_span("dashboard") as span:
        span.set_attribute("user.id", notes.identity.user_id)

        data = Dashboard(notes=await notes.list_notes(), tags=await tags.list_tags())

        logger.info(
            "dashboard_rendered",
            user_id=notes.identity.user_id,
            notes=len(data.notes),
            tags=len(data.tags),
        )
        return ActionResult(data=data)


@router.get("/login", response_model=ActionResult[AuthView])
async def login_view():
    return ActionResult(data=AuthView(view="login", action="/auth/login"))


@router.get("/signup", response_model=ActionResult[AuthView])
async def signup_view():
    return ActionResult(data=AuthView(view="signup", action="/auth/signup"))
