"""Image upload endpoints."""

import structlog
from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from ..auth import Identity, get_identity
from ..errors import PersistenceError, UploadRejected
from ..models import ActionResult, UploadedFile
from ..observability import get_app_metrics, get_tracer
from ..storage import get_object_store

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer and metrics
tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/upload", tags=["upload"])

MB = 1024 * 1024
IMAGE_BUCKET = "note-images"
IMAGE_MAX_BYTES = 5 * MB
COVER_BUCKET = "note-covers"
COVER_MAX_BYTES = 10 * MB

# Raster formats only; SVG is excluded
IMAGE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
}


async def store_image(file: UploadFile, identity: Identity, bucket: str, max_bytes: int) -> UploadedFile:
    """Validate an uploaded image and write it to the object store."""
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    extension = IMAGE_EXTENSIONS.get(content_type)
    if extension is None:
        metrics.uploads_rejected.add(1, {"reason": "content_type", "bucket": bucket})
        raise UploadRejected("Only image files are allowed")

    # Read one byte past the limit so oversized files are detected without reading them whole
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        metrics.uploads_rejected.add(1, {"reason": "size", "bucket": bucket})
        raise UploadRejected(f"File size must be less than {max_bytes // MB}MB")

    if not content:
        metrics.uploads_rejected.add(1, {"reason": "empty", "bucket": bucket})
        raise UploadRejected("No file provided")

    store = get_object_store()
    try:
        stored = await run_in_threadpool(
            store.upload, bucket, identity.user_id, extension, content, content_type
        )
    except OSError as e:
        logger.error("upload_failed", bucket=bucket, user_id=identity.user_id, error=str(e))
        raise PersistenceError("Failed to upload image") from e

    logger.info("upload_stored", bucket=bucket, user_id=identity.user_id, key=stored.key, size=stored.size_bytes)
    metrics.uploads.add(1, {"bucket": bucket})
    metrics.upload_size.record(stored.size_bytes, {"bucket": bucket})

    return UploadedFile(url=stored.url)


@router.post("/image", response_model=ActionResult[UploadedFile], status_code=201)
async def upload_image(file: UploadFile = File(...), identity: Identity = Depends(get_identity)):
    """Upload an inline image for note content (max 5MB)."""
    with tracer.start_as_current_span("upload_image") as span:
        span.set_attribute("user.id", identity.user_id)
        return ActionResult(data=await store_image(file, identity, IMAGE_BUCKET, IMAGE_MAX_BYTES))


@router.post("/cover", response_model=ActionResult[UploadedFile], status_code=201)
async def upload_cover(file: UploadFile = File(...), identity: Identity = Depends(get_identity)):
    """Upload a note cover image (max 10MB)."""
    with tracer.start_as_current_span("upload_cover") as span:
        span.set_attribute("user.id", identity.user_id)
        return ActionResult(data=await store_image(file, identity, COVER_BUCKET, COVER_MAX_BYTES))
