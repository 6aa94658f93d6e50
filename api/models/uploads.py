"""Upload-related Pydantic models."""

from pydantic import BaseModel


class UploadedFile(BaseModel):
    """Publicly resolvable location of a stored object."""

    url: str
