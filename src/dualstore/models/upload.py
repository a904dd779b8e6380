"""Upload data models."""

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class ExtractedFile:
    """A file that has been fully written to transient storage."""

    transient_path: Path
    original_filename: str
    byte_count: int


class UploadResponse(BaseModel):
    """Response model for file upload."""

    s3_url: str = Field(..., description="Object-store locator of the uploaded file")
    ipfs_hash: str = Field(..., description="Content address of the uploaded file")
    filename: str = Field(..., description="Filename declared by the client")
    size: int = Field(..., ge=0, description="Number of bytes received")
