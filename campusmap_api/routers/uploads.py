"""
Uploads API router.

Endpoints:
- POST /api/map/upload - Store a 360 degree image, return its public path
"""

import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, UploadFile, File, Depends
from loguru import logger

from ..config import get_settings
from ..models.route import UploadResponse

router = APIRouter()

# Maximum image size (50MB)
MAX_UPLOAD_SIZE = 50_000_000

UPLOAD_FIELD = "360Image"
UPLOAD_URL_PREFIX = "/uploads"


def get_upload_dir() -> Path:
    """Directory uploaded images are written to."""
    return get_settings().upload_dir


def unique_filename(original: str) -> str:
    """Generated file name keeping the original extension."""
    suffix = Path(original).suffix.lower()
    return f"{UPLOAD_FIELD}-{uuid.uuid4().hex}{suffix}"


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    file: Optional[UploadFile] = File(None, alias=UPLOAD_FIELD, description="Panoramic image"),
    upload_dir: Path = Depends(get_upload_dir)
):
    """Store an uploaded image under a generated unique name."""
    if file is None or not file.filename:
        raise HTTPException(400, "No file selected!")

    content = await file.read(MAX_UPLOAD_SIZE + 1)
    if not content:
        raise HTTPException(400, "No file selected!")
    if len(content) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            400,
            f"File too large. Maximum size is {MAX_UPLOAD_SIZE // 1_000_000}MB"
        )

    filename = unique_filename(file.filename)
    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / filename).write_bytes(content)
    logger.info("Stored upload {} ({} bytes)", filename, len(content))

    return UploadResponse(
        message="File uploaded!",
        file_path=f"{UPLOAD_URL_PREFIX}/{filename}"
    )
