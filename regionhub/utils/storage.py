# regionhub/utils/storage.py
import shutil
import uuid
from pathlib import Path

from fastapi import UploadFile

from regionhub.config import settings
from regionhub.utils.errors import ValidationFailed

ALLOWED_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".pdf"}

def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path

def save_upload(file: UploadFile, field: str = "file") -> str:
    """Store an uploaded file under a generated unique name and return that name."""
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in ALLOWED_SUFFIXES:
        raise ValidationFailed("Unsupported file type", {field: f"Allowed types: {', '.join(sorted(ALLOWED_SUFFIXES))}"})

    filename = f"{uuid.uuid4().hex}{suffix}"
    with (upload_dir() / filename).open("wb") as buffer:
        shutil.copyfileobj(file.file, buffer)
    return filename

def delete_upload(filename: str):
    if filename:
        (upload_dir() / filename).unlink(missing_ok=True)
