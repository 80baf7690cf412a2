"""
Resume file storage.

Files are written under ``RESUME_STORAGE_ROOT`` and exposed at
``RESUME_PUBLIC_BASE_URL``. Validation happens before any write.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Optional, Protocol

from talentflow.core.config import settings
from talentflow.services.exceptions import PersistenceError, ValidationError
from talentflow.utils.time import utc_now

logger = logging.getLogger(__name__)

ALLOWED_RESUME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)
RESUME_FOLDER = "resumes"

_WHITESPACE = re.compile(r"\s+")


class FileStorage(Protocol):
    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path`` and return its public URL."""
        ...


def validate_resume(content_type: Optional[str], size: int, max_bytes: Optional[int] = None) -> None:
    """Reject anything that is not a PDF/Word document or is larger than the limit."""
    if content_type not in ALLOWED_RESUME_TYPES:
        raise ValidationError(
            "Please upload a PDF or Word document",
            {"content_type": content_type, "allowed": sorted(ALLOWED_RESUME_TYPES)},
        )
    limit = max_bytes or settings.RESUME_MAX_BYTES
    if size > limit:
        raise ValidationError(
            "File size must be less than 5MB",
            {"size": size, "max_bytes": limit},
        )


def resume_path(full_name: str, filename: str, now_ms: Optional[int] = None) -> str:
    """resumes/<epoch ms>_<Full_Name>.<ext>"""
    if now_ms is None:
        now_ms = int(utc_now().timestamp() * 1000)
    ext = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
    safe_name = _WHITESPACE.sub("_", (full_name or "").strip())
    return f"{RESUME_FOLDER}/{now_ms}_{safe_name}.{ext.lower()}"


class LocalFileStorage:
    """Stores files on the local filesystem."""

    def __init__(self, root: Optional[str] = None, public_base_url: Optional[str] = None):
        self.root = Path(root or settings.RESUME_STORAGE_ROOT)
        self.public_base_url = (public_base_url or settings.RESUME_PUBLIC_BASE_URL).rstrip("/")

    def _write(self, target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise ValidationError("Invalid storage path", {"path": path})
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as exc:
            raise PersistenceError("Failed to store file", {"path": path, "reason": str(exc)}) from exc
        logger.info("Stored %s (%d bytes, %s)", path, len(data), content_type)
        return f"{self.public_base_url}/{path}"
