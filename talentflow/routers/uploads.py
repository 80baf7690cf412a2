"""Multipart helpers shared by the routers that accept resumes."""

from typing import Optional

from fastapi import UploadFile

from talentflow.services.candidate_service import ResumeUpload


async def read_resume(upload: Optional[UploadFile]) -> Optional[ResumeUpload]:
    """Read an optional resume part; an empty file field counts as no resume."""
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    return ResumeUpload(filename=upload.filename, content_type=upload.content_type, data=data)
