"""
Job repository - database operations for Job.
"""

import logging
from typing import Iterable, List, Optional
from uuid import UUID
import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from talentflow.models.job import Job
from talentflow.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class JobRepository:
    """Repository for Job database operations."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list(
        self,
        limit: int = 100,
        offset: int = 0,
        status: Optional[str] = None,
        order_by_title: bool = False,
    ) -> List[Job]:
        """List jobs, newest first (or alphabetically for pickers)."""
        query = select(Job)
        
        if status is not None:
            query = query.where(Job.status == status)
        
        if order_by_title:
            query = query.order_by(Job.title.asc())
        else:
            query = query.order_by(Job.created_at.desc())
        query = query.limit(limit).offset(offset)
        
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def get_by_id(self, job_id: UUID) -> Optional[Job]:
        """Get a job by ID."""
        result = await self.db.execute(select(Job).where(Job.id == job_id))
        return result.scalar_one_or_none()
    
    async def count_by_status(self, statuses: Iterable[str]) -> int:
        result = await self.db.execute(
            select(func.count(Job.id)).where(Job.status.in_(list(statuses)))
        )
        return int(result.scalar_one())
    
    async def count_all(self) -> int:
        result = await self.db.execute(select(func.count(Job.id)))
        return int(result.scalar_one())
    
    async def create(self, **fields) -> Job:
        """Create a new job."""
        job = Job(id=uuid.uuid4(), **fields)
        self.db.add(job)
        try:
            await self.db.flush()
            await self.db.refresh(job)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to create job", {"reason": str(exc)}) from exc
        return job
    
    async def update(self, job_id: UUID, values: dict) -> Optional[Job]:
        """Update a job."""
        job = await self.get_by_id(job_id)
        if not job:
            return None
        
        for field, value in values.items():
            setattr(job, field, value)
        
        job.updated_at = func.now()
        try:
            await self.db.flush()
            await self.db.refresh(job)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to update job", {"job_id": str(job_id), "reason": str(exc)}) from exc
        return job
    
    async def delete(self, job_id: UUID) -> bool:
        """Delete a job; candidates go with it through ON DELETE CASCADE."""
        try:
            result = await self.db.execute(delete(Job).where(Job.id == job_id))
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to delete job", {"job_id": str(job_id), "reason": str(exc)}) from exc
        return bool(result.rowcount)
    
    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Job commit failed: %s", exc)
            raise PersistenceError("Failed to save job", {"reason": str(exc)}) from exc
