"""
Candidate repository - database operations for Candidate.
"""

from typing import List, Optional, Sequence
from uuid import UUID
import logging
import uuid

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from talentflow.models.candidate import Candidate
from talentflow.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class CandidateRepository:
    """Repository for Candidate database operations."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list(
        self,
        limit: int = 200,
        offset: int = 0,
        search: Optional[str] = None,
        job_id: Optional[UUID] = None,
        stage: Optional[str] = None,
        min_rating: Optional[int] = None,
    ) -> List[Candidate]:
        """List candidates, newest first, with the candidates-page filters."""
        query = select(Candidate)
        
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(Candidate.full_name.ilike(pattern), Candidate.email.ilike(pattern))
            )
        if job_id is not None:
            query = query.where(Candidate.job_id == job_id)
        if stage is not None:
            query = query.where(Candidate.current_stage == stage)
        if min_rating is not None:
            query = query.where(Candidate.rating >= min_rating)
        
        query = query.order_by(Candidate.created_at.desc()).limit(limit).offset(offset)
        
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def list_all(self) -> List[Candidate]:
        """Every candidate; analytics input."""
        result = await self.db.execute(select(Candidate).order_by(Candidate.created_at.desc()))
        return list(result.scalars().all())
    
    async def list_by_ids(self, candidate_ids: Sequence[UUID]) -> List[Candidate]:
        if not candidate_ids:
            return []
        result = await self.db.execute(
            select(Candidate).where(Candidate.id.in_(list(candidate_ids)))
        )
        return list(result.scalars().all())
    
    async def list_by_job(self, job_id: UUID) -> List[Candidate]:
        result = await self.db.execute(
            select(Candidate)
            .where(Candidate.job_id == job_id)
            .order_by(Candidate.created_at.desc())
        )
        return list(result.scalars().all())
    
    async def count_by_job(self, job_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Candidate.id)).where(Candidate.job_id == job_id)
        )
        return int(result.scalar_one())

    async def get_by_id(self, candidate_id: UUID) -> Optional[Candidate]:
        """Get a candidate by ID."""
        result = await self.db.execute(
            select(Candidate).where(Candidate.id == candidate_id)
        )
        return result.scalar_one_or_none()
    
    async def create(self, **fields) -> Candidate:
        """Insert a new candidate row."""
        candidate = Candidate(id=uuid.uuid4(), **fields)
        self.db.add(candidate)
        try:
            await self.db.flush()
            await self.db.refresh(candidate)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to create candidate", {"reason": str(exc)}) from exc
        return candidate
    
    async def _update_one(self, candidate_id: UUID, **values) -> Optional[Candidate]:
        candidate = await self.get_by_id(candidate_id)
        if not candidate:
            return None
        for field, value in values.items():
            setattr(candidate, field, value)
        candidate.updated_at = func.now()
        try:
            await self.db.flush()
            await self.db.refresh(candidate)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to update candidate", {"candidate_id": str(candidate_id), "reason": str(exc)}) from exc
        return candidate
    
    async def _update_many(self, candidate_ids: Sequence[UUID], **values) -> int:
        if not candidate_ids:
            return 0
        stmt = (
            update(Candidate)
            .where(Candidate.id.in_(list(candidate_ids)))
            .values(updated_at=func.now(), **values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to update candidates", {"reason": str(exc)}) from exc
        return int(result.rowcount or 0)
    
    async def update_stage(self, candidate_id: UUID, stage: str) -> Optional[Candidate]:
        return await self._update_one(candidate_id, current_stage=stage)
    
    async def update_stage_many(self, candidate_ids: Sequence[UUID], stage: str) -> int:
        """One UPDATE ... WHERE id IN (...) for the whole selection."""
        return await self._update_many(candidate_ids, current_stage=stage)
    
    async def update_rating(self, candidate_id: UUID, rating: int) -> Optional[Candidate]:
        return await self._update_one(candidate_id, rating=rating)
    
    async def update_rating_many(self, candidate_ids: Sequence[UUID], rating: int) -> int:
        return await self._update_many(candidate_ids, rating=rating)
    
    async def update_notes(self, candidate_id: UUID, notes: str) -> Optional[Candidate]:
        return await self._update_one(candidate_id, notes=notes)
    
    async def delete_many(self, candidate_ids: Sequence[UUID]) -> int:
        if not candidate_ids:
            return 0
        try:
            result = await self.db.execute(
                delete(Candidate)
                .where(Candidate.id.in_(list(candidate_ids)))
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to delete candidates", {"reason": str(exc)}) from exc
        return int(result.rowcount or 0)
    
    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Candidate commit failed: %s", exc)
            raise PersistenceError("Failed to save changes", {"reason": str(exc)}) from exc
