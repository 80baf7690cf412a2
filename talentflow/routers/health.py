"""Health check router."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from talentflow.core.config import settings
from talentflow.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@lru_cache(maxsize=1)
def migration_head() -> Optional[str]:
    """Newest revision shipped with the code, None when alembic/ is absent."""
    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.exists():
        return None
    config = Config(str(ini_path))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return ScriptDirectory.from_config(config).get_current_head()


async def _applied_revision(db: AsyncSession) -> Optional[str]:
    result = await db.execute(text("SELECT version_num FROM alembic_version"))
    return result.scalar_one_or_none()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Liveness plus the things a recruiter would notice first: the database,
    whether the schema is migrated, and whether stage emails go out.
    """
    db_ok = False
    applied = None
    try:
        await db.execute(text("SELECT 1"))
        db_ok = True
        applied = await _applied_revision(db)
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Health check: database check failed: %s", exc)

    head = None
    try:
        head = migration_head()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Health check: could not read migration head: %s", exc)

    return {
        "app": settings.APP_NAME,
        "api_ok": True,
        "db_ok": db_ok,
        "schema_current": bool(applied and head and applied == head),
        "schema_revision": applied,
        "schema_head": head,
        "notifications_enabled": settings.NOTIFICATIONS_ENABLED,
        "email_configured": bool(settings.EMAIL_API_KEY),
    }
