"""
Recruitment analytics.

The aggregation functions are pure: they take candidate snapshots and
return report rows, so they can be tested without a database.
``AnalyticsService`` loads the inputs from the stores and assembles the
dashboard payload.

Funnel conversion counts candidates *currently* at or beyond each stage.
Stage history is not kept, so a candidate rejected after an interview
does not count as having passed screening. This is a known approximation.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from talentflow.core.config import settings
from talentflow.schemas.analytics import (
    AnalyticsReport,
    ConversionPoint,
    DashboardStats,
    HeadlineCounts,
    StageBucket,
    TimeToHirePoint,
)
from talentflow.services.ports import CandidateStore, InterviewStore, JobStore
from talentflow.utils.time import ensure_aware, utc_now

logger = logging.getLogger(__name__)

FUNNEL_STAGES = ["applied", "screening", "interview", "offer", "hired"]
HIRE_STAGES = frozenset({"hired", "offer"})
REJECTED_STAGE = "rejected"

# Job statuses counted as "active jobs" on the analytics page.
ACTIVE_JOB_STATUSES = ("active",)
SCHEDULED_INTERVIEW_STATUS = "scheduled"

ANALYTICS_STAGE_COLORS: Dict[str, str] = {
    "applied": "hsl(var(--primary))",
    "screening": "hsl(var(--chart-2))",
    "interview": "hsl(var(--chart-3))",
    "offer": "hsl(var(--chart-4))",
    "hired": "hsl(var(--success))",
    "rejected": "hsl(var(--destructive))",
}
NEUTRAL_STAGE_COLOR = "hsl(var(--muted))"

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class CandidateSnapshot:
    """The three candidate fields analytics reads."""

    current_stage: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record) -> "CandidateSnapshot":
        return cls(
            current_stage=record.current_stage,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


def round_half_up(value: float) -> int:
    """Round .5 upwards like JavaScript's Math.round (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _capitalize(stage: str) -> str:
    return stage[:1].upper() + stage[1:]


def stage_distribution(candidates: Sequence[CandidateSnapshot]) -> List[StageBucket]:
    """Candidate count per current stage, in first-seen order."""
    counts: Dict[str, int] = {}
    for candidate in candidates:
        counts[candidate.current_stage] = counts.get(candidate.current_stage, 0) + 1

    return [
        StageBucket(
            stage=stage,
            label=_capitalize(stage),
            count=count,
            color=ANALYTICS_STAGE_COLORS.get(stage, NEUTRAL_STAGE_COLOR),
        )
        for stage, count in counts.items()
    ]


def funnel_conversion(candidates: Sequence[CandidateSnapshot]) -> List[ConversionPoint]:
    """
    Adjacent-stage conversion rates over FUNNEL_STAGES.

    passed(i) is the number of candidates whose current stage sits at
    position i or later in the funnel; stages outside the funnel (e.g.
    rejected) never count as passed. rate(i) = passed(i+1) / passed(i),
    as a rounded percentage, 0 when nobody reached stage i.
    """
    positions = [
        FUNNEL_STAGES.index(c.current_stage) if c.current_stage in FUNNEL_STAGES else -1
        for c in candidates
    ]

    def passed(index: int) -> int:
        return sum(1 for position in positions if position >= index)

    points = []
    for i in range(len(FUNNEL_STAGES) - 1):
        current, following = passed(i), passed(i + 1)
        rate = round_half_up(following / current * 100) if current > 0 else 0
        points.append(
            ConversionPoint(
                stage=f"{_capitalize(FUNNEL_STAGES[i])} → {_capitalize(FUNNEL_STAGES[i + 1])}",
                rate=rate,
            )
        )
    return points


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, floored."""
    seconds = (ensure_aware(end) - ensure_aware(start)).total_seconds()
    return math.floor(seconds / _SECONDS_PER_DAY)


def month_label(year: int, month: int) -> str:
    """'Jan 2024' style label."""
    return f"{_MONTH_ABBR[month - 1]} {year}"


def time_to_hire(
    candidates: Sequence[CandidateSnapshot],
    max_months: Optional[int] = None,
) -> Tuple[int, List[TimeToHirePoint]]:
    """
    Average days from application to offer/hire, plus a per-month series.

    Only candidates currently in ``offer`` or ``hired`` count; the end date
    is their last update. Months are keyed on ``updated_at``, ordered
    chronologically, and only the most recent ``max_months`` are kept.
    """
    if max_months is None:
        max_months = settings.TIME_TO_HIRE_MAX_MONTHS

    hires = [c for c in candidates if c.current_stage in HIRE_STAGES]
    if not hires:
        return 0, []

    durations = [days_between(c.created_at, c.updated_at) for c in hires]
    average = round_half_up(sum(durations) / len(durations))

    monthly: Dict[Tuple[int, int], List[int]] = {}
    for candidate, days in zip(hires, durations):
        updated = ensure_aware(candidate.updated_at)
        monthly.setdefault((updated.year, updated.month), []).append(days)

    series = [
        TimeToHirePoint(
            month=month_label(year, month),
            days=round_half_up(sum(values) / len(values)),
        )
        for (year, month), values in sorted(monthly.items())
    ]
    if max_months > 0:
        series = series[-max_months:]
    return average, series


def _count_created_since(candidates: Sequence[CandidateSnapshot], since: datetime) -> int:
    return sum(1 for c in candidates if ensure_aware(c.created_at) >= since)


def headline_counts(
    candidates: Sequence[CandidateSnapshot],
    active_job_count: int,
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> HeadlineCounts:
    now = ensure_aware(now or utc_now())
    if window_days is None:
        window_days = settings.NEW_APPLICATION_WINDOW_DAYS

    return HeadlineCounts(
        total_candidates=len(candidates),
        rejected=sum(1 for c in candidates if c.current_stage == REJECTED_STAGE),
        hired_or_offer=sum(1 for c in candidates if c.current_stage in HIRE_STAGES),
        active_jobs=active_job_count,
        new_last_7_days=_count_created_since(candidates, now - timedelta(days=window_days)),
    )


def build_dashboard(
    candidates: Sequence[CandidateSnapshot],
    active_job_count: int,
    now: Optional[datetime] = None,
) -> AnalyticsReport:
    """Assemble every analytics figure from one candidate snapshot list."""
    average, series = time_to_hire(candidates)
    return AnalyticsReport(
        headline=headline_counts(candidates, active_job_count, now),
        stage_distribution=stage_distribution(candidates),
        conversion=funnel_conversion(candidates),
        average_time_to_hire=average,
        time_to_hire=series,
    )


class AnalyticsService:
    """Loads analytics inputs from the stores."""

    def __init__(
        self,
        candidates: CandidateStore,
        jobs: JobStore,
        interviews: Optional[InterviewStore] = None,
    ):
        self.candidates = candidates
        self.jobs = jobs
        self.interviews = interviews

    async def _snapshots(self) -> List[CandidateSnapshot]:
        records = await self.candidates.list_all()
        return [CandidateSnapshot.from_record(record) for record in records]

    async def build_report(self, now: Optional[datetime] = None) -> AnalyticsReport:
        snapshots = await self._snapshots()
        active_jobs = await self.jobs.count_by_status(ACTIVE_JOB_STATUSES)
        report = build_dashboard(snapshots, active_jobs, now)
        logger.debug("Analytics report built from %d candidates", len(snapshots))
        return report

    async def dashboard_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        """Headline tiles of the recruiter dashboard."""
        now = ensure_aware(now or utc_now())
        snapshots = await self._snapshots()
        scheduled = 0
        if self.interviews is not None:
            scheduled = await self.interviews.count_by_status(SCHEDULED_INTERVIEW_STATUS)

        return DashboardStats(
            total_jobs=await self.jobs.count_all(),
            total_candidates=len(snapshots),
            active_interviews=scheduled,
            new_applications=_count_created_since(
                snapshots, now - timedelta(days=settings.NEW_APPLICATION_WINDOW_DAYS)
            ),
        )
