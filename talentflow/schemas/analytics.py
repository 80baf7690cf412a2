"""
Analytics response schemas.
"""

from typing import List

from pydantic import BaseModel


class StageBucket(BaseModel):
    stage: str
    label: str
    count: int
    color: str


class ConversionPoint(BaseModel):
    stage: str
    rate: int


class TimeToHirePoint(BaseModel):
    month: str
    days: int


class HeadlineCounts(BaseModel):
    total_candidates: int = 0
    rejected: int = 0
    hired_or_offer: int = 0
    active_jobs: int = 0
    new_last_7_days: int = 0


class AnalyticsReport(BaseModel):
    """Everything the analytics page needs in one payload."""
    
    headline: HeadlineCounts
    stage_distribution: List[StageBucket] = []
    conversion: List[ConversionPoint] = []
    average_time_to_hire: int = 0
    time_to_hire: List[TimeToHirePoint] = []


class DashboardStats(BaseModel):
    total_jobs: int = 0
    total_candidates: int = 0
    active_interviews: int = 0
    new_applications: int = 0
