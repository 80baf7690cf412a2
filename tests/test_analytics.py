import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from talentflow.services.analytics_service import (
    NEUTRAL_STAGE_COLOR,
    AnalyticsService,
    CandidateSnapshot,
    build_dashboard,
    days_between,
    funnel_conversion,
    headline_counts,
    round_half_up,
    stage_distribution,
    time_to_hire,
)


pytestmark = pytest.mark.unit


def snap(stage, created, updated=None):
    return CandidateSnapshot(current_stage=stage, created_at=created, updated_at=updated or created)


def utc(year, month, day, hour=0):
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def test_stage_distribution_counts_in_first_seen_order():
    t = utc(2024, 1, 1)
    candidates = [snap("applied", t), snap("interview", t), snap("applied", t), snap("hired", t)]

    buckets = stage_distribution(candidates)

    assert [(b.stage, b.label, b.count) for b in buckets] == [
        ("applied", "Applied", 2),
        ("interview", "Interview", 1),
        ("hired", "Hired", 1),
    ]
    assert buckets[2].color == "hsl(var(--success))"


def test_stage_distribution_unknown_stage_gets_neutral_color():
    buckets = stage_distribution([snap("technical-round", utc(2024, 1, 1))])
    assert buckets[0].label == "Technical-round"
    assert buckets[0].color == NEUTRAL_STAGE_COLOR


def test_funnel_conversion_counts_at_or_beyond():
    t = utc(2024, 1, 1)
    candidates = [snap("applied", t), snap("applied", t), snap("interview", t), snap("hired", t)]

    points = funnel_conversion(candidates)

    assert [p.stage for p in points] == [
        "Applied → Screening",
        "Screening → Interview",
        "Interview → Offer",
        "Offer → Hired",
    ]
    # 4 at/after applied, 2 at/after screening
    assert [p.rate for p in points] == [50, 100, 50, 100]


def test_funnel_conversion_ignores_rejected_and_handles_empty_stage():
    t = utc(2024, 1, 1)
    points = funnel_conversion([snap("rejected", t), snap("applied", t)])
    assert [p.rate for p in points] == [0, 0, 0, 0]

    assert [p.rate for p in funnel_conversion([])] == [0, 0, 0, 0]


def test_round_half_up_matches_math_round():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(66.666) == 67
    assert round_half_up(33.333) == 33


def test_days_between_floors_partial_days():
    assert days_between(utc(2024, 1, 1), utc(2024, 1, 11, 23)) == 10
    # naive timestamps are treated as UTC
    assert days_between(datetime(2024, 1, 1), utc(2024, 1, 3)) == 2


def test_time_to_hire_average_and_monthly_series():
    candidates = [
        snap("hired", utc(2024, 1, 1), utc(2024, 1, 11)),
        snap("offer", utc(2024, 1, 5), utc(2024, 1, 25)),
        snap("offer", utc(2024, 2, 1), utc(2024, 2, 8)),
        snap("interview", utc(2024, 1, 1), utc(2024, 3, 1)),
    ]

    average, series = time_to_hire(candidates)

    # (10 + 20 + 7) / 3 = 12.33
    assert average == 12
    assert [(p.month, p.days) for p in series] == [("Jan 2024", 15), ("Feb 2024", 7)]


def test_time_to_hire_keeps_last_six_months_in_order():
    candidates = [
        snap("hired", utc(2023, month, 1), utc(2023, month, 1) + timedelta(days=month))
        for month in range(12, 3, -1)
    ]

    _, series = time_to_hire(candidates, max_months=6)

    assert [p.month for p in series] == ["Jul 2023", "Aug 2023", "Sep 2023", "Oct 2023", "Nov 2023", "Dec 2023"]
    assert series[-1].days == 12


def test_time_to_hire_without_hires():
    assert time_to_hire([snap("applied", utc(2024, 1, 1))]) == (0, [])


def test_headline_counts():
    now = utc(2024, 3, 10)
    candidates = [
        snap("rejected", utc(2024, 1, 1)),
        snap("hired", utc(2024, 3, 5)),
        snap("offer", utc(2024, 3, 3)),
        snap("applied", utc(2024, 3, 2)),
    ]

    counts = headline_counts(candidates, active_job_count=3, now=now, window_days=7)

    assert counts.total_candidates == 4
    assert counts.rejected == 1
    assert counts.hired_or_offer == 2
    assert counts.active_jobs == 3
    assert counts.new_last_7_days == 2


def test_build_dashboard_on_empty_input():
    report = build_dashboard([], active_job_count=0, now=utc(2024, 1, 1))

    assert report.headline.total_candidates == 0
    assert report.stage_distribution == []
    assert len(report.conversion) == 4
    assert report.average_time_to_hire == 0
    assert report.time_to_hire == []


def test_analytics_service_reads_stores(candidate_store, job_store, interview_store, make_job, make_candidate):
    make_job(status="active")
    make_job(status="open")
    make_job(status="closed")
    make_candidate(current_stage="applied")
    make_candidate(current_stage="hired")
    service = AnalyticsService(candidate_store, job_store, interview_store)

    report = asyncio.run(service.build_report(now=utc(2024, 3, 3)))
    stats = asyncio.run(service.dashboard_stats(now=utc(2024, 3, 3)))

    assert report.headline.active_jobs == 1
    assert report.headline.total_candidates == 2
    assert stats.total_jobs == 3
    assert stats.total_candidates == 2
    assert stats.active_interviews == 0
    assert stats.new_applications == 2
