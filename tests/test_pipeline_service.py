"""Stage transitions: persistence first, notifications and activities best-effort."""

import asyncio
import uuid

import pytest

from talentflow.services.change_feed import CANDIDATES_TABLE, ChangeFeed
from talentflow.services.exceptions import NotFoundError, PersistenceError, ValidationError
from talentflow.services.pipeline_service import PipelineService, TransitionTrigger


pytestmark = pytest.mark.unit


@pytest.fixture
def service(candidate_store, job_store, notifier, activity_log):
    return PipelineService(candidate_store, job_store, notifier, activity_log, change_feed=ChangeFeed())


def test_drag_drop_move_persists_notifies_and_records_activity(service, candidate_store, notifier, activity_log, make_job, make_candidate):
    job = make_job(title="Data Engineer")
    candidate = make_candidate(full_name="Grace Hopper", email="grace@example.com", job_id=job.id, current_stage="applied")

    result = asyncio.run(service.move_candidate(candidate.id, "screening", trigger=TransitionTrigger.DRAG_DROP, actor="recruiter-1"))

    assert result.changed and result.notified
    assert result.notification_error is None
    assert candidate_store.rows[candidate.id].current_stage == "screening"
    assert candidate_store.commits == 1
    assert notifier.calls == [
        {
            "candidate_name": "Grace Hopper",
            "candidate_email": "grace@example.com",
            "old_stage": "applied",
            "new_stage": "screening",
            "job_title": "Data Engineer",
        }
    ]
    assert [(a.activity_type, a.description, a.created_by) for a in activity_log.entries] == [
        ("stage_change", "Stage changed from applied to screening", "recruiter-1")
    ]


def test_notification_failure_does_not_undo_stage_change(service, candidate_store, notifier, make_candidate):
    candidate = make_candidate(email="bounce@example.com", current_stage="applied")
    notifier.fail_for.add("bounce@example.com")

    result = asyncio.run(service.move_candidate(candidate.id, "interview"))

    assert candidate_store.rows[candidate.id].current_stage == "interview"
    assert result.changed
    assert not result.notified
    assert "bounce@example.com" in result.notification_error


def test_missing_job_uses_generic_title(service, notifier, make_candidate):
    candidate = make_candidate(job_id=uuid.uuid4())

    asyncio.run(service.move_candidate(candidate.id, "offer"))

    assert notifier.calls[0]["job_title"] == "Position"


def test_persistence_failure_aborts_before_side_effects(service, candidate_store, notifier, activity_log, make_candidate):
    candidate = make_candidate(current_stage="applied")
    candidate_store.fail_updates = True

    with pytest.raises(PersistenceError):
        asyncio.run(service.move_candidate(candidate.id, "screening"))

    assert candidate_store.rows[candidate.id].current_stage == "applied"
    assert notifier.calls == []
    assert activity_log.entries == []


def test_failed_commit_skips_notification(service, candidate_store, notifier, make_candidate):
    candidate = make_candidate()
    candidate_store.fail_commit = True

    with pytest.raises(PersistenceError):
        asyncio.run(service.move_candidate(candidate.id, "screening"))
    assert notifier.calls == []


def test_activity_failure_is_swallowed(service, activity_log, make_candidate):
    candidate = make_candidate()
    activity_log.fail = True

    result = asyncio.run(service.move_candidate(candidate.id, "screening", trigger=TransitionTrigger.DETAIL_VIEW))

    assert result.changed
    assert result.notified
    assert result.activity_recorded is False


def test_move_to_same_stage_is_noop(service, candidate_store, notifier, activity_log, make_candidate):
    candidate = make_candidate(current_stage="screening")

    result = asyncio.run(service.move_candidate(candidate.id, "screening"))

    assert result.changed is False
    assert candidate_store.commits == 0
    assert notifier.calls == []
    assert activity_log.entries == []


def test_move_unknown_candidate_and_blank_stage(service, make_candidate):
    with pytest.raises(NotFoundError) as exc_info:
        asyncio.run(service.move_candidate(uuid.uuid4(), "screening"))
    assert exc_info.value.entity == "candidate"

    candidate = make_candidate()
    with pytest.raises(ValidationError):
        asyncio.run(service.move_candidate(candidate.id, "  "))


def test_bulk_move_settles_all_notifications(service, candidate_store, notifier, activity_log, make_candidate):
    a = make_candidate(email="a@example.com")
    b = make_candidate(email="b@example.com")
    c = make_candidate(email="c@example.com")
    notifier.fail_for.add("b@example.com")

    result = asyncio.run(service.bulk_move([a.id, b.id, c.id], "interview"))

    assert all(candidate_store.rows[x.id].current_stage == "interview" for x in (a, b, c))
    assert result.requested == 3
    assert result.updated == 3
    assert result.notifications_sent == 2
    assert list(result.notification_failures) == [str(b.id)]
    assert len(notifier.calls) == 3
    assert result.message == "Updated 3 candidate(s)"
    # bulk moves do not write timeline entries
    assert activity_log.entries == []


def test_bulk_move_reports_partial_update(service, make_candidate):
    a = make_candidate()
    missing = uuid.uuid4()

    result = asyncio.run(service.bulk_move([a.id, missing, a.id], "offer"))

    assert result.requested == 2
    assert result.updated == 1
    assert result.message == "Updated 1 of 2 candidate(s)"


def test_bulk_move_validation(service, make_candidate):
    with pytest.raises(ValidationError):
        asyncio.run(service.bulk_move([], "offer"))
    with pytest.raises(ValidationError):
        asyncio.run(service.bulk_move([make_candidate().id], ""))


def test_bulk_move_failure_sends_nothing(service, candidate_store, notifier, make_candidate):
    a = make_candidate()
    candidate_store.fail_updates = True

    with pytest.raises(PersistenceError):
        asyncio.run(service.bulk_move([a.id], "offer"))
    assert notifier.calls == []


def test_rating_bounds_and_bulk_rating(service, candidate_store, notifier, make_candidate):
    a = make_candidate()
    b = make_candidate()

    updated = asyncio.run(service.update_rating(a.id, 4))
    assert updated.rating == 4

    for bad in (-1, 6, True):
        with pytest.raises(ValidationError):
            asyncio.run(service.update_rating(a.id, bad))

    result = asyncio.run(service.bulk_update_rating([a.id, b.id], 5))
    assert result.updated == 2
    assert {c.rating for c in candidate_store.rows.values()} == {5}
    assert notifier.calls == []


def test_notes_and_bulk_delete(service, candidate_store, make_candidate):
    a = make_candidate()
    b = make_candidate()

    asyncio.run(service.update_notes(a.id, "Strong SQL"))
    assert candidate_store.rows[a.id].notes == "Strong SQL"

    result = asyncio.run(service.bulk_delete([a.id, b.id]))
    assert result.updated == 2
    assert result.message == "Deleted 2 candidate(s)"
    assert candidate_store.rows == {}


def test_add_note_writes_note_activity(service, activity_log, make_candidate):
    candidate = make_candidate()

    asyncio.run(service.add_note(candidate.id, "  Called, follow up Friday ", actor="recruiter-2"))

    entry = activity_log.entries[0]
    assert (entry.activity_type, entry.description, entry.created_by) == ("note", "Called, follow up Friday", "recruiter-2")

    with pytest.raises(ValidationError):
        asyncio.run(service.add_note(candidate.id, "   "))


def test_moves_publish_candidate_changes(candidate_store, job_store, notifier, activity_log, make_candidate):
    feed = ChangeFeed()
    seen = []
    feed.subscribe(CANDIDATES_TABLE, seen.append)
    service = PipelineService(candidate_store, job_store, notifier, activity_log, change_feed=feed)
    candidate = make_candidate()

    asyncio.run(service.move_candidate(candidate.id, "offer"))

    assert seen and seen[0]["id"] == str(candidate.id)
