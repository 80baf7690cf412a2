"""ActivityRepository against a recording session stand-in."""

import asyncio
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from talentflow.repositories.activity_repository import ActivityRepository
from talentflow.services.exceptions import PersistenceError


pytestmark = pytest.mark.unit


class _Savepoint:
    def __init__(self, events):
        self.events = events

    async def __aenter__(self):
        self.events.append("savepoint")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.events.append("rollback to savepoint" if exc_type else "release savepoint")
        return False


class RecordingSession:
    def __init__(self, fail_flush=False):
        self.events = []
        self.fail_flush = fail_flush

    def begin_nested(self):
        return _Savepoint(self.events)

    def add(self, _obj):
        self.events.append("add")

    async def flush(self):
        self.events.append("flush")
        if self.fail_flush:
            raise OperationalError("INSERT INTO candidate_activities", {}, Exception("connection reset"))


def test_append_writes_inside_a_savepoint():
    session = RecordingSession()

    activity = asyncio.run(ActivityRepository(session).append(uuid.uuid4(), "interview", "Phone interview scheduled"))

    assert activity.activity_type == "interview"
    assert session.events == ["savepoint", "add", "flush", "release savepoint"]


def test_failed_append_only_rolls_back_its_savepoint():
    session = RecordingSession(fail_flush=True)
    candidate_id = uuid.uuid4()

    with pytest.raises(PersistenceError) as exc_info:
        asyncio.run(ActivityRepository(session).append(candidate_id, "interview", "Video interview scheduled"))

    assert str(exc_info.value) == "Failed to record activity"
    assert exc_info.value.details["candidate_id"] == str(candidate_id)
    assert session.events == ["savepoint", "add", "flush", "rollback to savepoint"]
