"""Tests for activity record ids and sequence numbering."""

import pytest

from app.models.activity import ActivityRecord, ActivityType
from app.repositories.activity import DuplicateActivityError
from app.services.activity_logger import ActivityLogger, activity_document_id
from tests.fakes import InMemoryActivityRepository


def _sign_in_record(user_id: str, n: int) -> ActivityRecord:
    return ActivityRecord(
        document_id=f"sign-in-alice-{n}",
        type=ActivityType.SIGN_IN,
        user_id=user_id,
        email="alice@x.com",
        username="alice",
        sequence_number=n,
    )


class StaleScanRepository(InMemoryActivityRepository):
    """Reports no existing records for the first `stale_scans` scans, like a concurrent writer racing us."""

    def __init__(self, stale_scans: int) -> None:
        super().__init__()
        self.stale_scans = stale_scans

    async def sequence_numbers(self, activity_type, username):
        if self.stale_scans > 0:
            self.stale_scans -= 1
            return []
        return await super().sequence_numbers(activity_type, username)


@pytest.mark.unit
class TestDocumentIds:
    def test_sign_up_id_has_no_number(self):
        assert activity_document_id(ActivityType.SIGN_UP, "alice") == "sign-up-alice"

    def test_sequenced_id(self):
        assert activity_document_id(ActivityType.SIGN_OUT, "alice", 7) == "sign-out-alice-7"


@pytest.mark.unit
class TestRecord:
    @pytest.mark.asyncio
    async def test_sign_up_record(self, activity_logger, activity_repo, clock):
        record = await activity_logger.record("u1", "alice@x.com", ActivityType.SIGN_UP)

        assert record.document_id == "sign-up-alice"
        assert record.username == "alice"
        assert record.sequence_number is None
        assert record.timestamp == clock()
        assert activity_repo.records["sign-up-alice"] == record

    @pytest.mark.asyncio
    async def test_repeated_sign_up_overwrites(self, activity_logger, activity_repo):
        await activity_logger.record("u1", "alice@x.com", ActivityType.SIGN_UP)
        await activity_logger.record("u2", "alice@y.com", ActivityType.SIGN_UP)

        assert list(activity_repo.records) == ["sign-up-alice"]
        assert activity_repo.records["sign-up-alice"].user_id == "u2"

    @pytest.mark.asyncio
    async def test_consecutive_sign_ins_are_dense(self, activity_logger, activity_repo):
        for _ in range(5):
            await activity_logger.record("u1", "alice@x.com", ActivityType.SIGN_IN)

        assert activity_repo.sequence_for(ActivityType.SIGN_IN, "alice") == [1, 2, 3, 4, 5]
        assert "sign-in-alice-5" in activity_repo.records

    @pytest.mark.asyncio
    async def test_counters_are_per_type_and_username(self, activity_logger, activity_repo):
        await activity_logger.record("u1", "alice@x.com", ActivityType.SIGN_IN)
        await activity_logger.record("u1", "alice@x.com", ActivityType.SIGN_IN)
        await activity_logger.record("u1", "alice@x.com", ActivityType.SIGN_OUT)
        await activity_logger.record("u2", "bob@x.com", ActivityType.SIGN_IN)

        assert activity_repo.sequence_for(ActivityType.SIGN_IN, "alice") == [1, 2]
        assert activity_repo.sequence_for(ActivityType.SIGN_OUT, "alice") == [1]
        assert activity_repo.sequence_for(ActivityType.SIGN_IN, "bob") == [1]

    @pytest.mark.asyncio
    async def test_username_is_text_before_first_at(self, activity_logger):
        record = await activity_logger.record("u1", "a.b@c@x.com", ActivityType.SIGN_IN)
        assert record.username == "a.b"
        assert record.document_id == "sign-in-a.b-1"

    @pytest.mark.asyncio
    async def test_scan_failure_falls_back_to_timestamp(self, activity_logger, activity_repo, clock):
        activity_repo.fail_scans = True

        record = await activity_logger.record("u1", "alice@x.com", ActivityType.SIGN_IN)

        expected = int(clock().timestamp() * 1000)
        assert record.sequence_number == expected
        assert record.document_id == f"sign-in-alice-{expected}"

    @pytest.mark.asyncio
    async def test_taken_id_is_retried_with_next_number(self, clock):
        repo = StaleScanRepository(stale_scans=1)
        logger = ActivityLogger(repo, clock=clock)
        await repo.insert(_sign_in_record("other", 1))

        record = await logger.record("u1", "alice@x.com", ActivityType.SIGN_IN)

        assert record.sequence_number == 2
        assert repo.records["sign-in-alice-1"].user_id == "other"

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, clock):
        repo = StaleScanRepository(stale_scans=10)
        await repo.insert(_sign_in_record("other", 1))
        logger = ActivityLogger(repo, clock=clock, max_attempts=3)

        with pytest.raises(DuplicateActivityError):
            await logger.record("u1", "alice@x.com", ActivityType.SIGN_IN)

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, activity_logger, activity_repo):
        activity_repo.fail_writes = True
        with pytest.raises(RuntimeError):
            await activity_logger.record("u1", "alice@x.com", ActivityType.SIGN_OUT)

    def test_max_attempts_must_be_positive(self, activity_repo):
        with pytest.raises(ValueError):
            ActivityLogger(activity_repo, max_attempts=0)
