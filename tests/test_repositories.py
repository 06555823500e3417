"""Repository tests against a real MongoDB.

Set MONGODB_TEST_URL (e.g. mongodb://localhost:27017) to run them; each test
gets a fresh throwaway database, dropped afterwards.
"""

import os
import uuid

import pytest
import pytest_asyncio
from motor.motor_asyncio import AsyncIOMotorClient

from app.database import init_models
from app.errors import ConflictError
from app.models.activity import ActivityDocument, ActivityRecord, ActivityType
from app.models.roles import Role
from app.models.user import User
from app.repositories.activity import ActivityRepository, DuplicateActivityError
from app.repositories.users import DUPLICATE_EMAIL_MESSAGE, UserRepository
from app.services.activity_logger import ActivityLogger

MONGODB_TEST_URL = os.getenv("MONGODB_TEST_URL")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not MONGODB_TEST_URL, reason="MONGODB_TEST_URL not set"),
]


@pytest_asyncio.fixture
async def database():
    client = AsyncIOMotorClient(MONGODB_TEST_URL, tz_aware=True, serverSelectionTimeoutMS=3000)
    name = f"otp_auth_test_{uuid.uuid4().hex[:12]}"
    database = client[name]
    await init_models(database)
    yield database
    await client.drop_database(name)
    client.close()


@pytest.fixture
def users(database):
    return UserRepository()


@pytest.fixture
def activity(database):
    return ActivityRepository()


def _record(activity_type, n=None, user_id="u1", email="alice@x.com"):
    suffix = "" if n is None else f"-{n}"
    return ActivityRecord(
        document_id=f"{activity_type.value}-alice{suffix}",
        type=activity_type,
        user_id=user_id,
        email=email,
        username="alice",
        sequence_number=n,
    )


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_create_and_read_back(self, users):
        created = await users.create(User(email="alice@x.com", password="hash", is_verified=True))

        assert len(created.id) == 24
        assert (await users.get_by_id(created.id)).email == "alice@x.com"
        fetched = await users.get_by_email("alice@x.com")
        assert fetched.id == created.id
        assert fetched.password == "hash"

    @pytest.mark.asyncio
    async def test_activity_record_is_not_read_as_user(self, users, activity):
        await activity.upsert(_record(ActivityType.SIGN_UP))
        await activity.insert(_record(ActivityType.SIGN_IN, 1))

        assert await users.get_by_email("alice@x.com") is None
        assert await users.list_by_role(Role.USER) == []

    @pytest.mark.asyncio
    async def test_user_found_next_to_its_activity(self, users, activity):
        created = await users.create(User(email="alice@x.com", is_verified=True))
        await activity.upsert(_record(ActivityType.SIGN_UP, user_id=created.id))
        await activity.insert(_record(ActivityType.SIGN_IN, 1, user_id=created.id))

        assert (await users.get_by_email("alice@x.com")).id == created.id
        assert [u.id for u in await users.list_by_role(Role.USER)] == [created.id]

    @pytest.mark.asyncio
    async def test_activity_repeating_email_does_not_block_create(self, users, activity):
        await activity.insert(_record(ActivityType.SIGN_IN, 1))

        created = await users.create(User(email="alice@x.com"))
        assert created.email == "alice@x.com"

    @pytest.mark.asyncio
    async def test_duplicate_email_create(self, users):
        await users.create(User(email="alice@x.com"))

        with pytest.raises(ConflictError) as exc:
            await users.create(User(email="alice@x.com"))
        assert exc.value.message == DUPLICATE_EMAIL_MESSAGE

    @pytest.mark.asyncio
    async def test_update_to_taken_email(self, users):
        await users.create(User(email="taken@x.com"))
        user = await users.create(User(email="alice@x.com"))

        with pytest.raises(ConflictError):
            await users.update(user.id, {"email": "taken@x.com"})

    @pytest.mark.asyncio
    async def test_update_and_delete(self, users):
        user = await users.create(User(email="alice@x.com"))

        updated = await users.update(user.id, {"is_verified": True, "role": Role.ADMIN})
        assert updated.is_verified is True
        assert (await users.get_by_id(user.id)).role == Role.ADMIN

        assert await users.delete(user.id) is True
        assert await users.get_by_id(user.id) is None
        assert await users.delete(user.id) is False

    @pytest.mark.asyncio
    async def test_activity_ids_are_not_user_ids(self, users, activity):
        await activity.insert(_record(ActivityType.SIGN_IN, 1))

        assert await users.get_by_id("sign-in-alice-1") is None
        assert await users.update("sign-in-alice-1", {"is_verified": True}) is None
        assert await users.delete("sign-in-alice-1") is False
        assert await ActivityDocument.get("sign-in-alice-1") is not None


class TestActivityRepository:
    @pytest.mark.asyncio
    async def test_insert_rejects_taken_id(self, activity):
        await activity.insert(_record(ActivityType.SIGN_IN, 1, user_id="first"))

        with pytest.raises(DuplicateActivityError) as exc:
            await activity.insert(_record(ActivityType.SIGN_IN, 1, user_id="second"))
        assert exc.value.document_id == "sign-in-alice-1"
        assert (await ActivityDocument.get("sign-in-alice-1")).user_id == "first"

    @pytest.mark.asyncio
    async def test_upsert_overwrites_sign_up(self, activity):
        await activity.upsert(_record(ActivityType.SIGN_UP, user_id="u1"))
        await activity.upsert(_record(ActivityType.SIGN_UP, user_id="u2", email="alice@y.com"))

        docs = await ActivityDocument.find({"_id": "sign-up-alice"}).to_list()
        assert len(docs) == 1
        assert docs[0].user_id == "u2"
        assert docs[0].sequence_number is None

    @pytest.mark.asyncio
    async def test_sequence_numbers_per_type_and_username(self, activity):
        await activity.insert(_record(ActivityType.SIGN_IN, 1))
        await activity.insert(_record(ActivityType.SIGN_IN, 2))
        await activity.insert(_record(ActivityType.SIGN_OUT, 1))

        assert sorted(await activity.sequence_numbers(ActivityType.SIGN_IN, "alice")) == [1, 2]
        assert await activity.sequence_numbers(ActivityType.SIGN_OUT, "alice") == [1]
        assert await activity.sequence_numbers(ActivityType.SIGN_IN, "bob") == []

    @pytest.mark.asyncio
    async def test_logger_numbers_densely(self, activity):
        logger = ActivityLogger(activity)

        for _ in range(3):
            await logger.record("u1", "alice@x.com", ActivityType.SIGN_IN)

        assert sorted(await activity.sequence_numbers(ActivityType.SIGN_IN, "alice")) == [1, 2, 3]
        assert await ActivityDocument.get("sign-in-alice-3") is not None
