"""Tests for the SQLAlchemy annotation store (in-memory SQLite)."""

import pytest

from tixbridge.adapters.persistence import Database, SQLAlchemyAnnotationStore
from tixbridge.domain.value_objects import GLOBAL_OWNER, AnnotationKey, Collection


@pytest.fixture
async def database():
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.initialize()
    yield db
    await db.dispose()


@pytest.fixture
def store(database: Database) -> SQLAlchemyAnnotationStore:
    return SQLAlchemyAnnotationStore(database)


def bookmark(owner: str, event_id: str) -> AnnotationKey:
    return AnnotationKey(collection=Collection.BOOKMARKS, owner_id=owner, subject_id=event_id)


def tag(owner: str, listing_id: str, text: str) -> AnnotationKey:
    return AnnotationKey(
        collection=Collection.LISTING_TAGS, owner_id=owner, subject_id=listing_id, qualifier=text
    )


class TestInsertIfAbsent:
    """Duplicate-tolerant inserts."""

    @pytest.mark.asyncio
    async def test_first_insert_returns_true(self, store: SQLAlchemyAnnotationStore) -> None:
        assert await store.insert_if_absent(bookmark("u1", "E1")) is True

    @pytest.mark.asyncio
    async def test_duplicate_returns_false(self, store: SQLAlchemyAnnotationStore) -> None:
        """Test a duplicate key is reported, not raised."""
        await store.insert_if_absent(bookmark("u1", "E1"))

        assert await store.insert_if_absent(bookmark("u1", "E1")) is False
        assert len(await store.find(Collection.BOOKMARKS, "u1")) == 1

    @pytest.mark.asyncio
    async def test_key_parts_are_independent(self, store: SQLAlchemyAnnotationStore) -> None:
        """Test owner, collection and qualifier all distinguish records."""
        assert await store.insert_if_absent(bookmark("u1", "E1"))
        assert await store.insert_if_absent(bookmark("u2", "E1"))
        assert await store.insert_if_absent(tag("u1", "E1", "vip"))
        assert await store.insert_if_absent(tag("u1", "E1", "presale"))
        assert await store.insert_if_absent(
            AnnotationKey(collection=Collection.GLOBAL_VERIFICATION_MAPPED, subject_id="E1")
        )

    @pytest.mark.asyncio
    async def test_store_usable_after_duplicate(self, store: SQLAlchemyAnnotationStore) -> None:
        """Test the session is rolled back cleanly after a conflict."""
        await store.insert_if_absent(bookmark("u1", "E1"))
        await store.insert_if_absent(bookmark("u1", "E1"))

        assert await store.insert_if_absent(bookmark("u1", "E2")) is True


class TestInsertMany:
    @pytest.mark.asyncio
    async def test_counts_only_new_keys(self, store: SQLAlchemyAnnotationStore) -> None:
        """Test bulk insert skips existing and repeated keys."""
        await store.insert_if_absent(tag("u1", "L1", "vip"))

        inserted = await store.insert_many_if_absent(
            [tag("u1", "L1", "vip"), tag("u1", "L2", "vip"), tag("u1", "L3", "vip"), tag("u1", "L3", "vip")]
        )

        assert inserted == 2
        records = await store.find(Collection.LISTING_TAGS, "u1")
        assert sorted(r.subject_id for r in records) == ["L1", "L2", "L3"]

    @pytest.mark.asyncio
    async def test_empty_input(self, store: SQLAlchemyAnnotationStore) -> None:
        assert await store.insert_many_if_absent([]) == 0


class TestUpsert:
    @pytest.mark.asyncio
    async def test_creates_then_replaces(self, store: SQLAlchemyAnnotationStore) -> None:
        """Test upsert keeps one record with the latest value."""
        key = AnnotationKey(
            collection=Collection.MANUAL_CATEGORIES, owner_id="u1", subject_id="Floor A"
        )

        await store.upsert(key, "GA")
        await store.upsert(key, "Reserved")

        records = await store.find(Collection.MANUAL_CATEGORIES, "u1")
        assert len(records) == 1
        assert records[0].value == "Reserved"
        assert records[0].updated_at >= records[0].created_at

    @pytest.mark.asyncio
    async def test_json_values_round_trip(self, store: SQLAlchemyAnnotationStore) -> None:
        key = AnnotationKey(
            collection=Collection.AUTOPRICED_LISTINGS, owner_id="u1", subject_id="L1"
        )

        await store.upsert(key, False)

        records = await store.find(Collection.AUTOPRICED_LISTINGS, "u1")
        assert records[0].value is False


class TestDeleteAndFind:
    @pytest.mark.asyncio
    async def test_delete_reports_presence(self, store: SQLAlchemyAnnotationStore) -> None:
        await store.insert_if_absent(bookmark("u1", "E1"))

        assert await store.delete(bookmark("u1", "E1")) is True
        assert await store.delete(bookmark("u1", "E1")) is False

    @pytest.mark.asyncio
    async def test_find_filters_by_owner_and_subject(
        self, store: SQLAlchemyAnnotationStore
    ) -> None:
        """Test find scopes results to one owner and optionally one subject."""
        for listing_id, text in (("L1", "vip"), ("L1", "aisle"), ("L2", "vip")):
            await store.insert_if_absent(tag("u1", listing_id, text))
        await store.insert_if_absent(tag("u2", "L1", "other"))

        everything = await store.find(Collection.LISTING_TAGS, "u1")
        only_l1 = await store.find(Collection.LISTING_TAGS, "u1", subject_id="L1")

        assert len(everything) == 3
        assert [r.qualifier for r in only_l1] == ["vip", "aisle"]

    @pytest.mark.asyncio
    async def test_find_returns_oldest_first(self, store: SQLAlchemyAnnotationStore) -> None:
        for event_id in ("E3", "E1", "E2"):
            await store.insert_if_absent(bookmark("u1", event_id))

        records = await store.find(Collection.BOOKMARKS, "u1")

        assert [r.subject_id for r in records] == ["E3", "E1", "E2"]
        assert records[0].created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_global_owner(self, store: SQLAlchemyAnnotationStore) -> None:
        key = AnnotationKey(collection=Collection.STARRED_FESTIVAL_MAPPED, subject_id="L9")
        await store.insert_if_absent(key)

        records = await store.find(Collection.STARRED_FESTIVAL_MAPPED, GLOBAL_OWNER)

        assert [r.subject_id for r in records] == ["L9"]

    @pytest.mark.asyncio
    async def test_health_check(self, store: SQLAlchemyAnnotationStore) -> None:
        assert await store.health_check() is True
