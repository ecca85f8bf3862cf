"""Tests for MarkersUseCase."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from tixbridge.application.use_cases import MarkersUseCase
from tixbridge.domain.value_objects import (
    GLOBAL_DATE_MARKERS,
    GLOBAL_FLAG_MARKERS,
    GLOBAL_OWNER,
    USER_DATE_MARKERS,
    USER_FLAG_MARKERS,
    AnnotationKey,
    AnnotationRecord,
)

USER_MAPPED = USER_FLAG_MARKERS[0]
GLOBAL_STARRED_MAPPED = next(m for m in GLOBAL_FLAG_MARKERS if m.slug.startswith("starred"))
UNVERIFICATION = next(m for m in USER_DATE_MARKERS if m.slug == "unverification-dates")
GLOBAL_STRATEGY_DATES = GLOBAL_DATE_MARKERS[0]


@pytest.fixture
def mock_store() -> AsyncMock:
    store = AsyncMock()
    store.insert_if_absent = AsyncMock(return_value=True)
    store.delete = AsyncMock(return_value=True)
    store.upsert = AsyncMock(return_value=None)
    store.find = AsyncMock(return_value=[])
    return store


@pytest.fixture
def mock_broadcaster() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def use_case(mock_store: AsyncMock, mock_broadcaster: AsyncMock) -> MarkersUseCase:
    return MarkersUseCase(mock_store, mock_broadcaster)


class TestFlagMarkers:
    @pytest.mark.asyncio
    async def test_user_flag_includes_user_id(
        self, use_case: MarkersUseCase, mock_store: AsyncMock, mock_broadcaster: AsyncMock
    ) -> None:
        """Test per-user markers are keyed and broadcast with the owner."""
        assert await use_case.add_flag(USER_MAPPED, "L1", owner_id="u1") is True

        key = mock_store.insert_if_absent.await_args.args[0]
        assert key == AnnotationKey(collection=USER_MAPPED.collection, owner_id="u1", subject_id="L1")
        event = mock_broadcaster.publish.await_args.args[0]
        assert event.name == "verification-mapped-added"
        assert event.data == {"listingId": "L1", "userId": "u1"}

    @pytest.mark.asyncio
    async def test_global_flag_has_no_user(
        self, use_case: MarkersUseCase, mock_store: AsyncMock, mock_broadcaster: AsyncMock
    ) -> None:
        await use_case.add_flag(GLOBAL_STARRED_MAPPED, "L1")

        assert mock_store.insert_if_absent.await_args.args[0].owner_id == GLOBAL_OWNER
        event = mock_broadcaster.publish.await_args.args[0]
        assert event.name == "starred-festival-mapped-added"
        assert event.data == {"listingId": "L1"}

    @pytest.mark.asyncio
    async def test_unchanged_flag_not_broadcast(
        self, use_case: MarkersUseCase, mock_store: AsyncMock, mock_broadcaster: AsyncMock
    ) -> None:
        mock_store.insert_if_absent.return_value = False
        mock_store.delete.return_value = False

        assert await use_case.add_flag(USER_MAPPED, "L1", owner_id="u1") is False
        assert await use_case.remove_flag(USER_MAPPED, "L1", owner_id="u1") is False
        mock_broadcaster.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remove_flag_broadcasts(
        self, use_case: MarkersUseCase, mock_broadcaster: AsyncMock
    ) -> None:
        await use_case.remove_flag(GLOBAL_FLAG_MARKERS[0], "L1")

        assert mock_broadcaster.publish.await_args.args[0].name == "global-verification-mapped-removed"

    @pytest.mark.asyncio
    async def test_list_flags(self, use_case: MarkersUseCase, mock_store: AsyncMock) -> None:
        mock_store.find.return_value = [
            AnnotationRecord(key=AnnotationKey(collection=USER_MAPPED.collection, owner_id="u1", subject_id="L7"))
        ]

        assert await use_case.list_flags(USER_MAPPED, owner_id="u1") == ["L7"]
        mock_store.find.assert_awaited_once_with(USER_MAPPED.collection, "u1")


class TestDateMarkers:
    @pytest.mark.asyncio
    async def test_set_date_stores_iso(
        self, use_case: MarkersUseCase, mock_store: AsyncMock, mock_broadcaster: AsyncMock
    ) -> None:
        """Test dates are stored as ISO strings and broadcast with their field name."""
        when = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

        value = await use_case.set_date(GLOBAL_STRATEGY_DATES, "L1", when)

        assert value == "2025-03-01T12:00:00+00:00"
        assert mock_store.upsert.await_args.args[1] == value
        event = mock_broadcaster.publish.await_args.args[0]
        assert event.name == "global-verification-strategy-date-updated"
        assert event.data == {"listingId": "L1", "strategyDate": value}

    @pytest.mark.asyncio
    async def test_silent_date_markers(
        self, use_case: MarkersUseCase, mock_broadcaster: AsyncMock
    ) -> None:
        """Test unverification dates are never broadcast."""
        await use_case.set_date(UNVERIFICATION, "L1", datetime(2025, 3, 1, tzinfo=UTC), owner_id="u1")
        await use_case.remove_date(UNVERIFICATION, "L1", owner_id="u1")

        mock_broadcaster.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_dates(self, use_case: MarkersUseCase, mock_store: AsyncMock) -> None:
        mock_store.find.return_value = [
            AnnotationRecord(
                key=AnnotationKey(collection=UNVERIFICATION.collection, owner_id="u1", subject_id="L1"),
                value="2025-03-01T00:00:00+00:00",
            )
        ]

        assert await use_case.list_dates(UNVERIFICATION, owner_id="u1") == {
            "L1": "2025-03-01T00:00:00+00:00"
        }
