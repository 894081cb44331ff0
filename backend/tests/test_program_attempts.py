"""Tests for program attempt history and statistics."""

from datetime import timedelta

import pytest

from postcast.errors import FeedNotFoundError
from postcast.services.programs import ProgramAttemptsPage, program_attempts_service, success_rate
from tests.factories import BASE_TIME


@pytest.fixture
async def owned_feed(factory):
    user = await factory.user()
    feed = await factory.feed(user)
    return user, feed


def test_success_rate():
    assert success_rate(0, 0) == 0.0
    assert success_rate(1, 3) == 33.33
    assert success_rate(3, 3) == 100.0


def test_page_navigation():
    page = ProgramAttemptsPage(total_count=45, page=2, limit=20)

    assert page.total_pages == 3
    assert page.has_next_page is True
    assert page.has_previous_page is True
    assert ProgramAttemptsPage(total_count=0).total_pages == 0


async def test_attempts_are_newest_first_and_paged(db, factory, owned_feed):
    user, feed = owned_feed
    for hour in range(5):
        await factory.attempt(user, feed, "SUCCESS", BASE_TIME + timedelta(hours=hour))

    page = await program_attempts_service.find_by_feed_id(db, user.id, feed.id, page=1, limit=2)

    assert page.total_count == 5
    assert page.total_pages == 3
    assert [a.created_at.hour for a in page.attempts] == [4, 3]


async def test_statistics(db, factory, owned_feed):
    user, feed = owned_feed
    await factory.attempt(user, feed, "SUCCESS", BASE_TIME)
    await factory.attempt(user, feed, "SUCCESS", BASE_TIME + timedelta(days=1))
    await factory.attempt(user, feed, "SKIPPED", BASE_TIME + timedelta(days=2), reason="NOT_ENOUGH_POSTS")
    await factory.attempt(user, feed, "FAILED", BASE_TIME + timedelta(days=3), reason="TTS_ERROR")

    stats = await program_attempts_service.get_statistics(db, user.id, feed.id)

    assert stats.total_attempts == 4
    assert stats.success_count == 2
    assert stats.skipped_count == 1
    assert stats.failed_count == 1
    assert stats.success_rate == 50.0
    assert stats.last_attempt_date.date() == (BASE_TIME + timedelta(days=3)).date()
    assert stats.last_success_date.date() == (BASE_TIME + timedelta(days=1)).date()


async def test_statistics_without_attempts(db, owned_feed):
    user, feed = owned_feed

    stats = await program_attempts_service.get_statistics(db, user.id, feed.id)

    assert stats.total_attempts == 0
    assert stats.success_rate == 0.0
    assert stats.last_attempt_date is None
    assert stats.last_success_date is None


async def test_inactive_owned_feed_is_readable(db, factory):
    user = await factory.user()
    feed = await factory.feed(user, is_active=False)
    await factory.attempt(user, feed, "FAILED", BASE_TIME)

    page = await program_attempts_service.find_by_feed_id(db, user.id, feed.id)

    assert page.total_count == 1


async def test_foreign_feed_is_not_found(db, factory, owned_feed):
    _, feed = owned_feed
    other = await factory.user()

    with pytest.raises(FeedNotFoundError):
        await program_attempts_service.find_by_feed_id(db, other.id, feed.id)
    with pytest.raises(FeedNotFoundError):
        await program_attempts_service.get_statistics(db, other.id, feed.id)


async def test_unknown_feed_is_not_found(db, owned_feed):
    user, _ = owned_feed

    with pytest.raises(FeedNotFoundError):
        await program_attempts_service.get_statistics(db, user.id, "missing-feed")
