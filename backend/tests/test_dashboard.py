"""Tests for dashboard statistics, program listings and generation history."""

from datetime import datetime, timedelta, timezone

import pytest

from postcast.errors import FeedNotFoundError, ProgramNotFoundError, UserNotFoundError
from postcast.services.dashboard import (
    ProgramsPage,
    dashboard_service,
    format_total_duration,
    jst_month_range,
)
from tests.factories import BASE_TIME

MINUTE_MS = 60 * 1000


@pytest.mark.parametrize(
    "duration_ms, expected",
    [
        (0, "0m"),
        (45 * MINUTE_MS, "45m"),
        (59 * MINUTE_MS + 59999, "59m"),
        (60 * MINUTE_MS, "1h"),
        (89 * MINUTE_MS, "1h"),
        (90 * MINUTE_MS, "1.5h"),
        (12 * 60 * MINUTE_MS + 45 * MINUTE_MS, "12.5h"),
    ],
)
def test_format_total_duration(duration_ms, expected):
    assert format_total_duration(duration_ms) == expected


def test_jst_month_range():
    # 2024-05-31 16:00 UTC is already June 1st in Japan
    start, end = jst_month_range(datetime(2024, 5, 31, 16, 0, tzinfo=timezone.utc))

    assert start == datetime(2024, 5, 31, 15, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 6, 30, 15, 0, tzinfo=timezone.utc)


def test_jst_month_range_rolls_over_the_year():
    start, end = jst_month_range(datetime(2024, 12, 20, tzinfo=timezone.utc))

    assert start == datetime(2024, 11, 30, 15, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 12, 31, 15, 0, tzinfo=timezone.utc)


def test_programs_page_has_next():
    assert ProgramsPage(total_count=11, limit=10, offset=0).has_next is True
    assert ProgramsPage(total_count=10, limit=10, offset=0).has_next is False


async def test_stats(db, factory):
    user = await factory.user()
    feed = await factory.feed(user)
    await factory.feed(user)
    await factory.feed(user, is_active=False)

    half_hour = 30 * MINUTE_MS
    # Inside June in Japan time
    await factory.program(user, feed, created_at=BASE_TIME, audio_duration=half_hour)
    await factory.program(
        user, feed, created_at=datetime(2024, 5, 31, 16, 0, tzinfo=timezone.utc),
        audio_duration=half_hour,
    )
    # May and July in Japan time
    await factory.program(
        user, feed, created_at=datetime(2024, 5, 31, 14, 0, tzinfo=timezone.utc),
        audio_duration=half_hour,
    )
    await factory.program(
        user, feed, created_at=datetime(2024, 6, 30, 16, 0, tzinfo=timezone.utc),
        audio_duration=half_hour,
    )
    # No audio file yet, not counted towards the duration
    await factory.program(
        user, feed, created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        audio_url="", audio_duration=60 * MINUTE_MS,
    )

    stats = await dashboard_service.get_stats(
        db, user.id, now=datetime(2024, 6, 15, tzinfo=timezone.utc)
    )

    assert stats.active_feeds_count == 2
    assert stats.monthly_episodes_count == 2
    assert stats.total_program_duration == "2h"


async def test_stats_for_new_user(db, factory):
    user = await factory.user()

    stats = await dashboard_service.get_stats(db, user.id)

    assert stats.active_feeds_count == 0
    assert stats.monthly_episodes_count == 0
    assert stats.total_program_duration == "0m"


async def test_stats_require_existing_user(db):
    with pytest.raises(UserNotFoundError):
        await dashboard_service.get_stats(db, "user_missing")


async def test_programs_are_listed_newest_first_with_feed_and_post_count(db, factory):
    user = await factory.user()
    feed = await factory.feed(user, name="Python news")
    oldest = await factory.program(user, feed, title="oldest", is_expired=True)
    await factory.program(user, feed, title="middle")
    newest = await factory.program(user, feed, title="newest")
    await factory.program_post(newest, 0)
    await factory.program_post(newest, 1)

    other = await factory.user()
    await factory.program(other, await factory.feed(other), title="someone else's")

    page = await dashboard_service.get_personalized_programs(db, user.id, limit=2)

    assert page.total_count == 3
    assert page.has_next is True
    assert [row.program.title for row in page.programs] == ["newest", "middle"]
    assert page.programs[0].feed_name == "Python news"
    assert page.programs[0].posts_count == 2
    assert page.programs[1].posts_count == 0

    last = await dashboard_service.get_personalized_programs(db, user.id, limit=2, offset=2)

    assert last.has_next is False
    assert [row.program.id for row in last.programs] == [oldest.id]


async def test_program_detail_lists_posts_in_order(db, factory):
    user = await factory.user()
    feed = await factory.feed(user)
    program = await factory.program(
        user,
        feed,
        chapters=[{"title": "Intro", "start_time": 0, "end_time": 15000}],
    )
    await factory.program_post(program, 2, title="third")
    await factory.program_post(program, 0, title="first")
    await factory.program_post(program, 1, title="second")

    detail = await dashboard_service.get_program_detail(db, user.id, program.id)

    assert detail.program.id == program.id
    assert detail.feed.id == feed.id
    assert [post.title for post in detail.posts] == ["first", "second", "third"]
    assert detail.program.chapters[0]["title"] == "Intro"


async def test_program_detail_of_another_user_is_not_found(db, factory):
    owner = await factory.user()
    program = await factory.program(owner, await factory.feed(owner))
    intruder = await factory.user()

    with pytest.raises(ProgramNotFoundError) as exc_info:
        await dashboard_service.get_program_detail(db, intruder.id, program.id)

    assert exc_info.value.status_code == 404
    assert exc_info.value.error_code == "PROGRAM_NOT_FOUND"


async def test_generation_history_joins_feed_and_program(db, factory):
    user = await factory.user()
    feed = await factory.feed(user, name="Daily")
    other_feed = await factory.feed(user, name="Weekly", is_active=False)
    program = await factory.program(user, feed, title="Episode 1")

    await factory.attempt(user, feed, "SUCCESS", BASE_TIME, program_id=program.id)
    await factory.attempt(
        user, feed, "SKIPPED", BASE_TIME + timedelta(days=1), reason="NOT_ENOUGH_POSTS"
    )
    await factory.attempt(user, other_feed, "FAILED", BASE_TIME + timedelta(days=2))

    page = await dashboard_service.get_generation_history(db, user.id)

    assert page.total_count == 3
    assert page.has_next is False
    assert [row.attempt.status for row in page.history] == ["FAILED", "SKIPPED", "SUCCESS"]
    assert [row.feed_name for row in page.history] == ["Weekly", "Daily", "Daily"]
    assert [row.program_title for row in page.history] == [None, None, "Episode 1"]


async def test_generation_history_for_one_feed(db, factory):
    user = await factory.user()
    feed = await factory.feed(user)
    inactive = await factory.feed(user, is_active=False)
    await factory.attempt(user, feed, "SUCCESS", BASE_TIME)
    await factory.attempt(user, inactive, "FAILED", BASE_TIME)
    await factory.attempt(user, inactive, "SKIPPED", BASE_TIME + timedelta(days=1))

    page = await dashboard_service.get_generation_history(
        db, user.id, feed_id=inactive.id, limit=1
    )

    assert page.total_count == 2
    assert page.has_next is True
    assert page.history[0].attempt.status == "SKIPPED"


async def test_generation_history_of_foreign_feed_is_not_found(db, factory):
    owner = await factory.user()
    feed = await factory.feed(owner)
    intruder = await factory.user()

    with pytest.raises(FeedNotFoundError):
        await dashboard_service.get_generation_history(db, intruder.id, feed_id=feed.id)

    with pytest.raises(FeedNotFoundError):
        await dashboard_service.get_generation_history(db, intruder.id, feed_id="feed-missing")
