"""HTTP-level tests: routing, auth and error mapping."""

import json

import httpx
import pytest

from postcast.api.middleware import get_current_user_id
from postcast.config import settings
from postcast.db import get_db_session
from postcast.main import app
from postcast.repositories import app_users_repository
from tests.factories import BASE_TIME, signed_webhook_headers

USER_ID = "user_api"


@pytest.fixture
async def client(db):
    async def override_db():
        yield db

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_current_user_id] = lambda: USER_ID

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def pro_user(factory):
    user = await factory.user(USER_ID)
    plan = await factory.plan(max_feeds=1, max_tags=2, max_authors=2)
    await factory.subscription(user, plan)
    return user


async def test_health():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_missing_bearer_token_is_rejected():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/v1/personalized-feeds")

    assert response.status_code == 401


async def test_invalid_bearer_token_is_rejected():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get(
            "/api/v1/user-settings", headers={"Authorization": "Bearer not-a-jwt"}
        )

    assert response.status_code == 401


async def test_create_and_fetch_feed(client, pro_user):
    response = await client.post(
        "/api/v1/personalized-feeds",
        json={
            "name": "Python news",
            "filter_groups": [
                {
                    "logic_type": "AND",
                    "tag_filters": [{"tag_name": "python"}],
                    "date_range_filters": [{"days_ago": 7}],
                }
            ],
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Python news"
    group = body["filter_groups"][0]
    assert group["logic_type"] == "AND"
    assert [f["tag_name"] for f in group["tag_filters"]] == ["python"]

    response = await client.get(f"/api/v1/personalized-feeds/{body['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == body["id"]

    response = await client.get("/api/v1/personalized-feeds")
    assert response.json()["total"] == 1


async def test_quota_violation_is_forbidden(client, pro_user, factory):
    await factory.feed(pro_user)

    response = await client.post("/api/v1/personalized-feeds", json={"name": "Second"})

    assert response.status_code == 403
    assert response.json()["error_code"] == "FEED_COUNT_EXCEEDED"


async def test_second_date_range_is_bad_request(client, pro_user):
    response = await client.post(
        "/api/v1/personalized-feeds",
        json={
            "name": "Two ranges",
            "filter_groups": [{"date_range_filters": [{"days_ago": 7}, {"days_ago": 30}]}],
        },
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "FILTER_VALIDATION_ERROR"


async def test_unknown_feed_is_not_found(client, pro_user):
    response = await client.get("/api/v1/personalized-feeds/missing")

    assert response.status_code == 404
    assert response.json()["error_code"] == "FEED_NOT_FOUND"


async def test_delete_feed(client, pro_user, factory):
    feed = await factory.feed(pro_user)

    response = await client.delete(f"/api/v1/personalized-feeds/{feed.id}")

    assert response.status_code == 200
    assert response.json() == {"id": feed.id, "deleted": True}


async def test_attempt_statistics(client, pro_user, factory):
    feed = await factory.feed(pro_user)
    await factory.attempt(pro_user, feed, "SUCCESS", BASE_TIME)
    await factory.attempt(pro_user, feed, "FAILED", BASE_TIME)

    response = await client.get(f"/api/v1/personalized-feeds/{feed.id}/attempts/statistics")

    assert response.status_code == 200
    assert response.json()["success_rate"] == 50.0


async def test_subscription_reports_usage(client, pro_user, factory):
    await factory.feed(pro_user)

    response = await client.get("/api/v1/subscription")

    assert response.status_code == 200
    body = response.json()
    assert body["usage"]["feeds"] == 1
    assert body["limits"]["max_feeds"] == 1
    assert body["show_upgrade_button"] is False


async def test_invalid_webhook_url_is_bad_request(client, pro_user):
    response = await client.patch(
        "/api/v1/user-settings", json={"slack_webhook_url": "https://example.com/hook"}
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_SLACK_WEBHOOK_URL"


async def test_regenerate_token_without_rss(client, pro_user):
    response = await client.post("/api/v1/user-settings/rss/regenerate-token")

    assert response.status_code == 400
    assert response.json()["error_code"] == "RSS_NOT_ENABLED"


async def test_dashboard_stats(client, pro_user, factory):
    feed = await factory.feed(pro_user)
    await factory.program(pro_user, feed, audio_duration=45 * 60 * 1000)

    response = await client.get("/api/v1/dashboard/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["active_feeds_count"] == 1
    assert body["total_program_duration"] == "45m"


async def test_dashboard_program_detail(client, pro_user, factory):
    feed = await factory.feed(pro_user, name="Python news")
    program = await factory.program(
        pro_user, feed, chapters=[{"title": "Intro", "start_time": 0, "end_time": 15000}]
    )
    await factory.program_post(program, 0, post_id="c686397e4a0f4f11683d", title="Async tips")

    listing = await client.get("/api/v1/dashboard/personalized-programs")
    detail = await client.get(f"/api/v1/dashboard/personalized-programs/{program.id}")

    assert listing.status_code == 200
    assert listing.json()["programs"][0]["posts_count"] == 1
    assert listing.json()["has_next"] is False
    assert detail.status_code == 200
    body = detail.json()
    assert body["feed_name"] == "Python news"
    assert body["chapters"] == [{"title": "Intro", "start_time": 0, "end_time": 15000}]
    assert body["posts"][0]["id"] == "c686397e4a0f4f11683d"


async def test_dashboard_unknown_program_is_not_found(client, pro_user):
    response = await client.get("/api/v1/dashboard/personalized-programs/program-missing")

    assert response.status_code == 404
    assert response.json()["error_code"] == "PROGRAM_NOT_FOUND"


async def test_dashboard_generation_history(client, pro_user, factory):
    feed = await factory.feed(pro_user, name="Daily")
    program = await factory.program(pro_user, feed, title="Episode 1")
    await factory.attempt(pro_user, feed, "SUCCESS", BASE_TIME, program_id=program.id)

    response = await client.get(
        "/api/v1/dashboard/program-generation-history", params={"feed_id": feed.id}
    )

    assert response.status_code == 200
    item = response.json()["history"][0]
    assert item["feed"] == {"id": feed.id, "name": "Daily"}
    assert item["program"] == {"id": program.id, "title": "Episode 1"}


async def test_clerk_webhook_provisions_user(client, db, factory):
    await factory.plan(settings.free_plan_id, name="Free", price=0)
    payload = json.dumps(
        {
            "type": "user.created",
            "data": {"id": "user_signup", "first_name": "Ken", "email_addresses": []},
        }
    )

    response = await client.post(
        "/api/v1/webhooks/clerk",
        content=payload,
        headers={"Content-Type": "application/json", **signed_webhook_headers(payload)},
    )

    assert response.status_code == 200
    assert response.json() == {"received": True, "event_type": "user.created"}
    user = await app_users_repository.find_by_id(db, "user_signup")
    assert user.display_name == "Ken"


async def test_clerk_webhook_with_bad_signature_is_unauthorized(client):
    payload = json.dumps({"type": "user.created", "data": {"id": "user_signup"}})
    headers = signed_webhook_headers(payload)
    headers["svix-signature"] = "v1,c2lnbmF0dXJlLW9mLXNvbWV0aGluZy1lbHNl"

    response = await client.post("/api/v1/webhooks/clerk", content=payload, headers=headers)

    assert response.status_code == 401
    assert response.json()["error_code"] == "INVALID_WEBHOOK_SIGNATURE"
