"""Tests for the Qiita API client."""

from datetime import date

import httpx
import pytest

from postcast.errors import QiitaApiError
from postcast.services.qiita import QiitaClient, build_search_query

ITEM = {
    "id": "c686397e4a0f4f11683d",
    "title": "FastAPI入門",
    "url": "https://qiita.com/alice/items/c686397e4a0f4f11683d",
    "created_at": "2024-06-01T10:00:00+09:00",
    "updated_at": "2024-06-02T10:00:00+09:00",
    "likes_count": 42,
    "stocks_count": 7,
    "comments_count": 1,
    "tags": [{"name": "Python", "versions": []}, {"name": "FastAPI", "versions": []}],
    "user": {"id": "alice", "name": "Alice"},
    "private": False,
}


def client_with(handler):
    return QiitaClient(access_token="qiita-token", transport=httpx.MockTransport(handler))


def test_build_search_query():
    query = build_search_query(["alice", "bob"], ["python", "go"], date(2024, 1, 1))

    assert query == "user:alice,bob tag:python,go created:>=2024-01-01"


def test_build_search_query_skips_empty_parts():
    assert build_search_query(tags=["rust"]) == "tag:rust"
    assert build_search_query() == ""


async def test_find_posts_sends_query_and_reads_total():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[ITEM], headers={"Total-Count": "123"})

    result = await client_with(handler).find_posts(
        authors=["alice"], tags=["python"], page=2, per_page=10
    )

    request = requests[0]
    assert request.url.path == "/api/v2/items"
    assert request.url.params["query"] == "user:alice tag:python"
    assert request.url.params["page"] == "2"
    assert request.url.params["per_page"] == "10"
    assert request.headers["Authorization"] == "Bearer qiita-token"

    assert result.total_count == 123
    post = result.posts[0]
    assert post.title == "FastAPI入門"
    assert post.tags == ["Python", "FastAPI"]
    assert post.author_id == "alice"
    assert post.likes_count == 42


async def test_per_page_is_capped():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[])

    result = await client_with(handler).find_posts(tags=["python"], per_page=500)

    assert requests[0].url.params["per_page"] == "100"
    assert result.per_page == 100
    assert result.total_count == 0


async def test_error_status_raises():
    def handler(request):
        return httpx.Response(403, json={"message": "Rate limit exceeded"})

    with pytest.raises(QiitaApiError) as exc_info:
        await client_with(handler).find_posts(tags=["python"])

    assert exc_info.value.context["status_code"] == 403
    assert exc_info.value.status_code == 502
