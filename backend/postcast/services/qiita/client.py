"""
Qiita API Client

Searches Qiita posts through the v2 items endpoint using httpx.
API reference: https://qiita.com/api/v2/docs
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from postcast.config.logging import get_logger
from postcast.config.settings import settings
from postcast.errors import QiitaApiError

logger = get_logger(__name__)

QIITA_API_BASE_URL = "https://qiita.com/api/v2"
MAX_PER_PAGE = 100


@dataclass
class QiitaPost:
    id: str
    title: str
    url: str
    created_at: datetime
    updated_at: datetime
    likes_count: int = 0
    stocks_count: int = 0
    comments_count: int = 0
    tags: List[str] = field(default_factory=list)
    author_id: str = ""
    author_name: str = ""
    private: bool = False

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "QiitaPost":
        user = item.get("user") or {}
        return cls(
            id=item["id"],
            title=item.get("title", ""),
            url=item.get("url", ""),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item.get("updated_at") or item["created_at"]),
            likes_count=item.get("likes_count", 0),
            stocks_count=item.get("stocks_count", 0),
            comments_count=item.get("comments_count", 0),
            tags=[tag.get("name", "") for tag in item.get("tags") or []],
            author_id=user.get("id", ""),
            author_name=user.get("name") or user.get("id", ""),
            private=item.get("private", False),
        )


@dataclass
class QiitaPostsSearchResult:
    posts: List[QiitaPost]
    total_count: int
    page: int
    per_page: int


def build_search_query(
    authors: Optional[Sequence[str]] = None,
    tags: Optional[Sequence[str]] = None,
    min_published_at: Optional[date] = None,
) -> str:
    """
    Build a Qiita search query.

    Multiple authors or tags are comma-grouped, which Qiita treats as OR:
        user:alice,bob tag:python,go created:>=2024-01-01
    """
    parts = []
    if authors:
        parts.append(f"user:{','.join(authors)}")
    if tags:
        parts.append(f"tag:{','.join(tags)}")
    if min_published_at:
        parts.append(f"created:>={min_published_at.strftime('%Y-%m-%d')}")
    return " ".join(parts)


class QiitaClient:
    """Qiita API v2 client with retries on transport errors."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._access_token = access_token if access_token is not None else settings.qiita_api_access_token
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _get_items(self, params: Dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=QIITA_API_BASE_URL,
            timeout=settings.qiita_api_timeout,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            return await client.get("/items", params=params)

    async def find_posts(
        self,
        authors: Optional[Sequence[str]] = None,
        tags: Optional[Sequence[str]] = None,
        min_published_at: Optional[date] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> QiitaPostsSearchResult:
        """
        Search posts matching the given authors, tags and minimum date.

        Raises:
            QiitaApiError: On an error response, or when the API is
                unreachable after retries.
        """
        per_page = min(per_page, MAX_PER_PAGE)
        params = {
            "query": build_search_query(authors, tags, min_published_at),
            "page": page,
            "per_page": per_page,
        }

        try:
            response = await self._get_items(params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Qiita API returned an error",
                status_code=e.response.status_code,
                query=params["query"],
            )
            raise QiitaApiError(
                f"Qiita API error: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Qiita API request failed", query=params["query"], error=str(e))
            raise QiitaApiError(f"Qiita API request failed: {e}") from e

        items = response.json()
        total_count = int(response.headers.get("Total-Count", len(items)))

        logger.debug(
            "Fetched Qiita posts",
            query=params["query"],
            page=page,
            count=len(items),
            total_count=total_count,
        )

        return QiitaPostsSearchResult(
            posts=[QiitaPost.from_api(item) for item in items],
            total_count=total_count,
            page=page,
            per_page=per_page,
        )


qiita_client = QiitaClient()
