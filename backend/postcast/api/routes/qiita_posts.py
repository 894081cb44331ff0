"""
Qiita Posts API Routes

Preview search used while configuring a feed's filters.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from postcast.api.middleware import get_current_user_id
from postcast.api.schemas import QiitaPostResponse, QiitaPostsSearchResponse
from postcast.config.logging import get_logger
from postcast.services.qiita import qiita_client

logger = get_logger(__name__)

router = APIRouter(prefix="/qiita-posts", tags=["Qiita Posts"])


@router.get("", response_model=QiitaPostsSearchResponse)
async def search_qiita_posts(
    authors: Optional[List[str]] = Query(None),
    tags: Optional[List[str]] = Query(None),
    min_published_at: Optional[date] = Query(None),
    page: int = Query(1, ge=1, le=100),
    per_page: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
) -> QiitaPostsSearchResponse:
    logger.debug(
        "Searching Qiita posts",
        user_id=user_id,
        authors=authors,
        tags=tags,
        min_published_at=str(min_published_at) if min_published_at else None,
    )
    result = await qiita_client.find_posts(
        authors=authors,
        tags=tags,
        min_published_at=min_published_at,
        page=page,
        per_page=per_page,
    )
    return QiitaPostsSearchResponse(
        posts=[QiitaPostResponse.model_validate(post) for post in result.posts],
        total_count=result.total_count,
        page=result.page,
        per_page=result.per_page,
    )
