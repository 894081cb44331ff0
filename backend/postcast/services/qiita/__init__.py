"""
Qiita API integration.
"""

from postcast.services.qiita.client import (
    QiitaClient,
    QiitaPost,
    QiitaPostsSearchResult,
    build_search_query,
    qiita_client,
)

__all__ = [
    "QiitaClient",
    "QiitaPost",
    "QiitaPostsSearchResult",
    "build_search_query",
    "qiita_client",
]
