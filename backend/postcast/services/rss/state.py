"""
Personal RSS State

The (rss_enabled, rss_token) column pair on AppUser, read as a tagged
union so "enabled without a token" cannot be represented.
"""

from dataclasses import dataclass
from typing import Union

from postcast.models import AppUser
from postcast.services.rss.generator import build_rss_path, build_rss_url


@dataclass(frozen=True)
class RssDisabled:
    pass


@dataclass(frozen=True)
class RssEnabled:
    token: str

    @property
    def path(self) -> str:
        return build_rss_path(self.token)

    def url(self, rss_url_prefix: str) -> str:
        return build_rss_url(rss_url_prefix, self.token)


RssState = Union[RssDisabled, RssEnabled]


def rss_state_of(user: AppUser) -> RssState:
    """An enabled flag without a token is treated as disabled."""
    if user.rss_enabled and user.rss_token:
        return RssEnabled(token=user.rss_token)
    return RssDisabled()
