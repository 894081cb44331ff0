"""
Personal RSS Generator

Turns a user's personalized programs into a podcast RSS 2.0 document
with the iTunes namespace, using feedgen.
https://feedgen.kiesow.be/

Generation is pure: no I/O, no database access.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from feedgen.feed import FeedGenerator

from postcast.config.logging import get_logger
from postcast.models.common import JST

logger = get_logger(__name__)

DEFAULT_MAX_EPISODES = 30
DEFAULT_AUTHOR_NAME = "Tech Post Cast"
DEFAULT_AUTHOR_EMAIL = "info@techpostcast.com"
FEED_CATEGORY = "Technology"
FEED_LANGUAGE = "ja"
ENCLOSURE_TYPE = "audio/mpeg"


@dataclass(frozen=True)
class RssUser:
    id: str
    display_name: str
    rss_token: Optional[str]

    @classmethod
    def from_model(cls, user) -> "RssUser":
        return cls(id=user.id, display_name=user.display_name, rss_token=user.rss_token)


@dataclass(frozen=True)
class RssProgram:
    """A program as published in the feed. `audio_duration` is in milliseconds."""
    id: str
    title: str
    audio_url: str
    audio_duration: int
    created_at: datetime
    image_url: Optional[str] = None

    @classmethod
    def from_model(cls, program) -> "RssProgram":
        return cls(
            id=program.id,
            title=program.title,
            audio_url=program.audio_url,
            audio_duration=program.audio_duration,
            created_at=program.created_at,
            image_url=program.image_url or None,
        )


@dataclass(frozen=True)
class RssGenerationOptions:
    base_url: str
    rss_url_prefix: str
    default_image_url: str
    max_episodes: Optional[int] = DEFAULT_MAX_EPISODES
    author_name: Optional[str] = None
    author_email: Optional[str] = None


@dataclass(frozen=True)
class RssGenerationResult:
    xml: str
    episode_count: int
    generated_at: datetime


def build_rss_url(rss_url_prefix: str, rss_token: str) -> str:
    return f"{rss_url_prefix}/u/{rss_token}/rss.xml"


def build_rss_path(rss_token: str) -> str:
    """Object storage key of a user's RSS file."""
    return f"u/{rss_token}/rss.xml"


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes from the database are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_title_date(value: datetime) -> str:
    return _as_utc(value).astimezone(JST).strftime("%Y/%m/%d")


def duration_seconds(duration_ms: int) -> int:
    return max(duration_ms, 0) // 1000


def _is_supported_image_url(url: Optional[str]) -> bool:
    # feedgen raises ValueError for itunes:image values not ending in .jpg/.png
    return bool(url) and url.endswith((".jpg", ".png"))


def select_episodes(programs: Sequence[RssProgram], max_episodes: int) -> List[RssProgram]:
    """Newest first, truncated to `max_episodes`."""
    ordered = sorted(programs, key=lambda p: _as_utc(p.created_at), reverse=True)
    return ordered[:max_episodes]


def generate_user_rss(
    user: RssUser,
    programs: Sequence[RssProgram],
    options: RssGenerationOptions,
) -> RssGenerationResult:
    """
    Build the personal podcast feed of one user.

    Args:
        user: Feed owner. `rss_token` addresses the feed URL.
        programs: Candidate episodes in any order.
        options: URLs, artwork and author settings.

    Returns:
        RssGenerationResult with the serialized XML, the number of
        episodes included and the generation timestamp.
    """
    generated_at = datetime.now(timezone.utc)
    max_episodes = options.max_episodes
    if max_episodes is None:
        max_episodes = DEFAULT_MAX_EPISODES
    episodes = select_episodes(programs, max_episodes)

    feed_url = build_rss_url(options.rss_url_prefix, user.rss_token or "")
    site_url = f"{options.rss_url_prefix}/u/{user.rss_token}"
    title = f"Tech Post Cast - {user.display_name}のパーソナルプログラム"
    description = (
        f"{user.display_name}さん専用のパーソナルプログラムフィードです。"
        "あなたの興味に合わせた技術記事を音声でお届けします。"
    )
    author = options.author_name or DEFAULT_AUTHOR_NAME
    author_email = options.author_email or DEFAULT_AUTHOR_EMAIL

    fg = FeedGenerator()
    fg.load_extension("podcast")

    fg.title(title)
    fg.description(description)
    # feedgen uses the last link as the channel <link>
    fg.link(href=feed_url, rel="self")
    fg.link(href=site_url, rel="alternate")
    fg.language(FEED_LANGUAGE)
    fg.copyright(author)
    fg.generator(f"{title} Feed Generator")
    fg.category(term=FEED_CATEGORY)
    fg.pubDate(generated_at)
    fg.lastBuildDate(generated_at)

    fg.podcast.itunes_author(author)
    fg.podcast.itunes_summary(description)
    fg.podcast.itunes_owner(name=author, email=author_email)
    fg.podcast.itunes_category(FEED_CATEGORY)
    fg.podcast.itunes_explicit("no")

    if options.default_image_url:
        fg.image(url=options.default_image_url, title=title, link=site_url)
    if _is_supported_image_url(options.default_image_url):
        fg.podcast.itunes_image(options.default_image_url)

    for program in episodes:
        program_url = f"{options.base_url}/programs/{program.id}"
        published_at = _as_utc(program.created_at)

        fe = fg.add_entry(order="append")
        fe.id(program.id)
        fe.guid(program.id, permalink=False)
        fe.title(f"{format_title_date(published_at)} {program.title}")
        fe.link(href=program_url)
        fe.description(f"今回の紹介記事など詳しくはこちら。\n\n{program_url}")
        fe.pubDate(published_at)
        fe.enclosure(url=program.audio_url, length="0", type=ENCLOSURE_TYPE)

        fe.podcast.itunes_author(author)
        fe.podcast.itunes_duration(duration_seconds(program.audio_duration))
        episode_image = program.image_url
        if not _is_supported_image_url(episode_image):
            episode_image = options.default_image_url
        if _is_supported_image_url(episode_image):
            fe.podcast.itunes_image(episode_image)

    xml = fg.rss_str(pretty=True).decode("utf-8")

    logger.debug(
        "Generated personal RSS",
        user_id=user.id,
        episode_count=len(episodes),
        candidate_count=len(programs),
    )

    return RssGenerationResult(
        xml=xml,
        episode_count=len(episodes),
        generated_at=generated_at,
    )


def validate_rss_generation(user: RssUser, programs: Sequence[RssProgram]) -> List[str]:
    """
    List the reasons a feed for `user` would be incomplete.

    Never raises. An empty list means the inputs are publishable.
    """
    errors: List[str] = []

    if not user.rss_token:
        errors.append("RSS token is required")

    if not user.display_name:
        errors.append("User display name is required")

    if len(programs) == 0:
        errors.append("At least one program is required")

    for program in programs:
        if not program.audio_url:
            errors.append(f"Program {program.id} is missing audio URL")
        if program.audio_duration <= 0:
            errors.append(f"Program {program.id} has invalid audio duration")

    return errors
