"""Tests for personal RSS generation."""

import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone

import pytest

from postcast.services.rss import (
    RssGenerationOptions,
    RssProgram,
    RssUser,
    build_rss_path,
    build_rss_url,
    generate_user_rss,
    validate_rss_generation,
)
from postcast.services.rss.generator import duration_seconds, format_title_date

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"
ATOM_NS = "http://www.w3.org/2005/Atom"
NS = {"itunes": ITUNES_NS, "atom": ATOM_NS}

BASE = datetime(2024, 6, 1, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def user():
    return RssUser(id="user_1", display_name="テストユーザー", rss_token="token-abcdef-123456")


@pytest.fixture
def options():
    return RssGenerationOptions(
        base_url="https://techpostcast.com",
        rss_url_prefix="https://rss.techpostcast.com",
        default_image_url="https://techpostcast.com/images/default.jpg",
    )


def make_program(n, created_at=None, **overrides):
    attrs = {
        "id": f"program-{n}",
        "title": f"Program {n}",
        "audio_url": f"https://cdn.example.com/{n}.mp3",
        "audio_duration": 180000,
        "created_at": created_at or BASE + timedelta(hours=n),
    }
    attrs.update(overrides)
    return RssProgram(**attrs)


def parse_items(xml):
    channel = ET.fromstring(xml.encode("utf-8")).find("channel")
    return channel, channel.findall("item")


def test_rss_url_and_path():
    assert build_rss_path("abc") == "u/abc/rss.xml"
    assert build_rss_url("https://rss.example.com", "abc") == "https://rss.example.com/u/abc/rss.xml"


def test_duration_is_whole_seconds():
    assert duration_seconds(180000) == 180
    assert duration_seconds(240999) == 240
    assert duration_seconds(0) == 0


def test_title_date_uses_japan_time():
    # 20:00 UTC is the next day in Japan
    assert format_title_date(datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc)) == "2024/06/02"
    assert format_title_date(datetime(2024, 6, 1, 14, 59)) == "2024/06/01"


def test_episodes_are_newest_first_and_truncated(user, options):
    programs = [make_program(n) for n in range(35)]

    result = generate_user_rss(user, programs, options)

    assert result.episode_count == 30
    _, items = parse_items(result.xml)
    assert len(items) == 30
    guids = [item.findtext("guid") for item in items]
    assert guids[0] == "program-34"
    assert guids[-1] == "program-5"


def test_respects_max_episodes_option(user):
    options = RssGenerationOptions(
        base_url="https://techpostcast.com",
        rss_url_prefix="https://rss.techpostcast.com",
        default_image_url="https://techpostcast.com/images/default.jpg",
        max_episodes=2,
    )

    result = generate_user_rss(user, [make_program(n) for n in range(5)], options)

    assert result.episode_count == 2


@pytest.mark.parametrize("max_episodes, expected", [(0, 0), (None, 30)])
def test_max_episodes_zero_and_unset(user, max_episodes, expected):
    options = RssGenerationOptions(
        base_url="https://techpostcast.com",
        rss_url_prefix="https://rss.techpostcast.com",
        default_image_url="https://techpostcast.com/images/default.jpg",
        max_episodes=max_episodes,
    )

    result = generate_user_rss(user, [make_program(n) for n in range(35)], options)

    assert result.episode_count == expected
    _, items = parse_items(result.xml)
    assert len(items) == expected


def test_channel_metadata(user, options):
    result = generate_user_rss(user, [make_program(1)], options)

    channel, _ = parse_items(result.xml)
    assert channel.findtext("title") == "Tech Post Cast - テストユーザーのパーソナルプログラム"
    assert channel.findtext("language") == "ja"
    assert channel.findtext("link") == "https://rss.techpostcast.com/u/token-abcdef-123456"
    self_link = channel.find("atom:link", NS)
    assert self_link.get("rel") == "self"
    assert self_link.get("href") == "https://rss.techpostcast.com/u/token-abcdef-123456/rss.xml"
    assert channel.findtext("itunes:author", namespaces=NS) == "Tech Post Cast"
    assert channel.findtext("itunes:explicit", namespaces=NS) == "no"
    owner = channel.find("itunes:owner", NS)
    assert owner.findtext("itunes:email", namespaces=NS) == "info@techpostcast.com"
    category = channel.find("itunes:category", NS)
    assert category.get("text") == "Technology"


def test_custom_author(user):
    options = RssGenerationOptions(
        base_url="https://techpostcast.com",
        rss_url_prefix="https://rss.techpostcast.com",
        default_image_url="https://techpostcast.com/images/default.jpg",
        author_name="Someone",
        author_email="someone@example.com",
    )

    result = generate_user_rss(user, [make_program(1)], options)

    channel, items = parse_items(result.xml)
    assert channel.findtext("itunes:author", namespaces=NS) == "Someone"
    assert items[0].findtext("itunes:author", namespaces=NS) == "Someone"


def test_episode_fields(user, options):
    program = make_program(
        1,
        created_at=datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc),
        title="Python特集",
        audio_duration=240000,
    )

    result = generate_user_rss(user, [program], options)

    _, items = parse_items(result.xml)
    item = items[0]
    assert item.findtext("title") == "2024/06/02 Python特集"
    assert item.findtext("link") == "https://techpostcast.com/programs/program-1"
    assert "https://techpostcast.com/programs/program-1" in item.findtext("description")
    assert item.find("guid").get("isPermaLink") == "false"
    enclosure = item.find("enclosure")
    assert enclosure.get("url") == "https://cdn.example.com/1.mp3"
    assert enclosure.get("type") == "audio/mpeg"
    assert item.findtext("itunes:duration", namespaces=NS) == "240"


def test_episode_image_falls_back_to_default(user, options):
    programs = [
        make_program(1, image_url="https://cdn.example.com/cover.png"),
        make_program(2),
    ]

    result = generate_user_rss(user, programs, options)

    _, items = parse_items(result.xml)
    images = {
        item.findtext("guid"): item.find("itunes:image", NS).get("href") for item in items
    }
    assert images["program-1"] == "https://cdn.example.com/cover.png"
    assert images["program-2"] == "https://techpostcast.com/images/default.jpg"


def test_unusable_episode_image_falls_back_to_default(user, options):
    programs = [
        make_program(1, image_url="https://cdn.example.com/cover.webp"),
        make_program(2, image_url="https://cdn.example.com/cover.JPG"),
        make_program(3, image_url="https://cdn.example.com/cover.png?v=2"),
    ]

    result = generate_user_rss(user, programs, options)

    _, items = parse_items(result.xml)
    assert len(items) == 3
    for item in items:
        image = item.find("itunes:image", NS)
        assert image.get("href") == "https://techpostcast.com/images/default.jpg"


def test_naive_created_at_is_treated_as_utc(user, options):
    program = make_program(1, created_at=datetime(2024, 6, 1, 16, 0))

    result = generate_user_rss(user, [program], options)

    _, items = parse_items(result.xml)
    assert items[0].findtext("title").startswith("2024/06/02 ")


def test_empty_program_list_still_renders(user, options):
    result = generate_user_rss(user, [], options)

    _, items = parse_items(result.xml)
    assert result.episode_count == 0
    assert items == []


def test_validate_reports_every_problem():
    user = RssUser(id="user_1", display_name="", rss_token=None)
    programs = [make_program(1, audio_url="", audio_duration=0)]

    errors = validate_rss_generation(user, programs)

    assert errors == [
        "RSS token is required",
        "User display name is required",
        "Program program-1 is missing audio URL",
        "Program program-1 has invalid audio duration",
    ]


def test_validate_requires_programs(user):
    assert validate_rss_generation(user, []) == ["At least one program is required"]


def test_validate_accepts_publishable_input(user):
    assert validate_rss_generation(user, [make_program(1)]) == []
