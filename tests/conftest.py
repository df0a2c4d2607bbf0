from datetime import datetime, timedelta, timezone

import pytest

from roast_lens.config import Settings
from roast_lens.models import PostSample, ProfileRecord, Source

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_settings():
    """Settings with no credentials unless given; retries don't sleep."""
    def _make(**overrides) -> Settings:
        fields = {"tts_retry_delay": 0.0}
        fields.update(overrides)
        return Settings(**fields)
    return _make


@pytest.fixture
def primary_profile() -> ProfileRecord:
    return ProfileRecord(
        id="42",
        display_name="Test User",
        username="Test_User",
        bio="Building things nobody asked for.",
        avatar_url="https://pbs.twimg.com/profile_images/1/me_normal.jpg",
        followers=1000,
        following=10,
        post_count=2500,
        listed_count=3,
        origin_source=Source.PRIMARY,
    )


@pytest.fixture
def recent_post() -> PostSample:
    return PostSample(
        id="1001",
        text="gm to everyone except my haters",
        created_at=NOW - timedelta(hours=5),
        like_count=10,
        reply_count=2,
        repost_count=1,
        quote_count=1,
    )
