from datetime import timedelta

import pytest
from pydantic import ValidationError

from roast_lens.models import (
    AudioClip,
    ProfileQuery,
    ProfileRecord,
    RoastContext,
    RoastResult,
    RoastStatus,
    Source,
    bio_preview,
    follower_ratio,
)
from roast_lens.utils import normalize_handle

HANDLES = ["@Test_User", "  @@@Karpathy  ", "elonmusk", "@ @Mixed", "UPPER", "@@", "   "]


@pytest.mark.parametrize("raw", HANDLES)
def test_normalize_handle_is_idempotent(raw):
    once = normalize_handle(raw)
    assert normalize_handle(once) == once


@pytest.mark.parametrize("raw,expected", [
    ("@Test_User", "test_user"),
    ("@@@karpathy", "karpathy"),
    ("  @Name  ", "name"),
    ("plain", "plain"),
])
def test_normalize_handle_strips_at_and_lowercases(raw, expected):
    assert normalize_handle(raw) == expected


def test_query_normalizes_handle():
    query = ProfileQuery(handle=" @@Test_User ")
    assert query.handle == "test_user"
    assert query.source_preference == Source.PRIMARY


@pytest.mark.parametrize("raw", ["@@@", "   ", "", "@ @ "])
def test_query_rejects_empty_handle(raw):
    with pytest.raises(ValidationError):
        ProfileQuery(handle=raw)


@pytest.mark.parametrize("followers,following,expected", [
    (0, 0, 0.0),
    (100, 0, 100.0),
    (0, 50, 0.0),
    (1000, 10, 100.0),
    (1, 3, 0.33),
])
def test_follower_ratio(followers, following, expected):
    assert follower_ratio(followers, following) == expected


def test_profile_record_fills_missing_counts_and_ratio():
    record = ProfileRecord(
        id="1",
        display_name="X",
        username="x",
        followers=None,
        following=None,
        post_count=None,
        listed_count=None,
        origin_source=Source.FALLBACK,
    )
    assert (record.followers, record.following, record.post_count, record.listed_count) == (0, 0, 0, 0)
    assert record.follower_ratio == 0.0


def test_profile_record_cleans_bio_and_upgrades_avatar(primary_profile):
    assert primary_profile.follower_ratio == 100.0
    assert primary_profile.avatar_url.endswith("me_400x400.jpg")

    spaced = ProfileRecord(
        id="1", display_name="a", username="a", bio="  lots\n of   space ", origin_source=Source.PRIMARY
    )
    assert spaced.bio == "lots of space"


def test_bio_preview_truncates_long_bio():
    preview = bio_preview("a" * 150)
    assert len(preview) == 120
    assert preview.endswith("...")


def test_bio_preview_keeps_short_bio():
    bio = "b" * 100
    assert bio_preview(bio) == bio
    assert bio_preview("c" * 120) == "c" * 120


def test_context_metrics_from_post(primary_profile, recent_post, now):
    ctx = RoastContext.build(primary_profile, recent_post, now=now)
    assert ctx.avg_engagement == 14
    assert ctx.last_activity_hours == 5
    assert not ctx.metrics_sparse


def test_context_without_post(primary_profile, now):
    ctx = RoastContext.build(primary_profile, None, now=now)
    assert ctx.avg_engagement == 0
    assert ctx.last_activity_hours is None


def test_context_clamps_future_post_to_zero_hours(primary_profile, recent_post, now):
    future = recent_post.model_copy(update={"created_at": now + timedelta(hours=3)})
    ctx = RoastContext.build(primary_profile, future, now=now)
    assert ctx.last_activity_hours == 0


def test_audio_clip_data_uri_and_json():
    clip = AudioClip(data=b"\x00\x01mp3", voice_id="v1")
    assert clip.data_uri.startswith("data:audio/mpeg;base64,")
    result = RoastResult.ok(handle="x", audio=clip)
    dumped = result.model_dump(mode="json")
    assert dumped["audio"]["data"] == "AAFtcDM="
    assert dumped["status"] == "ok"


def test_error_result():
    result = RoastResult.error("nope", handle="x")
    assert result.status == RoastStatus.ERROR
    assert result.error_message == "nope"
    assert result.profile is None
