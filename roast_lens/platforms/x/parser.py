import logging
from typing import Any

from pydantic import ValidationError

from roast_lens.models import PostSample, ProfileRecord, Source

_log = logging.getLogger(__name__)

_THROTTLE_MARKERS = ("rate limit", "too many requests", "throttl")
_NOT_FOUND_MARKERS = ("not found", "could not find")


def first_error(payload: dict[str, Any]) -> dict[str, Any]:
    """Return the first entry of an X API `errors` array, or {}."""
    errors = payload.get("errors") or []
    if errors and isinstance(errors[0], dict):
        return errors[0]
    return {}


def error_detail(payload: dict[str, Any]) -> str:
    err = first_error(payload)
    return str(err.get("detail") or err.get("message") or err.get("title") or "").strip()


def mentions_throttling(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in _THROTTLE_MARKERS)


def mentions_not_found(payload: dict[str, Any]) -> bool:
    err = first_error(payload)
    text = " ".join(str(err.get(k, "")) for k in ("title", "detail", "type")).lower()
    return any(marker in text for marker in _NOT_FOUND_MARKERS)


def parse_user(data: dict[str, Any]) -> ProfileRecord:
    """Map an X API v2 user object onto a ProfileRecord."""
    metrics = data.get("public_metrics") or {}
    return ProfileRecord(
        id=str(data["id"]),
        display_name=data.get("name") or data["username"],
        username=data["username"],
        verified=bool(data.get("verified", False)),
        bio=data.get("description"),
        location=data.get("location") or None,
        avatar_url=data.get("profile_image_url"),
        followers=metrics.get("followers_count"),
        following=metrics.get("following_count"),
        post_count=metrics.get("tweet_count"),
        listed_count=metrics.get("listed_count"),
        origin_source=Source.PRIMARY,
    )


def parse_post(payload: dict[str, Any]) -> PostSample | None:
    """Map the first tweet of a /users/:id/tweets response onto a PostSample."""
    tweets = payload.get("data") or []
    if not tweets:
        return None
    try:
        tweet = tweets[0]
        metrics = tweet.get("public_metrics") or {}
        return PostSample(
            id=str(tweet["id"]),
            text=tweet.get("text", ""),
            created_at=tweet["created_at"],
            like_count=metrics.get("like_count"),
            reply_count=metrics.get("reply_count"),
            repost_count=metrics.get("retweet_count"),
            quote_count=metrics.get("quote_count"),
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as exc:
        _log.warning("Skipping malformed tweet payload: %s", exc)
        return None
