from __future__ import annotations

import base64
import re
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from roast_lens.utils.handles import normalize_avatar_url, normalize_handle
from roast_lens.utils.patterns import average_engagement, hours_since


class Platform(str, Enum):
    X = "x"


class Source(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class RoastStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


def follower_ratio(followers: int, following: int) -> float:
    """Followers per followed account, rounded to 2 decimals (0 for an empty graph)."""
    if not followers and not following:
        return 0.0
    return round(followers / max(1, following), 2)


class ProfileQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    handle: str
    platform: Platform = Platform.X
    source_preference: Source = Source.PRIMARY

    @field_validator("handle")
    @classmethod
    def _normalize(cls, value: str) -> str:
        handle = normalize_handle(value)
        if not handle:
            raise ValueError("handle is empty after normalization")
        return handle


class ProfileRecord(BaseModel):
    """Source-agnostic profile shape. Counts are never null."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    username: str
    verified: bool = False
    bio: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    followers: int = 0
    following: int = 0
    post_count: int = 0
    listed_count: int = 0
    follower_ratio: float = 0.0
    origin_source: Source

    @field_validator("followers", "following", "post_count", "listed_count", mode="before")
    @classmethod
    def _zero_if_missing(cls, value):
        return 0 if value is None else value

    @field_validator("bio", mode="before")
    @classmethod
    def _clean_bio(cls, value):
        if value is None:
            return None
        return re.sub(r"\s+", " ", str(value)).strip() or None

    @field_validator("avatar_url", mode="before")
    @classmethod
    def _upgrade_avatar(cls, value):
        return normalize_avatar_url(value)

    @model_validator(mode="before")
    @classmethod
    def _derive_ratio(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            data["follower_ratio"] = follower_ratio(
                int(data.get("followers") or 0), int(data.get("following") or 0)
            )
        return data


class PostSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    created_at: datetime
    like_count: int = 0
    reply_count: int = 0
    repost_count: int = 0
    quote_count: int = 0

    @field_validator("like_count", "reply_count", "repost_count", "quote_count", mode="before")
    @classmethod
    def _zero_if_missing(cls, value):
        return 0 if value is None else value

    @property
    def engagement(self) -> int:
        return self.like_count + self.reply_count + self.repost_count + self.quote_count


BIO_PREVIEW_LIMIT = 120


def bio_preview(bio: str | None) -> str:
    """Bio as quoted in a roast: truncated to 117 chars + '...' past 120 chars."""
    if not bio:
        return ""
    if len(bio) > BIO_PREVIEW_LIMIT:
        return f"{bio[:BIO_PREVIEW_LIMIT - 3]}..."
    return bio


class RoastContext(BaseModel):
    """Read-only input to roast generation. Never persisted."""

    model_config = ConfigDict(frozen=True)

    profile: ProfileRecord
    post: PostSample | None = None
    avg_engagement: int = 0
    last_activity_hours: int | None = None

    @classmethod
    def build(
        cls,
        profile: ProfileRecord,
        post: PostSample | None = None,
        now: datetime | None = None,
    ) -> RoastContext:
        posts = [post] if post else []
        last_hours = None
        if post is not None:
            last_hours = hours_since(post.created_at, now or datetime.now(timezone.utc))
        return cls(
            profile=profile,
            post=post,
            avg_engagement=average_engagement(posts),
            last_activity_hours=last_hours,
        )

    @property
    def metrics_sparse(self) -> bool:
        return self.profile.origin_source == Source.FALLBACK

    @property
    def bio_preview(self) -> str:
        return bio_preview(self.profile.bio)


class AudioClip(BaseModel):
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    data: bytes
    mime_type: str = "audio/mpeg"
    voice_id: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"


class RoastResult(BaseModel):
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    status: RoastStatus
    handle: str | None = None
    platform: Platform | None = None
    profile: ProfileRecord | None = None
    post: PostSample | None = None
    roast_text: str | None = None
    avg_engagement: int | None = None
    last_activity_hours: int | None = None
    image_critique: str | None = None
    audio: AudioClip | None = None
    error_message: str | None = None

    @classmethod
    def error(cls, message: str, handle: str | None = None) -> RoastResult:
        return cls(status=RoastStatus.ERROR, handle=handle, error_message=message)

    @classmethod
    def ok(cls, **fields) -> RoastResult:
        return cls(status=RoastStatus.OK, **fields)
