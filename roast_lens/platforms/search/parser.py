import json
import logging
from typing import Any

from pydantic import BaseModel, field_validator

from roast_lens.models import ProfileRecord, Source

_log = logging.getLogger(__name__)


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first balanced {...} object in free text, parsed.

    Braces inside JSON strings (and escaped quotes within them) don't count
    toward the balance. Candidates that are unbalanced or not valid JSON are
    skipped. Returns None when no parseable object is found.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    candidate = text[start:i + 1]
                    try:
                        return json.loads(candidate)
                    except json.JSONDecodeError as exc:
                        _log.debug("Balanced block is not valid JSON: %s", exc)
                    break
        # invalid or unbalanced from here; try the next opening brace
        start = text.find("{", start + 1)
    return None


def _to_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    # "12,345" or "12.3K" style strings from the model
    text = str(value).strip().replace(",", "").upper()
    multiplier = 1
    for suffix, factor in (("K", 1_000), ("M", 1_000_000), ("B", 1_000_000_000)):
        if text.endswith(suffix):
            text, multiplier = text[:-1], factor
            break
    try:
        return int(float(text) * multiplier)
    except ValueError:
        return 0


class ExtractedProfile(BaseModel):
    """The fixed JSON shape the extraction prompt asks for."""

    name: str | None = None
    username: str | None = None
    verified: bool = False
    description: str | None = None
    location: str | None = None
    followers_count: int = 0
    following_count: int = 0
    tweet_count: int = 0
    listed_count: int = 0

    @field_validator("followers_count", "following_count", "tweet_count", "listed_count", mode="before")
    @classmethod
    def _coerce_count(cls, value):
        return _to_int(value)

    @field_validator("verified", mode="before")
    @classmethod
    def _coerce_verified(cls, value):
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "1")
        return bool(value)

    @field_validator("name", "username", "description", "location", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value is None:
            return None
        text = str(value).strip()
        return text if text and text.lower() not in ("null", "none", "n/a") else None


def parse_extracted(handle: str, data: dict[str, Any]) -> ProfileRecord:
    """Map an extracted-JSON profile onto a ProfileRecord (origin: fallback)."""
    extracted = ExtractedProfile.model_validate(data)
    username = (extracted.username or handle).lstrip("@")
    return ProfileRecord(
        id=username.lower(),
        display_name=extracted.name or username,
        username=username,
        verified=extracted.verified,
        bio=extracted.description,
        location=extracted.location,
        followers=extracted.followers_count,
        following=extracted.following_count,
        post_count=extracted.tweet_count,
        listed_count=extracted.listed_count,
        origin_source=Source.FALLBACK,
    )
