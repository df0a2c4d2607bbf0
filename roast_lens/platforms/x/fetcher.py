"""Primary source: profile and latest post from the X API v2."""
import logging
from typing import Any

import httpx

from roast_lens.config import X_API_BASE
from roast_lens.errors import NotFound, RateLimited, UpstreamFailure
from roast_lens.models import PostSample, ProfileRecord
from roast_lens.platforms.base import SourceResult
from roast_lens.platforms.x.parser import (
    error_detail,
    mentions_not_found,
    mentions_throttling,
    parse_post,
    parse_user,
)

_log = logging.getLogger(__name__)

USER_FIELDS = "description,profile_image_url,public_metrics,location,verified,created_at"
TWEET_FIELDS = "created_at,public_metrics,text"


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def raise_for_x_status(response: httpx.Response, payload: dict[str, Any]) -> None:
    """Translate a failed X API response into the matching RoastError."""
    if response.is_success:
        return
    detail = error_detail(payload)
    if response.status_code == 429 or mentions_throttling(detail):
        raise RateLimited()
    if response.status_code == 404 or mentions_not_found(payload):
        raise NotFound()
    raise UpstreamFailure(f"X API error: {detail}" if detail else f"X API error: {response.reason_phrase or response.status_code}")


class XSource:
    """Authoritative profile + post lookup. Requires a bearer token."""

    def __init__(
        self,
        bearer_token: str,
        *,
        base_url: str = X_API_BASE,
        timeout: float = 20.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._bearer = bearer_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    async def fetch(self, handle: str) -> SourceResult:
        if self._client is not None:
            return await self._fetch_with(self._client, handle)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._fetch_with(client, handle)

    async def _fetch_with(self, client: httpx.AsyncClient, handle: str) -> SourceResult:
        profile = await self._fetch_user(client, handle)
        # best-effort: a missing post never fails the lookup
        post = await self._fetch_latest_post(client, profile.id)
        return SourceResult(profile=profile, post=post)

    async def _get(self, client: httpx.AsyncClient, path: str, params: dict[str, Any]) -> httpx.Response:
        return await client.get(
            f"{self._base_url}{path}",
            params=params,
            headers={"Authorization": f"Bearer {self._bearer}"},
        )

    async def _fetch_user(self, client: httpx.AsyncClient, handle: str) -> ProfileRecord:
        _log.debug("X lookup: @%s", handle)
        try:
            response = await self._get(client, f"/users/by/username/{handle}", {"user.fields": USER_FIELDS})
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            _log.warning("X user lookup failed for @%s: %s", handle, exc)
            raise UpstreamFailure() from exc

        payload = _json_or_empty(response)
        raise_for_x_status(response, payload)

        data = payload.get("data")
        if not data:
            # X answers 200 with only an `errors` array for unknown handles
            if mentions_throttling(error_detail(payload)):
                raise RateLimited()
            raise NotFound()
        if not isinstance(data, dict):
            _log.warning("Unexpected X user payload for @%s: %r", handle, type(data).__name__)
            raise UpstreamFailure("X returned a profile we couldn't read.")
        try:
            return parse_user(data)
        except (KeyError, ValueError, TypeError, AttributeError) as exc:
            _log.warning("Malformed X user payload for @%s: %s", handle, exc)
            raise UpstreamFailure("X returned a profile we couldn't read.") from exc

    async def _fetch_latest_post(self, client: httpx.AsyncClient, user_id: str) -> PostSample | None:
        params = {
            "max_results": 1,
            "tweet.fields": TWEET_FIELDS,
            "exclude": "retweets,replies",
        }
        try:
            response = await self._get(client, f"/users/{user_id}/tweets", params)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            _log.info("Latest post unavailable for user %s: %s", user_id, exc)
            return None
        if not response.is_success:
            # protected account, rate limit on the timeline endpoint, etc.
            _log.info("Latest post unavailable for user %s: HTTP %s", user_id, response.status_code)
            return None
        return parse_post(_json_or_empty(response))
