"""Source selection as an explicit state machine.

    TryPrimary ──ok──────────────▶ Resolved
        │ RateLimited
        ▼
    FallbackOnly(reason) ──ok────▶ Resolved
        │ no result
        ▼
      Failed

Nothing transitions back into TryPrimary, so a request escalates to the
fallback at most once and a forced fallback never touches the primary.
"""
import logging
from dataclasses import dataclass

from roast_lens.config import Settings
from roast_lens.errors import (
    ConfigurationError,
    FallbackReason,
    NotFound,
    RateLimited,
    ResolutionEmpty,
    RoastError,
    UpstreamFailure,
)
from roast_lens.models import PostSample, ProfileQuery, ProfileRecord, Source
from roast_lens.platforms.base import ProfileSource
from roast_lens.platforms.search.fetcher import SearchSource
from roast_lens.platforms.x.fetcher import XSource

_log = logging.getLogger(__name__)

MISSING_BEARER = "Server missing X_BEARER_TOKEN. Add it to .env and restart."


@dataclass(frozen=True)
class TryPrimary:
    pass


@dataclass(frozen=True)
class FallbackOnly:
    reason: FallbackReason


@dataclass(frozen=True)
class Resolved:
    profile: ProfileRecord
    post: PostSample | None = None


@dataclass(frozen=True)
class Failed:
    error: RoastError


State = TryPrimary | FallbackOnly | Resolved | Failed
TERMINAL = (Resolved, Failed)


def initial_state(query: ProfileQuery) -> State:
    if query.source_preference == Source.FALLBACK:
        return FallbackOnly(FallbackReason.FORCED)
    return TryPrimary()


async def step(
    state: State,
    handle: str,
    primary: ProfileSource | None,
    fallback: ProfileSource | None,
) -> State:
    """Advance one transition. Terminal states map to themselves."""
    if isinstance(state, TryPrimary):
        if primary is None:
            return Failed(ConfigurationError(MISSING_BEARER))
        try:
            result = await primary.fetch(handle)
        except RateLimited:
            _log.info("Primary source rate-limited for @%s; escalating to web-search fallback", handle)
            return FallbackOnly(FallbackReason.RATE_LIMITED)
        except RoastError as exc:
            return Failed(exc)
        except Exception as exc:
            _log.warning("Primary source crashed for @%s: %r", handle, exc)
            return Failed(UpstreamFailure())
        if result is None:
            return Failed(NotFound())
        return Resolved(result.profile, result.post)

    if isinstance(state, FallbackOnly):
        result = await fallback.fetch(handle) if fallback is not None else None
        if result is None:
            return Failed(ResolutionEmpty(handle, state.reason))
        return Resolved(result.profile, None)

    return state


async def resolve_profile(
    query: ProfileQuery,
    primary: ProfileSource | None,
    fallback: ProfileSource | None,
) -> Resolved | Failed:
    state = initial_state(query)
    _log.debug("Resolving @%s starting from %s", query.handle, type(state).__name__)
    while not isinstance(state, TERMINAL):
        state = await step(state, query.handle, primary, fallback)
    return state


def build_sources(settings: Settings) -> tuple[XSource | None, SearchSource]:
    """Adapters for the configured credentials; primary is None without a bearer token."""
    primary = None
    if settings.x_bearer_token:
        primary = XSource(
            settings.x_bearer_token,
            base_url=settings.x_api_base,
            timeout=settings.http_timeout,
        )
    fallback = SearchSource(
        settings.perplexity_api_key,
        settings.openai_api_key,
        search_model=settings.search_model,
        extraction_model=settings.extraction_model,
        timeout=settings.http_timeout,
    )
    return primary, fallback
