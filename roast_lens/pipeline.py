"""resolve_and_roast: profile resolution -> roast text -> concurrent enrichment."""
import logging

from pydantic import ValidationError

from roast_lens.analyzers.roast_writer import write_roast
from roast_lens.config import Settings
from roast_lens.enrichment import enrich
from roast_lens.models import Platform, ProfileQuery, RoastContext, RoastResult, Source
from roast_lens.orchestrator import Failed, build_sources, resolve_profile
from roast_lens.platforms.base import ProfileSource

_log = logging.getLogger(__name__)


class _Default:
    """Marker for "build this source from settings"."""


_DEFAULT = _Default()


async def resolve_and_roast(
    query: ProfileQuery,
    settings: Settings | None = None,
    *,
    primary: ProfileSource | None | _Default = _DEFAULT,
    fallback: ProfileSource | None | _Default = _DEFAULT,
) -> RoastResult:
    """Run one roast request end to end. Never raises for provider failures.

    `primary` / `fallback` default to adapters built from `settings`; pass
    None explicitly to model an unconfigured source.
    """
    settings = settings or Settings.from_env()
    if isinstance(primary, _Default) or isinstance(fallback, _Default):
        built_primary, built_fallback = build_sources(settings)
        primary = built_primary if isinstance(primary, _Default) else primary
        fallback = built_fallback if isinstance(fallback, _Default) else fallback

    resolution = await resolve_profile(query, primary, fallback)
    if isinstance(resolution, Failed):
        _log.info("Could not resolve @%s: %s", query.handle, resolution.error.user_message)
        return RoastResult.error(resolution.error.user_message, handle=query.handle)

    profile = resolution.profile
    _log.info("Resolved @%s via %s source", query.handle, profile.origin_source.value)
    context = RoastContext.build(profile, resolution.post)
    roast_text = await write_roast(context, settings)
    extras = await enrich(roast_text, profile.avatar_url, query.handle, settings)

    return RoastResult.ok(
        handle=query.handle,
        platform=query.platform,
        profile=profile,
        post=resolution.post,
        roast_text=roast_text,
        avg_engagement=context.avg_engagement,
        last_activity_hours=context.last_activity_hours,
        image_critique=extras.image_critique,
        audio=extras.audio,
    )


async def roast_handle(
    raw_handle: str,
    platform: str = "x",
    source: str = "primary",
    settings: Settings | None = None,
) -> RoastResult:
    """Validate raw collaborator input, then resolve_and_roast."""
    if not (raw_handle or "").strip():
        return RoastResult.error("Please enter a handle.")
    try:
        platform_value = Platform((platform or "x").lower())
    except ValueError:
        return RoastResult.error("Only X handles are supported right now.")
    try:
        source_value = Source((source or "primary").lower())
    except ValueError:
        return RoastResult.error("Source must be 'primary' or 'fallback'.")
    try:
        query = ProfileQuery(handle=raw_handle, platform=platform_value, source_preference=source_value)
    except ValidationError:
        return RoastResult.error("That handle looks empty. Try again.")
    return await resolve_and_roast(query, settings)
