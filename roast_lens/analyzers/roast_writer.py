"""Generative roast text via a dedicated Agents SDK writer, with a templated fallback."""
import logging

from agents import Agent, OpenAIResponsesModel, Runner
from openai import AsyncOpenAI

from roast_lens.analyzers.template import SIGN_OFF, abbreviate, compose_roast
from roast_lens.config import Settings
from roast_lens.models import RoastContext

_log = logging.getLogger(__name__)

_INSTRUCTIONS = f"""You are a savage but PG-13 roast comic for social media profiles.

Rules:
- 4 to 6 punchy sentences, under 120 words, no hashtags, no emojis, no slurs.
- Only use facts given to you. Never invent follower counts, engagement numbers or posts.
- End with this exact sentence: "{SIGN_OFF}\""""


def build_prompt(ctx: RoastContext) -> str:
    """Describe the profile to the writer; sparse (web-search) profiles only list what is known."""
    p = ctx.profile
    lines = [f"Roast @{p.username} ({p.display_name}) on X."]
    if p.verified:
        lines.append("They are verified.")
    if p.location:
        lines.append(f"Location: {p.location}")
    lines.append(f'Bio: "{ctx.bio_preview}"' if p.bio else "Bio: none.")

    if ctx.metrics_sparse:
        known = [
            f"{label}: {abbreviate(value)}"
            for label, value in (
                ("Followers", p.followers),
                ("Following", p.following),
                ("Posts", p.post_count),
            )
            if value
        ]
        if known:
            lines.append("Known numbers (from a web search, may be stale): " + ", ".join(known))
        lines.append(
            "No post or engagement data is available for this account. "
            "Do not mention or guess any numbers that are not listed above."
        )
        return "\n".join(lines)

    lines.append(
        f"Followers: {abbreviate(p.followers)}, following: {abbreviate(p.following)}, "
        f"ratio {p.follower_ratio:g}:1, posts: {abbreviate(p.post_count)}, listed: {abbreviate(p.listed_count)}"
    )
    if ctx.post is not None:
        lines.append(f'Latest post ({ctx.last_activity_hours}h ago): "{ctx.post.text}"')
        lines.append(f"Average engagement per post: ~{ctx.avg_engagement}")
    else:
        lines.append("No recent post could be loaded.")
    return "\n".join(lines)


def ensure_sign_off(text: str) -> str:
    text = text.strip()
    if text.endswith(SIGN_OFF):
        return text
    return f"{text} {SIGN_OFF}"


def _writer(settings: Settings) -> Agent:
    model = OpenAIResponsesModel(
        model=settings.roast_model,
        openai_client=AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.http_timeout),
    )
    return Agent(name="Roast Writer", instructions=_INSTRUCTIONS, model=model)


async def write_roast(ctx: RoastContext, settings: Settings) -> str:
    """Generative roast when an OpenAI key is configured; the template otherwise or on any failure."""
    if not settings.openai_api_key:
        _log.info("OPENAI_API_KEY not set; using templated roast")
        return compose_roast(ctx)
    try:
        result = await Runner.run(_writer(settings), input=build_prompt(ctx))
        text = str(result.final_output or "").strip()
    except Exception as exc:
        _log.warning("Roast writer failed for @%s, using template: %s", ctx.profile.username, exc)
        return compose_roast(ctx)
    if not text:
        _log.warning("Roast writer returned nothing for @%s, using template", ctx.profile.username)
        return compose_roast(ctx)
    return ensure_sign_off(text)
