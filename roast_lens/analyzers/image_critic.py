import logging

from openai import AsyncOpenAI

from roast_lens.config import Settings

_log = logging.getLogger(__name__)

PROMPT = (
    "Roast this X profile photo for @{handle}. Keep it under 80 words, "
    "spicy but PG-13, and end with a short mic-drop."
)


async def critique_avatar(avatar_url: str | None, handle: str, settings: Settings) -> str | None:
    """Vision roast of the avatar. None when unavailable for any reason."""
    if not avatar_url or not settings.openai_api_key:
        return None

    client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.http_timeout)
    try:
        response = await client.responses.create(
            model=settings.vision_model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": PROMPT.format(handle=handle)},
                        {"type": "input_image", "image_url": avatar_url},
                    ],
                }
            ],
            max_output_tokens=180,
        )
    except Exception as exc:
        _log.warning("Avatar critique failed for @%s: %s", handle, exc)
        return None

    text = (response.output_text or "").strip()
    return text or None
