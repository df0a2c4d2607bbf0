import logging

import httpx

from roast_lens.config import Settings
from roast_lens.models import AudioClip
from roast_lens.utils import send_with_throttle_retry

_log = logging.getLogger(__name__)

ELEVENLABS_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"


async def synthesize_voice(
    text: str,
    settings: Settings,
    *,
    client: httpx.AsyncClient | None = None,
) -> AudioClip | None:
    """Speak the roast with ElevenLabs. Retries only on 429; None on any failure."""
    if not text or not settings.elevenlabs_api_key:
        return None

    voice_id = settings.elevenlabs_voice_id
    url = ELEVENLABS_TTS_URL.format(voice_id=voice_id)
    headers = {"xi-api-key": settings.elevenlabs_api_key, "Accept": "audio/mpeg"}
    body = {
        "text": text,
        "model_id": settings.elevenlabs_model_id,
        "voice_settings": {"stability": 0.65, "similarity_boost": 0.7},
    }

    async def _post(c: httpx.AsyncClient) -> httpx.Response:
        return await send_with_throttle_retry(
            lambda: c.post(url, headers=headers, json=body),
            max_retries=settings.tts_max_retries,
            delay=settings.tts_retry_delay,
        )

    try:
        if client is not None:
            response = await _post(client)
        else:
            async with httpx.AsyncClient(timeout=settings.http_timeout) as c:
                response = await _post(c)
    except httpx.HTTPError as exc:
        _log.warning("Voice synthesis request failed: %s", exc)
        return None

    if not response.is_success:
        _log.warning("Voice synthesis gave up with HTTP %s", response.status_code)
        return None
    if not response.content:
        return None

    mime_type = response.headers.get("content-type", "audio/mpeg").split(";")[0].strip() or "audio/mpeg"
    return AudioClip(data=response.content, mime_type=mime_type, voice_id=voice_id)
