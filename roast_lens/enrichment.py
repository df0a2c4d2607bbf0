"""Concurrent, individually fault-tolerant enrichment of a finished roast."""
import asyncio
import logging
from dataclasses import dataclass

from roast_lens.analyzers.image_critic import critique_avatar
from roast_lens.analyzers.voice import synthesize_voice
from roast_lens.config import Settings
from roast_lens.models import AudioClip

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Enrichment:
    image_critique: str | None = None
    audio: AudioClip | None = None


def _discard_failure(name: str, outcome):
    if isinstance(outcome, BaseException):
        _log.warning("%s enrichment failed: %s", name, outcome)
        return None
    return outcome


async def enrich(
    roast_text: str,
    avatar_url: str | None,
    handle: str,
    settings: Settings,
) -> Enrichment:
    """Run avatar critique and voice synthesis side by side; either may come back empty."""
    critique_task = asyncio.create_task(critique_avatar(avatar_url, handle, settings))
    audio_task = asyncio.create_task(synthesize_voice(roast_text, settings))
    critique, audio = await asyncio.gather(critique_task, audio_task, return_exceptions=True)
    return Enrichment(
        image_critique=_discard_failure("Image critique", critique),
        audio=_discard_failure("Audio", audio),
    )
