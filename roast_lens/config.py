"""Process-wide provider configuration, read once from the environment (.env supported)."""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

X_API_BASE = "https://api.x.com/2"
DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"


@dataclass(frozen=True)
class Settings:
    x_bearer_token: str | None = None
    x_api_base: str = X_API_BASE
    openai_api_key: str | None = None
    perplexity_api_key: str | None = None
    elevenlabs_api_key: str | None = None
    elevenlabs_voice_id: str = DEFAULT_VOICE_ID
    elevenlabs_model_id: str = "eleven_multilingual_v2"
    roast_model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o-mini"
    extraction_model: str = "gpt-4o-mini"
    search_model: str = "sonar"
    http_timeout: float = 20.0
    tts_max_retries: int = 2
    tts_retry_delay: float = 1.0

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            x_bearer_token=os.getenv("X_BEARER_TOKEN") or None,
            x_api_base=os.getenv("X_API_BASE", X_API_BASE).rstrip("/"),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            perplexity_api_key=os.getenv("PERPLEXITY_API_KEY") or None,
            elevenlabs_api_key=os.getenv("ELEVENLABS_API_KEY") or None,
            elevenlabs_voice_id=os.getenv("ELEVENLABS_VOICE_ID", DEFAULT_VOICE_ID),
            elevenlabs_model_id=os.getenv("ELEVENLABS_MODEL_ID", "eleven_multilingual_v2"),
            roast_model=os.getenv("ROAST_MODEL", "gpt-4o-mini"),
            vision_model=os.getenv("VISION_MODEL", "gpt-4o-mini"),
            extraction_model=os.getenv("EXTRACTION_MODEL", "gpt-4o-mini"),
            search_model=os.getenv("SEARCH_MODEL", "sonar"),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "20")),
            tts_max_retries=int(os.getenv("TTS_MAX_RETRIES", "2")),
            tts_retry_delay=float(os.getenv("TTS_RETRY_DELAY", "1.0")),
        )
