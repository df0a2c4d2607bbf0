"""Fallback source: rebuild a profile from web search + LLM extraction.

Two stages:
  1. search   - a search-augmented model (Perplexity, OpenAI-compatible API)
                retrieves the public profile page content for the handle.
  2. extract  - an OpenAI model turns that free text into one fixed-shape
                JSON object, which is mapped onto a ProfileRecord.

Everything here is best-effort: missing credentials, empty answers and
unparseable output all collapse to None. No per-post data comes out of
this path.
"""
import logging
from dataclasses import dataclass, field

from openai import AsyncOpenAI
from pydantic import ValidationError

from roast_lens.platforms.base import SourceResult
from roast_lens.platforms.search.parser import extract_json_object, parse_extracted

_log = logging.getLogger(__name__)

PERPLEXITY_BASE_URL = "https://api.perplexity.ai"

SEARCH_PROMPT = """Find the public X (Twitter) profile page for @{handle} (https://x.com/{handle}).
Report everything visible on it: display name, exact username, whether it is verified,
the bio, the location, and the follower, following, post and listed counts.
If a number is not shown anywhere, say it is unknown rather than guessing."""

EXTRACTION_PROMPT = """You convert notes about an X (Twitter) profile into JSON.

Return exactly one JSON object and nothing else, with these keys:
- name: display name (string or null)
- username: handle without @ (string or null)
- verified: boolean
- description: the bio (string or null)
- location: string or null
- followers_count, following_count, tweet_count, listed_count: integers

Use 0 for any count the notes do not state and null for any missing string.
Never invent values."""


@dataclass(frozen=True)
class SearchHit:
    text: str
    citations: list[str] = field(default_factory=list)


class SearchSource:
    """Best-effort profile reconstruction used when X is rate-limited or bypassed."""

    def __init__(
        self,
        search_api_key: str | None,
        extraction_api_key: str | None,
        *,
        search_model: str = "sonar",
        extraction_model: str = "gpt-4o-mini",
        search_base_url: str = PERPLEXITY_BASE_URL,
        timeout: float = 20.0,
    ) -> None:
        self._search_key = search_api_key
        self._extraction_key = extraction_api_key
        self._search_model = search_model
        self._extraction_model = extraction_model
        self._search_base_url = search_base_url
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._search_key and self._extraction_key)

    async def fetch(self, handle: str) -> SourceResult | None:
        if not self.configured:
            _log.info("Web-search fallback unavailable: PERPLEXITY_API_KEY/OPENAI_API_KEY not set")
            return None
        try:
            hit = await self.search(handle)
            if hit is None:
                return None
            data = await self.extract(handle, hit)
            if data is None:
                return None
            profile = parse_extracted(handle, data)
        except ValidationError as exc:
            _log.warning("Extracted profile for @%s did not validate: %s", handle, exc)
            return None
        except Exception as exc:
            # transient and permanent failures are treated alike: no result
            _log.warning("Web-search fallback failed for @%s: %s", handle, exc)
            return None
        return SourceResult(profile=profile, post=None)

    async def search(self, handle: str) -> SearchHit | None:
        client = AsyncOpenAI(
            api_key=self._search_key,
            base_url=self._search_base_url,
            timeout=self._timeout,
        )
        response = await client.chat.completions.create(
            model=self._search_model,
            messages=[
                {"role": "system", "content": "Be precise and concise. Only report facts you found."},
                {"role": "user", "content": SEARCH_PROMPT.format(handle=handle)},
            ],
        )
        text = (response.choices[0].message.content or "").strip()
        if not text:
            _log.info("Search returned nothing for @%s", handle)
            return None
        citations = list(getattr(response, "citations", None) or [])
        _log.debug("Search for @%s returned %d chars, %d citations", handle, len(text), len(citations))
        return SearchHit(text=text, citations=citations)

    async def extract(self, handle: str, hit: SearchHit) -> dict | None:
        client = AsyncOpenAI(api_key=self._extraction_key, timeout=self._timeout)
        sources = "\n".join(f"- {url}" for url in hit.citations)
        user_content = f"Profile notes for @{handle}:\n\n{hit.text}"
        if sources:
            user_content += f"\n\nSources:\n{sources}"
        response = await client.chat.completions.create(
            model=self._extraction_model,
            messages=[
                {"role": "system", "content": EXTRACTION_PROMPT},
                {"role": "user", "content": user_content},
            ],
        )
        data = extract_json_object(response.choices[0].message.content or "")
        if data is None:
            _log.info("No JSON object in extraction output for @%s", handle)
        return data
