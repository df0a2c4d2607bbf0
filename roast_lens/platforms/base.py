"""Profile source protocol: the interface each platform adapter exposes to the orchestrator."""
from dataclasses import dataclass
from typing import Protocol

from roast_lens.models import PostSample, ProfileRecord


@dataclass(frozen=True)
class SourceResult:
    profile: ProfileRecord
    post: PostSample | None = None


class ProfileSource(Protocol):
    """Resolves a normalized handle into a SourceResult.

    Primary sources raise RoastError subclasses on failure. Best-effort sources
    return None when they have nothing usable.
    """

    async def fetch(self, handle: str) -> SourceResult | None:
        ...
