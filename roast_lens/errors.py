"""Error taxonomy for profile resolution.

Every error carries a short human-readable ``user_message``; that string is
the only part that ever reaches a RoastResult.
"""
from enum import Enum


class RoastError(Exception):
    default_message = "Something went wrong. Try again."

    def __init__(self, user_message: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class ConfigurationError(RoastError):
    default_message = "Server is missing a required credential."


class NotFound(RoastError):
    default_message = "Could not find that handle on X. Double-check the spelling."


class RateLimited(RoastError):
    default_message = "X is rate-limiting requests right now."


class UpstreamFailure(RoastError):
    default_message = "Unable to reach X right now."


class FallbackReason(str, Enum):
    FORCED = "forced"
    RATE_LIMITED = "rate_limited"


class ResolutionEmpty(RoastError):
    def __init__(self, handle: str, reason: FallbackReason) -> None:
        self.handle = handle
        self.reason = reason
        if reason is FallbackReason.RATE_LIMITED:
            message = (
                f"X is rate-limiting lookups and the web-search fallback found nothing for @{handle}. "
                "Try again in a few minutes."
            )
        else:
            message = (
                f"Web-search lookup found nothing for @{handle}, or web search isn't configured. "
                "Try the X API source instead."
            )
        super().__init__(message)
