import asyncio
import logging
from typing import Awaitable, Callable

import httpx

_log = logging.getLogger(__name__)


async def send_with_throttle_retry(
    send: Callable[[], Awaitable[httpx.Response]],
    *,
    max_retries: int = 2,
    delay: float = 1.0,
) -> httpx.Response:
    """Call `send` again after a fixed delay while it answers 429.

    At most max_retries + 1 attempts. Any other response, success or not, is
    returned as-is; transport errors propagate to the caller.
    """
    remaining = max_retries
    while True:
        response = await send()
        if response.status_code != 429 or remaining <= 0:
            return response
        remaining -= 1
        _log.info("Throttled (429); retrying in %.1fs (%d retries left)", delay, remaining)
        await asyncio.sleep(delay)
