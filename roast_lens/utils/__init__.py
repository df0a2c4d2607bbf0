from roast_lens.utils.handles import normalize_avatar_url, normalize_handle
from roast_lens.utils.retry import send_with_throttle_retry

__all__ = ["normalize_avatar_url", "normalize_handle", "send_with_throttle_retry"]
