def normalize_handle(value: str) -> str:
    """Strip leading '@'s and surrounding whitespace, then lowercase.

    Idempotent: normalize_handle(normalize_handle(h)) == normalize_handle(h).
    """
    handle = value.strip()
    # whitespace may sit between '@' runs, e.g. " @ @name"
    while handle.startswith("@"):
        handle = handle.lstrip("@").strip()
    return handle.lower()


def normalize_avatar_url(url: str | None) -> str | None:
    """Swap X's 48px '_normal' avatar variant for the 400x400 one."""
    if not url:
        return None
    return url.replace("_normal", "_400x400")
