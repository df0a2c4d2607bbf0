"""Deterministic roast composition: no network, always returns text."""
from roast_lens.models import RoastContext

SIGN_OFF = "Share this if you're not a coward."

_UNITS = ((1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K"))


def abbreviate(n: int) -> str:
    """Human-readable count: 999 -> '999', 1000 -> '1K', 12345 -> '12.3K', 1500000 -> '1.5M'."""
    sign = "-" if n < 0 else ""
    n = abs(n)
    for i, (size, suffix) in enumerate(_UNITS):
        if n >= size:
            value = round(n / size, 1)
            # 999_950 rounds to 1000.0K; promote to the next unit instead
            if value >= 1000 and i > 0:
                bigger, bigger_suffix = _UNITS[i - 1]
                value, suffix = round(n / bigger, 1), bigger_suffix
            text = f"{value:.1f}".rstrip("0").rstrip(".")
            return f"{sign}{text}{suffix}"
    return f"{sign}{n}"


def _ratio(value: float) -> str:
    return f"{value:g}"


def _metric_lines(ctx: RoastContext) -> list[str]:
    p = ctx.profile
    handle = p.username
    if ctx.metrics_sparse:
        return _sparse_metric_lines(ctx)
    return [
        f"@{handle}, {abbreviate(p.followers)} followers signed up for {abbreviate(p.post_count)} posts of chaos.",
        f"You follow {abbreviate(p.following)} people which makes your clout exchange rate "
        f"a {_ratio(p.follower_ratio)}:1 hustle.",
    ]


def _sparse_metric_lines(ctx: RoastContext) -> list[str]:
    # web-search counts: a 0 means "not found", so it is never quoted
    p = ctx.profile
    handle = p.username
    posts = f"{abbreviate(p.post_count)} posts of chaos" if p.post_count else "an unknown number of posts"
    if p.followers:
        first = f"@{handle}, {abbreviate(p.followers)} followers signed up for {posts}."
    else:
        first = (
            f"@{handle}, even a web search couldn't pin down your follower count. "
            "That's not mystery, that's irrelevance."
        )
    if p.followers and p.following:
        second = (
            f"You follow {abbreviate(p.following)} people which makes your clout exchange rate "
            f"a {_ratio(p.follower_ratio)}:1 hustle."
        )
    elif p.following:
        second = f"You follow {abbreviate(p.following)} people and nobody bothered to count who follows back."
    else:
        second = "Nobody could tell who you follow either, so we'll assume it's mostly brand accounts and your ex."
    return [first, second]


def _bio_line(ctx: RoastContext) -> str:
    bio = ctx.profile.bio or ""
    if not bio:
        return "No bio detected. Bold move to give us zero context and maximum cringe."
    return f'Bio is {len(bio)} characters of "{ctx.bio_preview}" and still manages to dodge personality.'


def _activity_lines(ctx: RoastContext) -> list[str]:
    if ctx.metrics_sparse:
        return ["We couldn't even load your posts, which is honestly the kindest review they'll ever get."]
    lines = [
        f"Recent posts average ~{abbreviate(ctx.avg_engagement)} interactions. "
        "That's not virality, that's a group chat."
        if ctx.avg_engagement
        else "Engagement registers as a flatline, so we're roasting the digital ghost of your content."
    ]
    if ctx.last_activity_hours is not None:
        lines.append(
            f"Last post hit the feed {ctx.last_activity_hours}h ago and it's already aging like milk in direct sunlight."
        )
    else:
        lines.append("Couldn't find a fresh post. Either you're private or procrastinating content like rent.")
    return lines


def compose_roast(ctx: RoastContext) -> str:
    """Build the templated roast from context fields only."""
    lines = _metric_lines(ctx)
    lines.append(_bio_line(ctx))
    lines.extend(_activity_lines(ctx))
    lines.append(SIGN_OFF)
    return " ".join(lines)
