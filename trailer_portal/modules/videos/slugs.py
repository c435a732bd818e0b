import re
import unicodedata
from typing import Awaitable, Callable

FALLBACK_SLUG = "video"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

def slugify(title: str) -> str:
    """Lowercase ASCII token with runs of other characters collapsed to one hyphen."""
    ascii_title = unicodedata.normalize("NFKD", title or "").encode("ascii", "ignore").decode("ascii")
    token = _NON_ALNUM.sub("-", ascii_title.lower()).strip("-")
    return token or FALLBACK_SLUG

async def allocate_slug(title: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    base = slugify(title)
    candidate = base
    n = 2
    while await exists(candidate):
        candidate = f"{base}-{n}"
        n += 1
    return candidate
