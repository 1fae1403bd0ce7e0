"""URL-safe slug generation for Persian, Arabic and Latin names."""

import re
from typing import Iterable

# Persian (U+06F0-U+06F9) and Arabic-Indic (U+0660-U+0669) digits to ASCII
_DIGITS = str.maketrans(
    {
        **{chr(0x06F0 + i): str(i) for i in range(10)},
        **{chr(0x0660 + i): str(i) for i in range(10)},
    }
)

# Whitespace as browsers define it (includes U+FEFF, excludes U+001C-U+001F and U+0085)
_WS = r"\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"

_DISALLOWED = re.compile(
    r"[^\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFEa-z0-9" + _WS + r"-]"
)
_WHITESPACE = re.compile(f"[{_WS}]+")
_EDGE_WHITESPACE = re.compile(f"^[{_WS}]+|[{_WS}]+$")
_HYPHENS = re.compile(r"-+")


def generate_slug(text: str) -> str:
    """Convert a display name to a URL-safe slug.

    Keeps Persian/Arabic letters, Latin letters and digits. Everything else is
    dropped, whitespace becomes single hyphens.

    Args:
        text: Name to slugify (e.g. "کفش ورزشی!!").

    Returns:
        Slug (e.g. "کفش-ورزشی"), or "" when nothing usable survives.
    """
    if not text or not isinstance(text, str):
        return ""

    slug = _EDGE_WHITESPACE.sub("", text.lower())
    slug = slug.translate(_DIGITS)
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub(" ", slug)
    slug = slug.replace(" ", "-")
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def generate_unique_slug(base_slug: str, existing_slugs: Iterable[str]) -> str:
    """Return ``base_slug`` or the first free ``base_slug-N`` (N >= 2).

    ``existing_slugs`` is a snapshot the caller read from storage. Nothing is
    locked here, so two writers holding the same stale snapshot can get the
    same answer; the storage unique index decides.
    """
    taken = set(existing_slugs)
    if base_slug not in taken:
        return base_slug

    counter = 2
    candidate = f"{base_slug}-{counter}"
    while candidate in taken:
        counter += 1
        candidate = f"{base_slug}-{counter}"
    return candidate
