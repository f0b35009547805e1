"""URL slugs derived from article titles."""

import re

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]+", re.ASCII)
_REPEATED_DASH = re.compile(r"--+")

# Used when a title has no ASCII word characters at all
FALLBACK_SLUG = "article"


def generate_slug(text: str) -> str:
    """Lowercase, dash-separated ASCII slug.

    Example:
        >>> generate_slug("  Hello,  World! ")
        'hello-world'
    """
    slug = _WHITESPACE.sub("-", text.lower().strip())
    slug = _NON_WORD.sub("", slug)
    slug = _REPEATED_DASH.sub("-", slug)
    return slug.strip("-") or FALLBACK_SLUG


def generate_slug_with_counter(text: str, counter: int) -> str:
    """Slug with a ``-N`` suffix for the N-th duplicate; no suffix for 0."""
    base = generate_slug(text)
    return f"{base}-{counter}" if counter > 0 else base
