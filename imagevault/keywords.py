"""
Keyword list <-> object tag codec.

Keywords live in a single object tag named ``keywords``. The list is joined
with ``|`` and percent-encoded the way a browser's encodeURIComponent does,
so the tag can travel inside the ``x-amz-tagging`` query string.

A keyword that itself contains ``|`` is not escaped: it comes back as two
keywords after a round trip.
"""
from typing import Iterable, List, Optional
from urllib.parse import quote, unquote

KEYWORDS_TAG = "keywords"
SEPARATOR = "|"

# Characters encodeURIComponent leaves alone on top of quote()'s defaults
_COMPONENT_SAFE = "!*'()"


def parse_keywords(csv: Optional[str]) -> List[str]:
    """Split a comma-separated string into trimmed, lowercased, non-empty keywords."""
    if not csv:
        return []
    keywords = [part.strip().lower() for part in csv.split(",")]
    return [keyword for keyword in keywords if keyword]


def encode_keywords(keywords: Iterable[str]) -> str:
    return SEPARATOR.join(keywords)


def decode_keywords(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return unquote(value).split(SEPARATOR)


def tagging_header(keywords: List[str]) -> Optional[str]:
    """Build the tagging query string for a put, or None when there is nothing to tag."""
    if not keywords:
        return None
    return f"{KEYWORDS_TAG}={quote(encode_keywords(keywords), safe=_COMPONENT_SAFE)}"


def matches(keywords: Iterable[str], query: Optional[str]) -> bool:
    if not query:
        return True
    needle = query.lower()
    return any(needle in keyword.lower() for keyword in keywords)
