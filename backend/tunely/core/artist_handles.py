"""Artist Handles — URL-safe public identifiers and the links built from them.

Invariants:
    - Handles are stored lower-case; lookups normalize the same way
    - 3-40 characters of [a-z0-9_-]
"""

import re

from tunely.core.errors import InvalidInputError


HANDLE_PATTERN = re.compile(r"^[a-z0-9_-]{3,40}$")


def normalize_handle(handle: str) -> str:
    normalized = (handle or "").strip().lower()
    if not HANDLE_PATTERN.match(normalized):
        raise InvalidInputError(
            "Handle must be 3-40 characters of letters, digits, '-' or '_'",
            "handle",
        )
    return normalized


def build_share_links(base_url: str, handle: str) -> dict[str, str]:
    """Audience-facing URLs: the request form and the live display."""
    base = base_url.rstrip("/")
    return {
        "request_url": f"{base}/{handle}",
        "display_url": f"{base}/{handle}/live",
    }
