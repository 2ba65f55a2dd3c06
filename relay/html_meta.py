"""
Regex lookups for the handful of <meta> tags the relay cares about.

These match only the documented tag shapes (attribute order included) and
are not an HTML parser.
"""
import re
from typing import Optional

META_CHARSET_RE = re.compile(r"""<meta\s+charset=["']?([\w-]+)["']?""", re.IGNORECASE)
META_CONTENT_TYPE_RE = re.compile(
    r"""<meta\s+http-equiv=["']Content-Type["']\s+content=["'].*charset=([\w-]+)["']""",
    re.IGNORECASE,
)
META_REFRESH_RE = re.compile(
    r"""<meta\s+http-equiv=["']refresh["']\s+content=["']\d+;\s*URL=["']?([^"']+)["']""",
    re.IGNORECASE,
)


def find_meta_charset(text: str) -> Optional[str]:
    """Return the charset declared by <meta charset> or, failing that, by
    <meta http-equiv="Content-Type">."""
    if not text:
        return None

    match = META_CHARSET_RE.search(text)
    if match:
        return match.group(1)

    match = META_CONTENT_TYPE_RE.search(text)
    if match:
        return match.group(1)

    return None


def find_meta_refresh(html: str) -> Optional[str]:
    """Return the raw (possibly relative) target of a meta refresh, if any.

    The delay is ignored.
    """
    if not html:
        return None

    match = META_REFRESH_RE.search(html)
    if match:
        return match.group(1).strip()
    return None
