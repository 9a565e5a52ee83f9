import html
from typing import Optional

import bleach


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """Clean user-supplied free text before it is stored.

    - Removes NULL bytes
    - Strips every HTML tag using bleach.clean(..., tags=set(), strip=True)
    - Unescapes the entities bleach introduces, so "Tom & Jerry" survives as is
    - Trims whitespace

    None passes through unchanged so optional fields stay null.
    """
    if value is None:
        return None
    val = value.replace("\x00", "")
    val = bleach.clean(val, tags=set(), strip=True)
    val = html.unescape(val)
    return val.strip()
