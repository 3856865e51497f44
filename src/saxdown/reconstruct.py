"""Literal tag reconstruction for unmapped tags.

When pass-through is enabled, tags the dialect does not know are copied
into the output as HTML so no markup is silently lost.

Example:
    >>> rebuild_tag("span", {"class": "x"})
    '<span class="x">'
    >>> rebuild_tag("span", phase="close")
    '</span>'
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

from saxdown.events import VOID_ELEMENTS

Phase = Literal["open", "close"]


def _quote(value: str) -> str:
    # Only the delimiter and the escape character need escaping inside a
    # double-quoted attribute value.
    return value.replace("&", "&amp;").replace('"', "&quot;")


def rebuild_tag(
    name: str,
    attrs: Mapping[str, str | None] | None = None,
    phase: Phase = "open",
) -> str:
    """Rebuild the literal text of an opening or closing tag.

    Args:
        name: Tag name
        attrs: Attributes in source order; valueless attributes are None
        phase: "open" for ``<name ...>``, "close" for ``</name>``

    Returns:
        Tag text. Closing a void element (``br``, ``img``, ...) yields an
        empty string since such elements have no end tag.
    """
    if phase == "close":
        if name in VOID_ELEMENTS:
            return ""
        return f"</{name}>"

    parts = [f"<{name}"]
    for key, value in (attrs or {}).items():
        if value is None:
            parts.append(f" {key}")
        else:
            parts.append(f' {key}="{_quote(value)}"')
    parts.append(">")
    return "".join(parts)
