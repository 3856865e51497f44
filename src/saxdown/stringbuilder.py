"""StringBuilder for O(n) output accumulation with cursor insertion.

Appends to a list of fragments, joins once at the end. Unlike a plain
accumulator, fragments can also be inserted at an earlier index, which is
how the renderer places text that arrives after markers it must precede
(link text before its URL).

Fragment boundaries are observable: ``last()`` and ``pop()`` work on whole
fragments, not characters, because the renderer compares against the exact
markers it emitted.

Thread Safety:
StringBuilder instances are local to each conversion.
No shared mutable state.

"""

from __future__ import annotations


class StringBuilder:
    """Fragment accumulator supporting append and positional insert.

    Usage:
            >>> sb = StringBuilder()
            >>> sb.append("[").append("]").append("(url)")
            >>> sb.insert(1, "text")
            >>> sb.build()
            '[text](url)'

    Empty strings are never stored.

    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        """Initialize empty StringBuilder."""
        self._parts: list[str] = []

    def append(self, s: str) -> StringBuilder:
        """Append a fragment.

        Args:
            s: String to append (empty strings are skipped)

        Returns:
            self for method chaining
        """
        if s:
            self._parts.append(s)
        return self

    def insert(self, index: int, s: str) -> int:
        """Insert a fragment before ``index``.

        Args:
            index: Fragment index to insert at (clamped to the buffer)
            s: String to insert (empty strings are skipped)

        Returns:
            The index just past the inserted fragment, i.e. where the next
            fragment must go to follow this one. Unchanged if ``s`` is empty.
        """
        if not s:
            return index
        index = max(0, min(index, len(self._parts)))
        self._parts.insert(index, s)
        return index + 1

    def pop(self) -> str | None:
        """Remove and return the last fragment, or None if empty."""
        if not self._parts:
            return None
        return self._parts.pop()

    def last(self) -> str | None:
        """Return the last fragment without removing it."""
        return self._parts[-1] if self._parts else None

    def ends_with(self, suffix: str) -> bool:
        """Check whether the last fragment ends with ``suffix``."""
        return bool(self._parts) and self._parts[-1].endswith(suffix)

    def build(self) -> str:
        """Join all fragments into the final string."""
        return "".join(self._parts)

    def __len__(self) -> int:
        """Return number of fragments (not total length)."""
        return len(self._parts)

    def __bool__(self) -> bool:
        """Return True if any fragments have been appended."""
        return bool(self._parts)
