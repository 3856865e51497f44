"""Exception classes for saxdown.

Conversion itself never fails on markup content: malformed or unknown tags
degrade to best-effort output. These exceptions cover programmer and
configuration errors only.
"""

from __future__ import annotations


class SaxdownError(Exception):
    """Base exception for all saxdown errors.

    Subclass this for specific error categories.
    """

    pass


class DialectError(SaxdownError):
    """Invalid dialect table.

    Raised when dialect data has the wrong shape or a tag name is
    registered twice.
    """

    def __init__(self, message: str, tag: str | None = None) -> None:
        """Initialize dialect error.

        Args:
            message: Description of the problem
            tag: Tag name the problem refers to (optional)
        """
        self.tag = tag
        prefix = f"Tag '{tag}': " if tag else ""
        super().__init__(f"{prefix}{message}")


class RenderError(SaxdownError):
    """Misuse of a render session.

    Raised when events are fed to a session that has already been
    finalized.
    """

    pass
