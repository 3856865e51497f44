"""Non-fatal diagnostics collected during conversion.

Conversion never fails on bad markup; instead the render session records
what it had to work around. Diagnostics are informational only and never
change the rendered output.

Example:
    >>> from saxdown import Converter
    >>> converter = Converter()
    >>> converter.write("<b>unclosed")
    '**unclosed**'
    >>> [d.kind.name for d in converter.diagnostics]
    ['FORCED_CLOSE']
"""

from dataclasses import dataclass
from enum import Enum, auto


class DiagnosticKind(Enum):
    """What the renderer had to work around."""

    UNMAPPED_TAG = auto()  # no dialect rule; passed through or dropped
    MISMATCHED_CLOSE = auto()  # close did not match the innermost open tag
    FORCED_CLOSE = auto()  # still open at end of input
    COLLAPSED = auto()  # inner tag merged with its wrapper


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single diagnostic entry.

    Attributes:
        kind: Category of the event
        name: Tag name concerned
        message: Human-readable description
        position: Index of the triggering event in the input sequence
    """

    kind: DiagnosticKind
    name: str
    message: str
    position: int = -1

    def __str__(self) -> str:
        where = f" (event {self.position})" if self.position >= 0 else ""
        return f"{self.kind.name.lower()}: <{self.name}> {self.message}{where}"


__all__ = ["Diagnostic", "DiagnosticKind"]
