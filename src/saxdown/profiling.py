"""ConvertAccumulator: opt-in profiling for HTML to Markdown conversion.

This module provides accumulated metrics during conversion:
- Total time inside the profiled block
- Source and output length
- Number of parse events rendered

Zero overhead when disabled (get_convert_accumulator() returns None).

Example:
    from saxdown import convert
    from saxdown.profiling import profiled_convert

    with profiled_convert() as metrics:
        convert("<p>Hello <b>World</b></p>")

    print(metrics.summary())
    # {"total_ms": 0.3, "convert_calls": 1, "source_length": 26, ...}

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any


@dataclass
class ConvertAccumulator:
    """Accumulated metrics during conversion.

    Attributes:
        start_time: Profiling start timestamp.
        source_length: Total length of converted sources.
        event_count: Total number of events rendered.
        output_length: Total length of produced Markdown.
        convert_calls: Number of conversions recorded.

    """

    start_time: float = field(default_factory=perf_counter)
    source_length: int = 0
    event_count: int = 0
    output_length: int = 0
    convert_calls: int = 0

    def record_convert(self, source_length: int, event_count: int, output_length: int) -> None:
        """Record one conversion."""
        self.convert_calls += 1
        self.source_length += source_length
        self.event_count += event_count
        self.output_length += output_length

    @property
    def total_duration_ms(self) -> float:
        """Total profiling duration in milliseconds."""
        return (perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Get summary of conversion metrics."""
        return {
            "total_ms": round(self.total_duration_ms, 2),
            "convert_calls": self.convert_calls,
            "source_length": self.source_length,
            "event_count": self.event_count,
            "output_length": self.output_length,
        }


_accumulator: ContextVar[ConvertAccumulator | None] = ContextVar(
    "convert_accumulator",
    default=None,
)


def get_convert_accumulator() -> ConvertAccumulator | None:
    """Get current accumulator (None if profiling disabled)."""
    return _accumulator.get()


@contextmanager
def profiled_convert() -> Iterator[ConvertAccumulator]:
    """Context manager for profiled conversion.

    Creates a ConvertAccumulator and makes it available via
    get_convert_accumulator() for the duration of the with block.

    Yields:
        ConvertAccumulator populated by conversions inside the block.

    """
    acc = ConvertAccumulator()
    token: Token[ConvertAccumulator | None] = _accumulator.set(acc)
    try:
        yield acc
    finally:
        _accumulator.reset(token)
