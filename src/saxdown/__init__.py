"""
saxdown: event-driven HTML to Markdown conversion

Converts HTML to a lightweight markup dialect (Markdown by default) in one
streaming pass over parse events, guided by a per-tag rendering table.
Never fails on bad markup: unknown tags pass through (or are dropped),
mismatched closes are tolerated, unclosed tags are closed at the end.

Quick Start:
    >>> from saxdown import convert
    >>> convert('<a href="http://example.org">example</a>')
    '[example](http://example.org)'

    >>> # Reusable converter with options
    >>> from saxdown import Converter
    >>> converter = Converter(strip_tags=True)
    >>> converter.write("<p>Hello <span>World</span></p>")
    'Hello World\\n\\n'

Custom Dialects:
    >>> from saxdown import TagSpec, create_dialect_builder
    >>> builder = create_dialect_builder()
    >>> builder.register("del", TagSpec(open="~~", close="~~"))
    >>> converter = Converter(dialect=builder.build())

Installation:
    pip install saxdown              # zero runtime deps
"""

from collections.abc import Iterable, Mapping
from typing import Any

from saxdown.config import (
    ConvertConfig,
    convert_config_context,
    get_convert_config,
    reset_convert_config,
    set_convert_config,
)
from saxdown.diagnostics import Diagnostic, DiagnosticKind
from saxdown.dialect import (
    MARKDOWN_TABLE,
    AttrSpec,
    Dialect,
    DialectBuilder,
    ListKind,
    TagSpec,
    create_default_dialect,
    create_dialect_builder,
)
from saxdown.errors import DialectError, RenderError, SaxdownError
from saxdown.events import Event, EventType, HtmlEventSource, tokenize
from saxdown.machine import RenderMachine, RenderSession, finalize, render_events
from saxdown.profiling import ConvertAccumulator, get_convert_accumulator, profiled_convert
from saxdown.reconstruct import rebuild_tag
from saxdown.utils.logger import get_logger

__version__ = "0.1.0"

logger = get_logger(__name__)

DialectLike = Dialect | Mapping[str, Mapping[str, Any]]


def _as_dialect(dialect: DialectLike | None) -> Dialect | None:
    if dialect is None or isinstance(dialect, Dialect):
        return dialect
    return Dialect.from_dict(dialect)


def _normalize(html: str) -> str:
    """Drop literal newlines and tabs; they are insignificant in the source."""
    return html.replace("\n", "").replace("\t", "")


class Converter:
    """HTML to Markdown converter.

    Usage:
        >>> converter = Converter()
        >>> converter.write("<b>this is a test</b>")
        '**this is a test**'

        >>> # Dialect as a plain mapping
        >>> converter = Converter(dialect={"b": {"open": "__", "close": "__"}})
        >>> converter("<b>x</b>")
        '__x__'

    Settings not given explicitly fall back to the active ConvertConfig
    (see saxdown.config), then to the defaults.

    Thread Safety:
        Every write() builds its own event source and render session, so a
        single Converter can be shared across threads. ``diagnostics`` only
        reflects whichever call finished last.

    """

    __slots__ = ("_dialect", "_strip_tags", "_last_diagnostics")

    def __init__(
        self,
        *,
        dialect: DialectLike | None = None,
        strip_tags: bool | None = None,
    ) -> None:
        """Initialize converter.

        Args:
            dialect: Rendering table, or a plain mapping in the dialect
                schema (see Dialect.from_dict)
            strip_tags: Drop tags the dialect does not map instead of
                passing them through as HTML

        Raises:
            DialectError: If a mapping dialect is malformed
        """
        self._dialect = _as_dialect(dialect)
        self._strip_tags = strip_tags
        self._last_diagnostics: tuple[Diagnostic, ...] = ()

    def write(self, html: str) -> str:
        """Convert an HTML string to Markdown.

        Args:
            html: HTML source

        Returns:
            Finalized Markdown string
        """
        machine = self._machine()
        source = HtmlEventSource(machine)
        source.feed(_normalize(html))
        source.close()
        return self._finish(machine, len(html))

    __call__ = write

    def convert_events(self, events: Iterable[Event]) -> str:
        """Render an already tokenized event sequence to Markdown."""
        machine = self._machine()
        machine.feed(events)
        return self._finish(machine, 0)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """Diagnostics recorded by the most recent conversion."""
        return list(self._last_diagnostics)

    def _machine(self) -> RenderMachine:
        config = get_convert_config()
        dialect = self._dialect if self._dialect is not None else config.dialect
        strip_tags = config.strip_tags if self._strip_tags is None else self._strip_tags
        return RenderMachine(
            dialect,
            strip_tags=strip_tags,
            collect_diagnostics=config.collect_diagnostics,
            text_transformer=config.text_transformer,
        )

    def _finish(self, machine: RenderMachine, source_length: int) -> str:
        markdown = machine.finish()
        self._last_diagnostics = tuple(machine.diagnostics)
        if self._last_diagnostics:
            logger.debug("conversion finished with %d diagnostics", len(self._last_diagnostics))

        acc = get_convert_accumulator()
        if acc is not None:
            acc.record_convert(
                source_length=source_length,
                event_count=machine.session.position + 1,
                output_length=len(markdown),
            )
        return markdown


def convert(
    html: str,
    *,
    dialect: DialectLike | None = None,
    strip_tags: bool | None = None,
) -> str:
    """Convert HTML to Markdown in one call.

    Args:
        html: HTML source
        dialect: Optional rendering table (default Markdown dialect)
        strip_tags: Drop unmapped tags instead of passing them through

    Returns:
        Markdown string

    Example:
        >>> convert("<h1>test</h1><h2>test</h2>")
        '# test\\n\\n## test\\n\\n'
    """
    return Converter(dialect=dialect, strip_tags=strip_tags).write(html)


__all__ = [  # noqa: RUF022 (grouped by category)
    # Version
    "__version__",
    # Core API
    "convert",
    "Converter",
    # Dialects
    "AttrSpec",
    "Dialect",
    "DialectBuilder",
    "ListKind",
    "MARKDOWN_TABLE",
    "TagSpec",
    "create_default_dialect",
    "create_dialect_builder",
    # Events
    "Event",
    "EventType",
    "HtmlEventSource",
    "tokenize",
    # Rendering
    "RenderMachine",
    "RenderSession",
    "finalize",
    "render_events",
    "rebuild_tag",
    # Diagnostics and errors
    "Diagnostic",
    "DiagnosticKind",
    "DialectError",
    "RenderError",
    "SaxdownError",
    # Profiling
    "ConvertAccumulator",
    "get_convert_accumulator",
    "profiled_convert",
    # Configuration (ContextVar-based)
    "ConvertConfig",
    "get_convert_config",
    "set_convert_config",
    "reset_convert_config",
    "convert_config_context",
]
