"""Event-driven render stack machine.

Consumes open/text/close events and accumulates Markdown fragments in a
StringBuilder, guided by a Dialect. All nesting state lives in a
RenderSession created fresh for each conversion.

Deferred insertion:
Some target constructs put an element's text *after* markers derived from
its attributes in source order, e.g. ``<a href="u">text</a>`` must become
``[text](u)`` although ``href`` is known at open time and ``text`` only
arrives later. When a tag's attribute list contains the dialect's text key,
the machine emits every attribute marker immediately and remembers the
fragment index right after the text key's open marker (the splice cursor).
Until that tag closes, text and nested markers are inserted at the cursor,
which advances past each insertion.

Block spacing:
Block tags are separated from preceding output by a blank line, or by a
single line break inside an indented context (nested lists, quotes).

Thread Safety:
A RenderMachine owns one RenderSession and is single-use. Create one per
conversion; never share one between threads.

"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from saxdown.dialect import Dialect, ListKind, TagSpec, create_default_dialect
from saxdown.diagnostics import Diagnostic, DiagnosticKind
from saxdown.errors import RenderError
from saxdown.events import Event, replay
from saxdown.reconstruct import rebuild_tag
from saxdown.stringbuilder import StringBuilder
from saxdown.utils.logger import get_logger

logger = get_logger(__name__)

BLANK_LINE = "\n\n"
LINE_BREAK = "\n"


def finalize(markdown: str) -> str:
    """Collapse markup-insignificant whitespace in rendered output.

    A single left-to-right pass turns each pair of spaces into one, then a
    space before a line break is dropped.

    Example:
        >>> finalize("1.  item \\n")
        '1. item\\n'
    """
    return markdown.replace("  ", " ").replace(" \n", "\n")


@dataclass(slots=True)
class RenderSession:
    """Per-conversion mutable state.

    Attributes:
        output: Accumulated output fragments
        open_tags: Names of mapped tags currently open, innermost last
        list_kinds: Kinds of the list containers currently open
        indents: Effective names of open tags contributing indentation
        splice_tags: Tags whose inner text is being deferred
        splice_cursor: Fragment index where deferred fragments go next
        suppress_next_close: Skip the close marker of the close being handled
        collapsed: (inner, wrapper) pairs merged into one unit, inner still open
        pending_wrappers: Wrappers of closed collapsed units, whose own close
            marker is skipped; innermost last
        trim_newlines: Strip line breaks from text (inside list items)
        current: Rule of the most recently opened tag while it is open
        current_text_seen: A text event arrived since ``current`` opened
        diagnostics: Workarounds recorded so far
        position: Index of the event being handled
        finished: finish() has run
    """

    output: StringBuilder = field(default_factory=StringBuilder)
    open_tags: list[str] = field(default_factory=list)
    list_kinds: list[ListKind] = field(default_factory=list)
    indents: list[str] = field(default_factory=list)
    splice_tags: list[str] = field(default_factory=list)
    splice_cursor: int = 0
    suppress_next_close: bool = False
    collapsed: list[tuple[str, str]] = field(default_factory=list)
    pending_wrappers: list[str] = field(default_factory=list)
    trim_newlines: bool = False
    current: TagSpec | None = None
    current_text_seen: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)
    position: int = -1
    finished: bool = False

    @property
    def splicing(self) -> bool:
        return bool(self.splice_tags)


class RenderMachine:
    """Render one event sequence to Markdown.

    Usage:
        >>> machine = RenderMachine()
        >>> machine.handle_open("a", {"href": "http://example.org"})
        >>> machine.handle_text("example")
        >>> machine.handle_close("a")
        >>> machine.finish()
        '[example](http://example.org)'

    Implements the EventSink protocol, so an HtmlEventSource can drive it
    directly.
    """

    __slots__ = ("_dialect", "_strip_tags", "_collect", "_text_transformer", "_session")

    def __init__(
        self,
        dialect: Dialect | None = None,
        *,
        strip_tags: bool = False,
        collect_diagnostics: bool = True,
        text_transformer: Callable[[str], str] | None = None,
    ) -> None:
        """Initialize machine.

        Args:
            dialect: Rendering table (default Markdown dialect if None)
            strip_tags: Drop unmapped tags instead of reconstructing them
            collect_diagnostics: Record diagnostics in the session
            text_transformer: Optional callback applied to each text event
        """
        self._dialect = dialect if dialect is not None else create_default_dialect()
        self._strip_tags = strip_tags
        self._collect = collect_diagnostics
        self._text_transformer = text_transformer
        self._session = RenderSession()

    @property
    def session(self) -> RenderSession:
        return self._session

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(self._session.diagnostics)

    # =========================================================================
    # Event handlers
    # =========================================================================

    def handle_open(self, name: str, attrs: Mapping[str, str | None]) -> None:
        """Handle a tag opening."""
        s = self._advance()
        dialect = self._dialect

        effective = name
        if dialect.is_item(name):
            # Item text must not break a tight list apart
            s.trim_newlines = True
            kind = s.list_kinds[-1] if s.list_kinds else None
            effective = dialect.item_name(kind) or name

        spec = dialect.resolve(effective)
        if spec is None:
            s.current = None
            self._unmapped(name, rebuild_tag(name, attrs, "open"))
            return

        s.current = spec
        s.current_text_seen = False
        s.open_tags.append(name)
        kind = dialect.list_kind(name)
        if kind is not None:
            s.list_kinds.append(kind)

        self._collapse(name, effective)

        if spec.block and s.output and not s.output.ends_with(BLANK_LINE):
            if not s.indents:
                s.output.append(BLANK_LINE)
            elif not s.output.ends_with(LINE_BREAK):
                s.output.append(LINE_BREAK)

        if s.indents:
            unit = self._indent_unit(s.indents[-1])
            s.output.append(unit * len(s.indents))

        # The outermost list level is not itself indented
        if spec.indentable and len(s.list_kinds) != 1:
            s.indents.append(effective)

        self._emit(spec.open)

        if spec.attrs:
            self._render_attrs(name, spec, attrs)

    def handle_text(self, data: str) -> None:
        """Handle a run of text."""
        s = self._advance()
        if self._text_transformer is not None:
            data = self._text_transformer(data)

        # Only the first text of a block tag checks that its marker precedes it
        spec = s.current
        if spec is not None and not s.current_text_seen:
            s.current_text_seen = True
            if spec.block and spec.open and s.output.last() != spec.open:
                self._emit(spec.open)

        if s.splicing:
            s.splice_cursor = s.output.insert(s.splice_cursor, data)
            return

        if s.trim_newlines or (data == LINE_BREAK and s.output.ends_with(LINE_BREAK)):
            data = data.replace("\n", "")
        s.output.append(data)

    def handle_close(self, name: str) -> None:
        """Handle a tag closing."""
        self._advance()
        self._close(name)

    def feed(self, events: Iterable[Event]) -> int:
        """Handle a sequence of events. Returns the number handled."""
        return replay(events, self)

    def finish(self) -> str:
        """Close tags left open, then return the finalized Markdown.

        Tags are closed innermost first, one synthesized close per open tag.
        """
        s = self._session
        if s.finished:
            raise RenderError("render session already finished")

        while s.open_tags:
            name = s.open_tags[-1]
            self._diagnose(DiagnosticKind.FORCED_CLOSE, name, "still open at end of input")
            self._close(name)

        s.finished = True
        return finalize(s.output.build())

    # =========================================================================
    # Internals
    # =========================================================================

    def _advance(self) -> RenderSession:
        s = self._session
        if s.finished:
            raise RenderError("cannot handle events after finish()")
        s.position += 1
        return s

    def _close(self, name: str) -> None:
        s = self._session
        dialect = self._dialect
        matched = bool(s.open_tags) and s.open_tags[-1] == name

        effective = name
        if dialect.is_item(name):
            s.trim_newlines = False
            kind = s.list_kinds[-1] if s.list_kinds else None
            effective = dialect.item_name(kind) or name

        spec = dialect.resolve(effective)
        if spec is None:
            self._unmapped(name, rebuild_tag(name, phase="close"))
            s.suppress_next_close = False
            return

        if not matched:
            self._diagnose(
                DiagnosticKind.MISMATCHED_CLOSE,
                name,
                f"does not match innermost open tag {s.open_tags[-1]!r}"
                if s.open_tags
                else "closes a tag that is not open",
            )
        elif dialect.list_kind(name) is not None and s.list_kinds:
            s.list_kinds.pop()

        # A collapsed unit already closed for its wrapper
        if matched and s.pending_wrappers and s.pending_wrappers[-1] == name:
            s.pending_wrappers.pop()
            s.suppress_next_close = True

        if not s.suppress_next_close and spec.close:
            self._emit(spec.close)

        if spec.indentable and s.indents and s.indents[-1] == effective:
            s.indents.pop()

        if s.splice_tags and s.splice_tags[-1] == name:
            s.splice_tags.pop()

        if spec.block:
            s.output.append(LINE_BREAK if s.indents else BLANK_LINE)

        if matched:
            s.open_tags.pop()

        if s.current is spec:
            s.current = None

        s.suppress_next_close = False
        if matched and s.collapsed and s.collapsed[-1][0] == name:
            _, wrapper = s.collapsed.pop()
            s.pending_wrappers.append(wrapper)

    def _collapse(self, name: str, effective: str) -> None:
        """Merge ``name`` with its immediately enclosing wrapper, if declared.

        Only the direct parent is checked, and only when the wrapper's open
        marker is the most recent fragment (nothing rendered in between).
        """
        s = self._session
        wrapper = self._dialect.collapse_wrapper(effective)
        if wrapper is None or len(s.open_tags) < 2 or s.open_tags[-2] != wrapper:
            return

        wrapper_spec = self._dialect.resolve(wrapper)
        if wrapper_spec is None or s.splicing:
            return
        if wrapper_spec.open:
            if s.output.last() != wrapper_spec.open:
                return
            s.output.pop()

        s.collapsed.append((name, wrapper))
        self._diagnose(DiagnosticKind.COLLAPSED, name, f"merged into enclosing <{wrapper}>")

    def _render_attrs(self, name: str, spec: TagSpec, attrs: Mapping[str, str | None]) -> None:
        """Render attribute markers in the rule's declared order.

        The text key emits only its markers and starts deferred insertion
        between them; other keys wrap the event's attribute value, if any.
        Inside an outer deferred region the markers go to the outer cursor.
        """
        s = self._session
        text_key = self._dialect.text_key
        pos: int | None = s.splice_cursor if s.splicing else None
        cursor: int | None = None

        def put(fragment: str) -> None:
            nonlocal pos
            if pos is None:
                s.output.append(fragment)
            else:
                pos = s.output.insert(pos, fragment)

        for key, marker in spec.attrs:
            put(marker.open)
            if key == text_key:
                cursor = len(s.output) if pos is None else pos
            else:
                value = attrs.get(key)
                if value is not None:
                    put(value)
            put(marker.close)

        if cursor is not None:
            s.splice_cursor = cursor
            s.splice_tags.append(name)
        elif pos is not None:
            s.splice_cursor = pos

    def _emit(self, fragment: str) -> None:
        """Append ``fragment``, or insert it at the cursor while deferring."""
        s = self._session
        if s.splicing:
            s.splice_cursor = s.output.insert(s.splice_cursor, fragment)
        else:
            s.output.append(fragment)

    def _indent_unit(self, name: str) -> str:
        spec = self._dialect.resolve(name)
        if spec is None:
            return ""
        return spec.indent or ""

    def _unmapped(self, name: str, literal: str) -> None:
        self._diagnose(
            DiagnosticKind.UNMAPPED_TAG,
            name,
            "dropped" if self._strip_tags else "passed through",
        )
        if not self._strip_tags:
            self._session.output.append(literal)

    def _diagnose(self, kind: DiagnosticKind, name: str, message: str) -> None:
        s = self._session
        logger.debug("%s <%s>: %s", kind.name, name, message)
        if self._collect:
            s.diagnostics.append(Diagnostic(kind, name, message, s.position))


def render_events(
    events: Iterable[Event],
    *,
    dialect: Dialect | None = None,
    strip_tags: bool = False,
) -> str:
    """Render an event sequence to Markdown in one call.

    Example:
        >>> from saxdown.events import Event
        >>> render_events([Event.open("b"), Event.text("hi"), Event.close("b")])
        '**hi**'
    """
    machine = RenderMachine(dialect, strip_tags=strip_tags)
    machine.feed(events)
    return machine.finish()


__all__ = [
    "BLANK_LINE",
    "LINE_BREAK",
    "RenderMachine",
    "RenderSession",
    "finalize",
    "render_events",
]
