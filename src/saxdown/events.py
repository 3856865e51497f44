"""Parse events and the HTML event source.

The renderer consumes three kinds of event: a tag opened (with its
attributes), text seen, a tag closed. HtmlEventSource produces them from
raw HTML using the standard library's ``html.parser``, with the light tree
repair browsers and SAX-style HTML tokenizers apply:

- void elements (``<br>``, ``<img>``, ...) open and close immediately
- optional end tags are implied (``<li>`` closes an open ``<li>``, a block
  element closes an open ``<p>``)
- closing an outer element closes the elements still open inside it
- stray end tags are dropped, except ``</p>`` and ``</br>``

Elements still open at end of input are left open; closing them is the
renderer's job.

Thread Safety:
Event is frozen and safe to share. HtmlEventSource holds per-document
state; create one per conversion.

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from html.parser import HTMLParser
from typing import Protocol


class EventType(Enum):
    """Kinds of parse event."""

    OPEN = auto()
    TEXT = auto()
    CLOSE = auto()


class EventSink(Protocol):
    """Receiver of parse events."""

    def handle_open(self, name: str, attrs: Mapping[str, str | None]) -> None: ...

    def handle_text(self, data: str) -> None: ...

    def handle_close(self, name: str) -> None: ...


@dataclass(frozen=True, slots=True)
class Event:
    """A single parse event.

    Attributes:
        type: Kind of event
        name: Tag name (OPEN and CLOSE)
        attrs: Attributes in source order (OPEN only); valueless
            attributes map to None
        data: Text content (TEXT only)
    """

    type: EventType
    name: str = ""
    attrs: Mapping[str, str | None] = field(default_factory=dict)
    data: str = ""

    @classmethod
    def open(cls, name: str, attrs: Mapping[str, str | None] | None = None) -> Event:
        return cls(EventType.OPEN, name=name, attrs=dict(attrs or {}))

    @classmethod
    def text(cls, data: str) -> Event:
        return cls(EventType.TEXT, data=data)

    @classmethod
    def close(cls, name: str) -> Event:
        return cls(EventType.CLOSE, name=name)

    def dispatch(self, sink: EventSink) -> None:
        """Deliver this event to ``sink``."""
        match self.type:
            case EventType.OPEN:
                sink.handle_open(self.name, self.attrs)
            case EventType.TEXT:
                sink.handle_text(self.data)
            case EventType.CLOSE:
                sink.handle_close(self.name)


def replay(events: Iterable[Event], sink: EventSink) -> int:
    """Deliver ``events`` to ``sink`` in order. Returns the event count."""
    count = 0
    for event in events:
        event.dispatch(sink)
        count += 1
    return count


class EventCollector:
    """EventSink that records events in a list."""

    __slots__ = ("events",)

    def __init__(self) -> None:
        self.events: list[Event] = []

    def handle_open(self, name: str, attrs: Mapping[str, str | None]) -> None:
        self.events.append(Event.open(name, attrs))

    def handle_text(self, data: str) -> None:
        self.events.append(Event.text(data))

    def handle_close(self, name: str) -> None:
        self.events.append(Event.close(name))


VOID_ELEMENTS = frozenset(
    (
        "area", "base", "basefont", "br", "col", "command", "embed", "frame",
        "hr", "image", "img", "input", "isindex", "keygen", "link", "meta",
        "param", "source", "track", "wbr",
    )
)

_CLOSES_P = frozenset(("p",))
_FORM_TAGS = frozenset(("input", "option", "optgroup", "select", "button", "datalist", "textarea"))

# Opening the key tag closes any open tag from the value set (innermost first)
_IMPLIED_CLOSE: dict[str, frozenset[str]] = {
    "tr": frozenset(("tr", "th", "td")),
    "th": frozenset(("th",)),
    "td": frozenset(("thead", "th", "td")),
    "body": frozenset(("head", "link", "script")),
    "li": frozenset(("li",)),
    "option": frozenset(("option",)),
    "optgroup": frozenset(("optgroup", "option")),
    "dd": frozenset(("dt", "dd")),
    "dt": frozenset(("dt", "dd")),
    "rt": frozenset(("rt", "rp")),
    "rp": frozenset(("rt", "rp")),
    "tbody": frozenset(("thead", "tbody")),
    "tfoot": frozenset(("thead", "tbody")),
    **{tag: _FORM_TAGS for tag in ("select", "input", "output", "button", "datalist", "textarea")},
    **{
        tag: _CLOSES_P
        for tag in (
            "p", "h1", "h2", "h3", "h4", "h5", "h6", "address", "article", "aside",
            "blockquote", "details", "div", "dl", "fieldset", "figcaption", "figure",
            "footer", "form", "header", "hr", "main", "nav", "ol", "pre", "section",
            "table", "ul",
        )
    },
}


class HtmlEventSource(HTMLParser):
    """Turn raw HTML into open/text/close events for an EventSink.

    Character references are decoded before text reaches the sink; tag
    and attribute names arrive lower-cased.

    Usage:
        >>> collector = EventCollector()
        >>> source = HtmlEventSource(collector)
        >>> source.feed("<b>hi</b>")
        >>> source.close()
        >>> [e.type.name for e in collector.events]
        ['OPEN', 'TEXT', 'CLOSE']
    """

    def __init__(self, sink: EventSink) -> None:
        self._sink = sink
        self._open_elements: list[str] = []
        self._pending: list[str] = []
        super().__init__(convert_charrefs=True)

    def reset(self) -> None:
        """Reset parser state, including the open-element stack."""
        super().reset()
        self._open_elements = []
        self._pending = []

    def close(self) -> None:
        """Finish parsing and deliver any buffered text."""
        super().close()
        self._flush_text()

    @property
    def open_elements(self) -> tuple[str, ...]:
        """Elements opened and not yet closed, outermost first."""
        return tuple(self._open_elements)

    # HTMLParser callbacks

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._start(tag, attrs)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._start(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self._end(tag)

    def handle_endtag(self, tag: str) -> None:
        self._end(tag)

    def handle_data(self, data: str) -> None:
        # html.parser may split one text run (e.g. around a stray "<")
        if data:
            self._pending.append(data)

    def _flush_text(self) -> None:
        if self._pending:
            text = "".join(self._pending)
            self._pending.clear()
            self._sink.handle_text(text)

    # Tree repair

    def _start(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._flush_text()
        implied = _IMPLIED_CLOSE.get(tag)
        if implied:
            while self._open_elements and self._open_elements[-1] in implied:
                self._sink.handle_close(self._open_elements.pop())

        # First occurrence of a repeated attribute wins
        attributes: dict[str, str | None] = {}
        for key, value in attrs:
            attributes.setdefault(key, value)

        self._sink.handle_open(tag, attributes)
        if tag in VOID_ELEMENTS:
            self._sink.handle_close(tag)
        else:
            self._open_elements.append(tag)

    def _end(self, tag: str) -> None:
        self._flush_text()
        if tag in self._open_elements:
            while self._open_elements:
                name = self._open_elements.pop()
                self._sink.handle_close(name)
                if name == tag:
                    break
        elif tag in ("p", "br"):
            self._sink.handle_open(tag, {})
            self._sink.handle_close(tag)


def tokenize(html: str) -> list[Event]:
    """Tokenize a complete HTML string into a list of events.

    Example:
        >>> tokenize("<a href='x'>y</a>")
        [Event(type=<EventType.OPEN: 1>, name='a', attrs={'href': 'x'}, data=''), ...]
    """
    collector = EventCollector()
    source = HtmlEventSource(collector)
    source.feed(html)
    source.close()
    return collector.events


__all__ = [
    "Event",
    "EventCollector",
    "EventSink",
    "EventType",
    "HtmlEventSource",
    "VOID_ELEMENTS",
    "replay",
    "tokenize",
]
