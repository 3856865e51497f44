"""Tests for parse events and the HTML event source."""

import pytest

from saxdown.events import (
    VOID_ELEMENTS,
    Event,
    EventCollector,
    EventType,
    HtmlEventSource,
    replay,
    tokenize,
)


def shape(events: list[Event]) -> list[tuple[str, str]]:
    """Compact (kind, name-or-text) view of an event list."""
    return [
        (e.type.name, e.data if e.type is EventType.TEXT else e.name)
        for e in events
    ]


class TestEvent:
    """Event value objects."""

    def test_constructors(self) -> None:
        assert Event.open("a", {"href": "u"}).attrs == {"href": "u"}
        assert Event.open("b").attrs == {}
        assert Event.text("x").type is EventType.TEXT
        assert Event.close("b").name == "b"

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Event.text("x").data = "y"  # type: ignore[misc]

    def test_replay_counts_and_dispatches(self) -> None:
        collector = EventCollector()
        events = [Event.open("b"), Event.text("x"), Event.close("b")]
        assert replay(events, collector) == 3
        assert collector.events == events


class TestTokenize:
    """Events produced from raw HTML."""

    def test_simple_element(self) -> None:
        assert shape(tokenize("<b>x</b>")) == [("OPEN", "b"), ("TEXT", "x"), ("CLOSE", "b")]

    def test_names_lowercased(self) -> None:
        assert shape(tokenize("<B>x</B>")) == [("OPEN", "b"), ("TEXT", "x"), ("CLOSE", "b")]

    def test_void_element_closes_immediately(self) -> None:
        assert shape(tokenize("<br>")) == [("OPEN", "br"), ("CLOSE", "br")]
        assert shape(tokenize("<img src='s'/>")) == [("OPEN", "img"), ("CLOSE", "img")]

    def test_self_closing_non_void(self) -> None:
        assert shape(tokenize("<span/>")) == [("OPEN", "span"), ("CLOSE", "span")]

    def test_implied_item_close(self) -> None:
        assert shape(tokenize("<ol><li>a<li>b</ol>")) == [
            ("OPEN", "ol"),
            ("OPEN", "li"),
            ("TEXT", "a"),
            ("CLOSE", "li"),
            ("OPEN", "li"),
            ("TEXT", "b"),
            ("CLOSE", "li"),
            ("CLOSE", "ol"),
        ]

    def test_block_closes_paragraph(self) -> None:
        assert shape(tokenize("<p>a<div>b</div>")) == [
            ("OPEN", "p"),
            ("TEXT", "a"),
            ("CLOSE", "p"),
            ("OPEN", "div"),
            ("TEXT", "b"),
            ("CLOSE", "div"),
        ]

    def test_outer_close_closes_inner(self) -> None:
        assert shape(tokenize("<b><i>x</b>")) == [
            ("OPEN", "b"),
            ("OPEN", "i"),
            ("TEXT", "x"),
            ("CLOSE", "i"),
            ("CLOSE", "b"),
        ]

    def test_unclosed_left_open(self) -> None:
        assert shape(tokenize("<b>x")) == [("OPEN", "b"), ("TEXT", "x")]

    def test_stray_close_dropped(self) -> None:
        assert tokenize("</span>") == []

    @pytest.mark.parametrize("name", ["p", "br"])
    def test_stray_close_kept_for_p_and_br(self, name: str) -> None:
        assert shape(tokenize(f"</{name}>")) == [("OPEN", name), ("CLOSE", name)]

    def test_entities_decoded(self) -> None:
        assert shape(tokenize("a &amp; b")) == [("TEXT", "a & b")]

    def test_text_run_coalesced(self) -> None:
        events = tokenize("a < b")
        assert [e.data for e in events] == ["a < b"]

    def test_comments_dropped(self) -> None:
        assert shape(tokenize("a<!-- c -->b")) == [("TEXT", "ab")]

    def test_attribute_order_kept(self) -> None:
        (event, _) = tokenize('<img src="s" alt="a">')
        assert list(event.attrs) == ["src", "alt"]

    def test_first_duplicate_attribute_wins(self) -> None:
        event = tokenize('<a href="1" href="2">')[0]
        assert event.attrs == {"href": "1"}

    def test_valueless_attribute(self) -> None:
        event = tokenize("<input disabled>")[0]
        assert event.attrs == {"disabled": None}


class TestHtmlEventSource:
    """Incremental feeding and parser state."""

    def test_chunked_feed(self) -> None:
        collector = EventCollector()
        source = HtmlEventSource(collector)
        source.feed("<b>hel")
        source.feed("lo</b>")
        source.close()
        assert shape(collector.events) == [("OPEN", "b"), ("TEXT", "hello"), ("CLOSE", "b")]

    def test_open_elements(self) -> None:
        source = HtmlEventSource(EventCollector())
        source.feed("<div><p>x")
        assert source.open_elements == ("div", "p")

    def test_reset_clears_open_elements(self) -> None:
        source = HtmlEventSource(EventCollector())
        source.feed("<div>")
        source.reset()
        assert source.open_elements == ()

    def test_void_elements_never_pushed(self) -> None:
        source = HtmlEventSource(EventCollector())
        source.feed("<hr><br><img>")
        assert source.open_elements == ()
        assert {"hr", "br", "img"} <= VOID_ELEMENTS
