"""Dialect tables: per-tag rendering rules for a target markup syntax.

A dialect maps HTML tag names to TagSpec entries (open/close markers,
block and indent behavior, attribute rendering) and records the few
structural roles the renderer switches on: which tags are list
containers, which tag is the generic list item, which item variant each
list kind renders with, and which tag pairs collapse into one unit.

Thread Safety:
Dialect is immutable after creation. Safe to share.
Use DialectBuilder for mutable construction.

Example:
    >>> builder = DialectBuilder()
    >>> builder.register("b", TagSpec(open="**", close="**"))
    >>> builder.alias("strong", "b")
    >>> dialect = builder.build()
    >>> dialect.resolve("strong").open
    '**'
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from saxdown.errors import DialectError


class ListKind(Enum):
    """Kinds of list container."""

    ORDERED = "ol"
    UNORDERED = "ul"


@dataclass(frozen=True, slots=True)
class AttrSpec:
    """Markers wrapping one rendered attribute value."""

    open: str = ""
    close: str = ""


@dataclass(frozen=True, slots=True)
class TagSpec:
    """Rendering rule for one tag name.

    Attributes:
        open: Marker emitted when the tag opens
        close: Marker emitted when the tag closes
        block: Tag occupies its own paragraph unit
        indent: Indent unit for nested children (None = not indentable)
        attrs: Ordered (key, AttrSpec) pairs rendered after ``open``.
            The dialect's text key stands for the element's inner text.
    """

    open: str = ""
    close: str = ""
    block: bool = False
    indent: str | None = None
    attrs: tuple[tuple[str, AttrSpec], ...] = ()

    @property
    def indentable(self) -> bool:
        return bool(self.indent)

    @property
    def attr_keys(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self.attrs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, tag: str | None = None) -> TagSpec:
        """Build a TagSpec from the plain-mapping schema.

        Accepted keys: ``open``, ``close``, ``block``, ``indent``, ``attrs``.
        ``attrs`` maps attribute keys to ``{"open": ..., "close": ...}`` and
        keeps its insertion order.

        Raises:
            DialectError: On unknown keys or wrongly typed values
        """
        if not isinstance(data, Mapping):
            raise DialectError(f"rule must be a mapping, got {type(data).__name__}", tag)

        unknown = set(data) - _TAG_KEYS
        if unknown:
            raise DialectError(f"unknown keys {sorted(unknown)}", tag)

        open_ = _string(data, "open", tag)
        close = _string(data, "close", tag)

        block = data.get("block", False)
        if not isinstance(block, bool):
            raise DialectError("'block' must be a bool", tag)

        indent = data.get("indent")
        if indent is False:
            indent = None
        if indent is not None and not isinstance(indent, str):
            raise DialectError("'indent' must be a string", tag)

        raw_attrs = data.get("attrs") or {}
        if not isinstance(raw_attrs, Mapping):
            raise DialectError("'attrs' must be a mapping", tag)

        attrs: list[tuple[str, AttrSpec]] = []
        for key, marker in raw_attrs.items():
            if not isinstance(marker, Mapping):
                raise DialectError(f"attribute '{key}' must be a mapping", tag)
            extra = set(marker) - {"open", "close"}
            if extra:
                raise DialectError(f"attribute '{key}' has unknown keys {sorted(extra)}", tag)
            attrs.append(
                (str(key), AttrSpec(open=_string(marker, "open", tag), close=_string(marker, "close", tag)))
            )

        return cls(open=open_, close=close, block=block, indent=indent or None, attrs=tuple(attrs))

    def to_dict(self) -> dict[str, Any]:
        """Inverse of from_dict; omits default-valued keys."""
        result: dict[str, Any] = {"open": self.open, "close": self.close}
        if self.block:
            result["block"] = True
        if self.indent:
            result["indent"] = self.indent
        if self.attrs:
            result["attrs"] = {
                key: {"open": spec.open, "close": spec.close} for key, spec in self.attrs
            }
        return result


_TAG_KEYS = frozenset(("open", "close", "block", "indent", "attrs"))


def _string(data: Mapping[str, Any], key: str, tag: str | None) -> str:
    value = data.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DialectError(f"'{key}' must be a string", tag)
    return value


class Dialect:
    """Immutable tag-name to TagSpec table plus structural roles.

    Use DialectBuilder (or from_dict) to create instances.

    Thread Safety:
        Immutable after creation. Safe to share across threads.
    """

    __slots__ = ("_specs", "_list_kinds", "_item_tag", "_item_variants", "_collapse", "_text_key")

    def __init__(
        self,
        specs: dict[str, TagSpec],
        *,
        list_kinds: dict[str, ListKind],
        item_tag: str,
        item_variants: dict[ListKind, str],
        collapse: dict[str, str],
        text_key: str,
    ) -> None:
        """Initialize dialect with pre-built mappings."""
        self._specs = specs
        self._list_kinds = list_kinds
        self._item_tag = item_tag
        self._item_variants = item_variants
        self._collapse = collapse
        self._text_key = text_key

    def resolve(self, name: str) -> TagSpec | None:
        """Get the rendering rule for a tag name.

        Args:
            name: Effective tag name (e.g., "b", "olli")

        Returns:
            TagSpec if mapped, None otherwise
        """
        return self._specs.get(name)

    get = resolve

    def has(self, name: str) -> bool:
        """Check if a tag name is mapped."""
        return name in self._specs

    def list_kind(self, name: str) -> ListKind | None:
        """Return the list kind if ``name`` is a list container."""
        return self._list_kinds.get(name)

    def is_item(self, name: str) -> bool:
        """Check if ``name`` is the generic list item tag."""
        return name == self._item_tag

    def item_name(self, kind: ListKind | None) -> str | None:
        """Effective lookup name for a list item inside a list of ``kind``.

        Returns None outside any list, which leaves the item unmapped.
        """
        if kind is None:
            return None
        return self._item_variants.get(kind)

    def collapse_wrapper(self, name: str) -> str | None:
        """Name of the wrapper tag ``name`` collapses into, if any."""
        return self._collapse.get(name)

    @property
    def text_key(self) -> str:
        """Attribute key that stands for the element's own inner text."""
        return self._text_key

    @property
    def names(self) -> frozenset[str]:
        """Get all mapped tag names."""
        return frozenset(self._specs)

    def items(self) -> Iterable[tuple[str, TagSpec]]:
        return self._specs.items()

    def __contains__(self, name: str) -> bool:
        """Support 'name in dialect' syntax."""
        return self.has(name)

    def __len__(self) -> int:
        """Number of mapped tag names."""
        return len(self._specs)

    def __repr__(self) -> str:
        return f"Dialect({len(self._specs)} tags)"

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> Dialect:
        """Build a dialect from a plain ``{tag: rule}`` mapping.

        Structural roles keep their HTML defaults (``ol``/``ul`` lists,
        ``li`` items rendered as ``olli``/``ulli``, ``code`` collapsing
        into ``pre``, ``text`` as the inner-text key).

        Raises:
            DialectError: If the mapping or any rule is malformed
        """
        if not isinstance(data, Mapping):
            raise DialectError(f"dialect must be a mapping, got {type(data).__name__}")

        builder = DialectBuilder.with_html_roles()
        for name, rule in data.items():
            builder.register(str(name), TagSpec.from_dict(rule, tag=str(name)))
        return builder.build()

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Serialize rules to the plain-mapping schema (aliases expanded)."""
        return {name: spec.to_dict() for name, spec in self._specs.items()}

    def merged(self, overrides: Mapping[str, TagSpec | Mapping[str, Any]] | Dialect) -> Dialect:
        """Return a new dialect with ``overrides`` replacing same-named rules.

        Structural roles are kept from ``self``.
        """
        builder = DialectBuilder.from_dialect(self)
        pairs = overrides.items()
        for name, rule in pairs:
            spec = rule if isinstance(rule, TagSpec) else TagSpec.from_dict(rule, tag=name)
            builder.register(name, spec, replace=True)
        return builder.build()


class DialectBuilder:
    """Mutable builder for Dialect.

    Register rules and roles, then call build() to create an immutable
    dialect.

    Example:
        >>> builder = DialectBuilder.with_html_roles()
        >>> builder.register("b", TagSpec(open="**", close="**"))
        >>> dialect = builder.build()
    """

    __slots__ = ("_specs", "_list_kinds", "_item_tag", "_item_variants", "_collapse", "_text_key")

    def __init__(self) -> None:
        """Initialize empty builder."""
        self._specs: dict[str, TagSpec] = {}
        self._list_kinds: dict[str, ListKind] = {}
        self._item_tag = ""
        self._item_variants: dict[ListKind, str] = {}
        self._collapse: dict[str, str] = {}
        self._text_key = "text"

    @classmethod
    def with_html_roles(cls) -> DialectBuilder:
        """Builder with the standard HTML structural roles registered."""
        return (
            cls()
            .list_container("ol", ListKind.ORDERED)
            .list_container("ul", ListKind.UNORDERED)
            .list_item("li", {ListKind.ORDERED: "olli", ListKind.UNORDERED: "ulli"})
            .collapse("code", into="pre")
        )

    @classmethod
    def from_dialect(cls, dialect: Dialect) -> DialectBuilder:
        """Builder pre-populated with an existing dialect's rules and roles."""
        builder = cls()
        builder._specs = dict(dialect._specs)
        builder._list_kinds = dict(dialect._list_kinds)
        builder._item_tag = dialect._item_tag
        builder._item_variants = dict(dialect._item_variants)
        builder._collapse = dict(dialect._collapse)
        builder._text_key = dialect._text_key
        return builder

    def register(self, name: str, spec: TagSpec, *, replace: bool = False) -> DialectBuilder:
        """Register a rendering rule.

        Args:
            name: Tag name
            spec: Rule to render it with
            replace: Allow overwriting an existing rule

        Returns:
            Self for chaining

        Raises:
            DialectError: If the name is already registered and replace is False
        """
        if not isinstance(spec, TagSpec):
            raise DialectError(f"expected TagSpec, got {type(spec).__name__}", name)
        if name in self._specs and not replace:
            raise DialectError("already registered", name)
        self._specs[name] = spec
        return self

    def alias(self, name: str, target: str) -> DialectBuilder:
        """Make ``name`` render with the rule registered for ``target``.

        Raises:
            DialectError: If ``target`` is not registered
        """
        spec = self._specs.get(target)
        if spec is None:
            raise DialectError(f"alias target '{target}' is not registered", name)
        return self.register(name, spec)

    def list_container(self, name: str, kind: ListKind) -> DialectBuilder:
        self._list_kinds[name] = kind
        return self

    def list_item(self, name: str, variants: Mapping[ListKind, str]) -> DialectBuilder:
        self._item_tag = name
        self._item_variants = dict(variants)
        return self

    def collapse(self, name: str, *, into: str) -> DialectBuilder:
        """Declare that ``name`` directly inside ``into`` renders as one unit."""
        self._collapse[name] = into
        return self

    def text_key(self, key: str) -> DialectBuilder:
        self._text_key = key
        return self

    def build(self) -> Dialect:
        """Build immutable dialect from registered rules."""
        return Dialect(
            dict(self._specs),
            list_kinds=dict(self._list_kinds),
            item_tag=self._item_tag,
            item_variants=dict(self._item_variants),
            collapse=dict(self._collapse),
            text_key=self._text_key,
        )

    def __len__(self) -> int:
        """Number of registered rules."""
        return len(self._specs)


# Default Markdown table, in the plain-mapping schema accepted by from_dict
MARKDOWN_TABLE: dict[str, dict[str, Any]] = {
    "b": {"open": "**", "close": "**"},
    "i": {"open": "*", "close": "*"},
    "img": {
        "open": "!",
        "close": "",
        "attrs": {
            "alt": {"open": "[", "close": "]"},
            "src": {"open": "(", "close": ")"},
        },
    },
    "a": {
        "open": "",
        "close": "",
        "attrs": {
            "text": {"open": "[", "close": "]"},
            "href": {"open": "(", "close": ")"},
        },
    },
    "blockquote": {"indent": "> ", "open": "> ", "block": True, "close": ""},
    "code": {"open": "```\n", "close": "\n```", "block": True},
    "pre": {"open": "`", "close": "`"},
    "p": {"block": True, "open": "", "close": ""},
    "ol": {"indent": "\t", "block": True, "open": "", "close": ""},
    "ul": {"indent": "\t", "block": True, "open": "", "close": ""},
    "olli": {"open": "1. ", "close": "\n"},
    "ulli": {"open": "* ", "close": "\n"},
    "hr": {"block": True, "open": "- - -", "close": ""},
    "h1": {"open": "# ", "close": "", "block": True},
    "h2": {"open": "## ", "close": "", "block": True},
    "h3": {"open": "### ", "close": "", "block": True},
    "h4": {"open": "#### ", "close": "", "block": True},
    "h5": {"open": "##### ", "close": "", "block": True},
    "h6": {"open": "###### ", "close": "", "block": True},
}

_MARKDOWN_ALIASES = {"strong": "b", "em": "i"}


def create_dialect_builder() -> DialectBuilder:
    """Create a builder pre-populated with the default Markdown rules.

    Use this to extend or adjust the default table:

        >>> builder = create_dialect_builder()
        >>> builder.register("del", TagSpec(open="~~", close="~~"))
        >>> dialect = builder.build()
    """
    builder = DialectBuilder.with_html_roles()
    for name, rule in MARKDOWN_TABLE.items():
        builder.register(name, TagSpec.from_dict(rule, tag=name))
    for name, target in _MARKDOWN_ALIASES.items():
        builder.alias(name, target)
    return builder


# Cached singleton; Dialect is immutable
_DEFAULT_DIALECT: Dialect | None = None


def create_default_dialect() -> Dialect:
    """Get the default Markdown dialect (cached singleton).

    Thread Safety:
        Returns a cached immutable dialect. Safe for concurrent access.
    """
    global _DEFAULT_DIALECT
    if _DEFAULT_DIALECT is None:
        _DEFAULT_DIALECT = create_dialect_builder().build()
    return _DEFAULT_DIALECT


__all__ = [
    "AttrSpec",
    "Dialect",
    "DialectBuilder",
    "ListKind",
    "MARKDOWN_TABLE",
    "TagSpec",
    "create_default_dialect",
    "create_dialect_builder",
]
