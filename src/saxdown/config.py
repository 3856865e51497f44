"""ContextVar-based conversion configuration for saxdown.

Provides context-local configuration using Python's ContextVars (PEP 567).
Converters read it when no explicit argument overrides a setting.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed.

Usage:
    from saxdown import convert
    from saxdown.config import ConvertConfig, convert_config_context

    with convert_config_context(ConvertConfig(strip_tags=True)):
        markdown = convert("<span>hi</span>")  # 'hi'

"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from saxdown.dialect import Dialect


@dataclass(frozen=True, slots=True)
class ConvertConfig:
    """Immutable conversion configuration.

    Attributes:
        dialect: Rendering table (None = default Markdown dialect)
        strip_tags: Drop unmapped tags instead of passing them through
        collect_diagnostics: Record non-fatal diagnostics per conversion
        text_transformer: Optional callback applied to every text event

    """

    dialect: "Dialect | None" = None
    strip_tags: bool = False
    collect_diagnostics: bool = True
    text_transformer: Callable[[str], str] | None = None

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ConvertConfig":
        """Create ConvertConfig from dictionary.

        Only includes keys that are valid ConvertConfig fields; unknown keys
        are silently ignored. A plain mapping under ``dialect`` is converted
        with Dialect.from_dict.

        Example:
            >>> config = ConvertConfig.from_dict({"strip_tags": True, "other": 1})
            >>> config.strip_tags
            True

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}

        dialect = filtered.get("dialect")
        if isinstance(dialect, dict):
            from saxdown.dialect import Dialect

            filtered["dialect"] = Dialect.from_dict(dialect)
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ConvertConfig = ConvertConfig()

_convert_config: ContextVar[ConvertConfig] = ContextVar(
    "convert_config",
    default=_DEFAULT_CONFIG,
)


def get_convert_config() -> ConvertConfig:
    """Get current conversion configuration (context-local)."""
    return _convert_config.get()


def set_convert_config(config: ConvertConfig) -> None:
    """Set conversion configuration for the current context.

    Args:
        config: ConvertConfig instance to use for this context.

    """
    _convert_config.set(config)


def reset_convert_config() -> None:
    """Reset to default configuration.

    Reuses the module-level _DEFAULT_CONFIG singleton, avoiding allocation.

    """
    _convert_config.set(_DEFAULT_CONFIG)


@contextmanager
def convert_config_context(config: ConvertConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Args:
        config: ConvertConfig to use within the context.

    Example:
        >>> with convert_config_context(ConvertConfig(strip_tags=True)):
        ...     pass  # strip_tags is True here
        >>> # Previous config restored

    Thread Safety:
        Only affects the current context. Restores the previous config even
        if an exception is raised.

    """
    previous = _convert_config.get()
    _convert_config.set(config)
    try:
        yield
    finally:
        _convert_config.set(previous)


__all__ = [
    "ConvertConfig",
    "get_convert_config",
    "set_convert_config",
    "reset_convert_config",
    "convert_config_context",
]
