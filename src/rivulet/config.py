"""ContextVar-based stream configuration for Rivulet.

Configuration is read once when a Session (or StreamDriver) builds its
default block parser. Each thread/context sees its own value.

Usage:
    from rivulet.config import StreamConfig, stream_config_context
    from rivulet import create_session

    with stream_config_context(StreamConfig(source_file="reply.md")):
        session = create_session()

    # Or set it for the whole context
    set_stream_config(StreamConfig(strict_parsing=True))
    try:
        session = create_session()
    finally:
        reset_stream_config()

"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from patitas.directives.registry import DirectiveRegistry


@dataclass(frozen=True, slots=True)
class StreamConfig:
    """Immutable stream configuration.

    Attributes:
        source_file: Source path attached to parsed block locations
        directive_registry: Directive registry handed to the Markdown parser
            (parser defaults when None)
        strict_parsing: Re-raise ParseFailure from merge instead of degrading
            to "zero blocks parsed". Debugging aid; off by default.

    """

    source_file: str | None = None
    directive_registry: DirectiveRegistry | None = None
    strict_parsing: bool = False

    @classmethod
    def from_dict(cls, config_dict: dict) -> StreamConfig:
        """Create StreamConfig from dictionary.

        Unknown keys are silently ignored.

        Example:
            >>> config = StreamConfig.from_dict({
            ...     "strict_parsing": True,
            ...     "unknown_key": "ignored",
            ... })
            >>> config.strict_parsing
            True

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: StreamConfig = StreamConfig()

_stream_config: ContextVar[StreamConfig] = ContextVar(
    "stream_config",
    default=_DEFAULT_CONFIG,
)


def get_stream_config() -> StreamConfig:
    """Get current stream configuration (context-local)."""
    return _stream_config.get()


def set_stream_config(config: StreamConfig) -> None:
    """Set stream configuration for the current context."""
    _stream_config.set(config)


def reset_stream_config() -> None:
    """Reset to the module-level default configuration."""
    _stream_config.set(_DEFAULT_CONFIG)


@contextmanager
def stream_config_context(config: StreamConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with stream_config_context(StreamConfig(strict_parsing=True)):
        ...     get_stream_config().strict_parsing
        True

    """
    previous = _stream_config.get()
    _stream_config.set(config)
    try:
        yield
    finally:
        _stream_config.set(previous)


__all__ = [
    "StreamConfig",
    "get_stream_config",
    "set_stream_config",
    "reset_stream_config",
    "stream_config_context",
]
