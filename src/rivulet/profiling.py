"""Rivulet MergeAccumulator — opt-in profiling for incremental merges.

This module accumulates metrics while merging:
- Which strategy each merge took (no-op, extension, divergence)
- How much text was handed to the block parser
- How many blocks were promoted
- How many span parses failed and were degraded

Zero overhead when disabled (get_merge_accumulator() returns None).

Example:
    from rivulet import create_session
    from rivulet.profiling import profiled_merge

    with profiled_merge() as metrics:
        session = create_session()
        for chunk in chunks:
            session.write(chunk)
        session.finalize()

    print(metrics.summary())
    # {"total_ms": 3.1, "merges": 12, "extensions": 12, "chars_parsed": 431, ...}

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any


@dataclass
class MergeAccumulator:
    """Accumulated metrics during incremental merging.

    Attributes:
        start_time: Profiling start timestamp.
        merges: Number of merge() calls recorded.
        noops: Merges that returned the previous state unchanged.
        extensions: Merges that reparsed only the unconsumed suffix.
        divergences: Merges that reparsed the whole text (including cold starts).
        parse_calls: Number of spans handed to the block parser.
        chars_parsed: Total length of those spans.
        blocks_promoted: Blocks appended to committed sequences.
        parse_failures: Span parses degraded to "zero blocks".

    """

    start_time: float = field(default_factory=perf_counter)
    merges: int = 0
    noops: int = 0
    extensions: int = 0
    divergences: int = 0
    parse_calls: int = 0
    chars_parsed: int = 0
    blocks_promoted: int = 0
    parse_failures: int = 0

    def record_strategy(self, strategy: str) -> None:
        """Record which strategy a merge took ("noop", "extension", "divergence")."""
        self.merges += 1
        if strategy == "noop":
            self.noops += 1
        elif strategy == "extension":
            self.extensions += 1
        else:
            self.divergences += 1

    def record_parse(self, span_length: int, failed: bool = False) -> None:
        """Record one span handed to the block parser."""
        self.parse_calls += 1
        self.chars_parsed += span_length
        if failed:
            self.parse_failures += 1

    def record_promotion(self, count: int) -> None:
        """Record blocks appended to a committed sequence."""
        self.blocks_promoted += count

    @property
    def total_duration_ms(self) -> float:
        """Total profiling duration in milliseconds."""
        return (perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Get summary of merge metrics."""
        return {
            "total_ms": round(self.total_duration_ms, 2),
            "merges": self.merges,
            "noops": self.noops,
            "extensions": self.extensions,
            "divergences": self.divergences,
            "parse_calls": self.parse_calls,
            "chars_parsed": self.chars_parsed,
            "blocks_promoted": self.blocks_promoted,
            "parse_failures": self.parse_failures,
        }


_accumulator: ContextVar[MergeAccumulator | None] = ContextVar(
    "merge_accumulator",
    default=None,
)


def get_merge_accumulator() -> MergeAccumulator | None:
    """Get current accumulator (None if profiling disabled)."""
    return _accumulator.get()


@contextmanager
def profiled_merge() -> Iterator[MergeAccumulator]:
    """Context manager for profiled merging.

    Creates a MergeAccumulator and makes it available via
    get_merge_accumulator() for the duration of the with block.

    Yields:
        MergeAccumulator populated by merge() calls inside the block.

    """
    acc = MergeAccumulator()
    token: Token[MergeAccumulator | None] = _accumulator.set(acc)
    try:
        yield acc
    finally:
        _accumulator.reset(token)
