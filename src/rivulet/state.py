"""Machine state, merge input and snapshots.

All three types are immutable. A MachineState is only ever produced by
``merge`` (or ``empty_state``); callers read it through ``Snapshot``.

Reference stability:
    ``committed`` is reused by identity across merges that append nothing,
    and each state builds its Snapshot once, so two reads of an unchanged
    state return the very same Snapshot object.

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from functools import cached_property
from typing import Any


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Externally visible, read-only view of a stream.

    Attributes:
        committed_blocks: Blocks that will never be reparsed or replaced
            until the session is reset.
        buffer_blocks: The newest, provisional block (length 0 or 1).
        version: Change counter for the committed sequence's shape.
        cursor: Characters accounted for by committed blocks or the
            buffer's start.
        done: Whether the stream has been finalized.

    """

    committed_blocks: tuple[Any, ...]
    buffer_blocks: tuple[Any, ...]
    version: int
    cursor: int
    done: bool


@dataclass(frozen=True)
class MachineState:
    """Aggregate state of one incremental parse.

    Attributes:
        chunks: Chunks the running text was assembled from.
        text: Running text.
        cursor: Offset from which the next incremental parse resumes.
        version: Change counter (see ``rivulet.merge``).
        committed: Append-only committed blocks.
        buffer: Newest block not yet proven stable, or None.
        done: Finalized flag; only a reset clears it.

    """

    chunks: tuple[str, ...]
    text: str
    cursor: int
    version: int
    committed: tuple[Any, ...]
    buffer: Any | None
    done: bool

    @cached_property
    def snapshot(self) -> Snapshot:
        """Snapshot of this state (built once per state)."""
        return Snapshot(
            committed_blocks=self.committed,
            buffer_blocks=() if self.buffer is None else (self.buffer,),
            version=self.version,
            cursor=self.cursor,
            done=self.done,
        )


@dataclass(frozen=True, slots=True)
class MergeInput:
    """New input for ``merge``: the full running text plus completion flag.

    Attributes:
        text: Full accumulated text (not just the delta).
        done: Whether the stream is complete.
        chunks: Chunks ``text`` was joined from, when known.

    """

    text: str
    done: bool = False
    chunks: tuple[str, ...] | None = None

    @classmethod
    def from_chunks(cls, chunks: Iterable[str], done: bool = False) -> MergeInput:
        """Build an input from the full accumulated chunk sequence."""
        chunks = tuple(chunks)
        return cls(text="".join(chunks), done=done, chunks=chunks)


def empty_state(version: int = 0) -> MachineState:
    """Return a state with no text, no blocks and ``done=False``."""
    return MachineState(
        chunks=(),
        text="",
        cursor=0,
        version=version,
        committed=(),
        buffer=None,
        done=False,
    )
