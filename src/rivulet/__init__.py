"""
Rivulet — Stable incremental Markdown parsing for streamed text

Text that arrives chunk by chunk (an LLM reply, a socket, a tailing file) is
parsed into top-level Markdown blocks split into two parts:

- committed blocks: never reparsed, reordered or replaced until reset
- one buffered block: the newest block, still free to change

A reconciling renderer can render committed blocks once and keep them,
redrawing only the buffer as text arrives.

Quick Start:
    >>> from rivulet import create_session
    >>> session = create_session()
    >>> snap = session.write("# Title\\n\\nFirst para")
    >>> len(snap.committed_blocks), len(snap.buffer_blocks)
    (1, 1)
    >>> snap = session.finalize()
    >>> len(snap.committed_blocks), snap.buffer_blocks
    (2, ())

Pure API:
    >>> from rivulet import MergeInput, PatitasBlockParser, merge
    >>> parser = PatitasBlockParser()
    >>> state = merge(None, MergeInput.from_chunks(["a\\n\\n", "b"]), parser=parser)
    >>> state = merge(state, MergeInput("a\\n\\nb\\n\\nc"), parser=parser)
    >>> len(state.committed)
    2

Installation:
    pip install rivulet
"""

from rivulet.blocks import (
    BlockParser,
    PatitasBlockParser,
    PositionedBlock,
    block_start,
    rebase_node,
)
from rivulet.config import (
    StreamConfig,
    get_stream_config,
    reset_stream_config,
    set_stream_config,
    stream_config_context,
)
from rivulet.driver import DerivedState, StreamDriver, merge_state, snapshot_changed
from rivulet.errors import InvalidStateError, ParseFailure, RivuletError
from rivulet.merge import merge
from rivulet.profiling import MergeAccumulator, get_merge_accumulator, profiled_merge
from rivulet.promotion import Partition, partition
from rivulet.session import Session, SessionInit, create_session
from rivulet.state import MachineState, MergeInput, Snapshot, empty_state

__version__ = "0.1.0"

__all__ = [
    # Sessions
    "Session",
    "SessionInit",
    "create_session",
    # Pure engine
    "merge",
    "partition",
    "Partition",
    "MachineState",
    "MergeInput",
    "Snapshot",
    "empty_state",
    # Parsers
    "BlockParser",
    "PatitasBlockParser",
    "PositionedBlock",
    "block_start",
    "rebase_node",
    # Driver
    "StreamDriver",
    "DerivedState",
    "merge_state",
    "snapshot_changed",
    # Configuration
    "StreamConfig",
    "get_stream_config",
    "set_stream_config",
    "reset_stream_config",
    "stream_config_context",
    # Profiling
    "MergeAccumulator",
    "get_merge_accumulator",
    "profiled_merge",
    # Errors
    "RivuletError",
    "InvalidStateError",
    "ParseFailure",
    "__version__",
]
