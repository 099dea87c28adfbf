"""Promotion rules: which freshly parsed blocks are safe to commit.

A block is only committed once a structurally distinct later block has
begun, which proves the earlier block's boundary is fixed. The newest block
is therefore always withheld in the single buffer slot, unless the stream is
being finalized, in which case everything is committed.

    >>> from rivulet.blocks import PositionedBlock
    >>> nodes = (PositionedBlock("a", 0), PositionedBlock("b", 7))
    >>> partition(nodes, finalize=False)
    Partition(promoted=('a',), buffered='b', resume_offset=7)

"""

from collections.abc import Sequence
from typing import Any, NamedTuple

from rivulet.blocks import PositionedBlock


class Partition(NamedTuple):
    """Outcome of promoting one parsed span.

    Attributes:
        promoted: Blocks to append to the committed sequence, in order.
        buffered: The withheld newest block, or None.
        resume_offset: Span-relative offset at which the next incremental
            parse must start, or None when nothing is buffered (the caller
            decides where to resume).

    """

    promoted: tuple[Any, ...]
    buffered: Any | None
    resume_offset: int | None


_EMPTY = Partition((), None, None)


def partition(nodes: Sequence[PositionedBlock], finalize: bool) -> Partition:
    """Split parsed blocks into promoted blocks and the buffer slot.

    Args:
        nodes: Ordered blocks of one span, as produced by a BlockParser.
        finalize: Commit everything (the stream is complete).

    Returns:
        Partition with at most one buffered block.

    """
    if finalize:
        return Partition(tuple(block.node for block in nodes), None, None)

    if not nodes:
        return _EMPTY

    last = nodes[-1]
    if len(nodes) == 1:
        return Partition((), last.node, last.start)

    return Partition(tuple(block.node for block in nodes[:-1]), last.node, last.start)
