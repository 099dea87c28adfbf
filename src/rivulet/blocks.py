"""Block parser adapters for the merge engine.

The merge engine never looks inside a block. It needs exactly two things
from a parser: the ordered top-level blocks of a span, and where each block
starts relative to that span. ``BlockParser`` captures that contract;
``PatitasBlockParser`` implements it on top of the patitas Markdown parser
(CommonMark plus ``:::{name}`` directives).

Spans are usually a suffix of the running text. The merge engine passes the
span's absolute offset as ``base`` and the parser returns nodes whose own
positions are absolute (so ``FencedCode.get_code(full_text)`` works), while
``PositionedBlock.start`` stays span-relative.

Parsers are plain objects injected into ``merge``/``Session``. Tests swap in
fakes; nothing here is a module-level singleton.

Thread Safety:
    PatitasBlockParser holds only immutable configuration and patitas sets
    its parse configuration per call via ContextVar. Safe to share.

"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import fields, is_dataclass, replace
from typing import TYPE_CHECKING, Any, NamedTuple, Protocol

from rivulet.errors import ParseFailure

if TYPE_CHECKING:
    from patitas.directives.registry import DirectiveRegistry

    from rivulet.config import StreamConfig


class PositionedBlock(NamedTuple):
    """A parsed block plus its start offset within the parsed span."""

    node: Any
    start: int


class BlockParser(Protocol):
    """Protocol for span parsers consumed by the merge engine.

    ``parse`` must be deterministic and side-effect free for a given span.
    ``PositionedBlock.start`` is relative to the start of ``span``; positions
    stored inside the nodes are shifted by ``base``, the absolute offset of
    ``span`` in the running text. An empty span yields an empty tuple.
    Malformed input may raise ParseFailure.
    """

    def parse(self, span: str, base: int = 0) -> tuple[PositionedBlock, ...]:
        """Return the ordered top-level blocks of ``span``."""
        ...


class PatitasBlockParser:
    """BlockParser backed by ``patitas.parse``.

    Block starts are snapped to the beginning of the line the block starts
    on, so a resumed parse always begins at a line boundary.

    Example:
        >>> parser = PatitasBlockParser()
        >>> [b.start for b in parser.parse("Hello\\n\\nWorld")]
        [0, 7]
        >>> parser.parse("World", base=7)[0].node.location.offset
        7

    """

    __slots__ = ("_directive_registry", "_source_file")

    def __init__(
        self,
        directive_registry: DirectiveRegistry | None = None,
        source_file: str | None = None,
    ) -> None:
        self._directive_registry = directive_registry
        self._source_file = source_file

    @classmethod
    def from_config(cls, config: StreamConfig) -> PatitasBlockParser:
        """Build a parser from a StreamConfig."""
        return cls(
            directive_registry=config.directive_registry,
            source_file=config.source_file,
        )

    def parse(self, span: str, base: int = 0) -> tuple[PositionedBlock, ...]:
        if not span:
            return ()

        import patitas

        kwargs: dict[str, Any] = {}
        if self._source_file is not None:
            kwargs["source_file"] = self._source_file
        if self._directive_registry is not None:
            kwargs["directive_registry"] = self._directive_registry

        try:
            doc = patitas.parse(span, **kwargs)
        except Exception as exc:
            raise ParseFailure(f"Markdown parser rejected span: {exc}", len(span)) from exc

        line_starts = _line_starts(span)
        return tuple(
            PositionedBlock(rebase_node(node, base), block_start(node, span, line_starts))
            for node in doc.children
        )


def block_start(node: Any, span: str, line_starts: list[int] | None = None) -> int:
    """Return the offset of the line on which ``node`` starts.

    Uses the node's tracked ``location.offset`` when present. Nodes without
    tracked offsets (``end_offset`` of 0) fall back to their 1-indexed
    ``lineno``. Nodes with no location at all resolve to 0, so a buffered
    node of that kind is reparsed with the whole span next time.

    """
    location = getattr(node, "location", None)
    if location is None:
        return 0

    if line_starts is None:
        line_starts = _line_starts(span)

    offset = getattr(location, "offset", 0)
    end_offset = getattr(location, "end_offset", 0)
    if isinstance(offset, int) and isinstance(end_offset, int) and end_offset > 0:
        offset = min(max(offset, 0), len(span))
        return line_starts[bisect_right(line_starts, offset) - 1]

    lineno = getattr(location, "lineno", None)
    if isinstance(lineno, int) and lineno >= 1:
        return line_starts[min(lineno, len(line_starts)) - 1]
    return 0


def rebase_node(node: Any, delta: int) -> Any:
    """Shift every source offset inside ``node`` by ``delta``.

    Walks frozen dataclass nodes with ``dataclasses.replace``: tracked
    ``location`` offsets and ``source_start``/``source_end`` slices (unless a
    ``content_override`` makes them unused) move; everything else is shared.
    Untouched subtrees are returned as the same objects.

    """
    if delta == 0 or not is_dataclass(node) or isinstance(node, type):
        return node

    changes: dict[str, Any] = {}
    for f in fields(node):
        value = getattr(node, f.name)
        if f.name == "location":
            if getattr(value, "end_offset", 0) > 0:
                changes["location"] = replace(
                    value,
                    offset=value.offset + delta,
                    end_offset=value.end_offset + delta,
                )
        elif f.name in ("source_start", "source_end"):
            if isinstance(value, int) and getattr(node, "content_override", None) is None:
                changes[f.name] = value + delta
        elif isinstance(value, tuple):
            shifted = tuple(rebase_node(item, delta) for item in value)
            if any(a is not b for a, b in zip(shifted, value)):
                changes[f.name] = shifted
        elif is_dataclass(value) and hasattr(value, "location"):
            shifted_child = rebase_node(value, delta)
            if shifted_child is not value:
                changes[f.name] = shifted_child

    return replace(node, **changes) if changes else node


def _line_starts(span: str) -> list[int]:
    """Offsets at which each line of ``span`` begins."""
    starts = [0]
    index = span.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = span.find("\n", index + 1)
    return starts
