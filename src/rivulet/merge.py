"""The merge engine: one pure state transition per input.

``merge(previous, input)`` picks one of three strategies:

1. No-op: same text, same completion flag. The previous state object is
   returned as-is, so downstream identity checks skip re-rendering.
2. Extension: the new text starts with the previous text. Only
   ``text[previous.cursor:]`` is reparsed, i.e. the buffered block plus
   whatever arrived after it. Promoted blocks are appended; the committed
   tuple is reused when nothing is appended.
3. Divergence (or cold start): anything else. The whole text is reparsed
   from offset 0 and all previous blocks are discarded. O(document) cost,
   correct whenever the append-only assumption is broken.

Version rule:
    +1 on divergence, and +1 when an extension promotes at least one block
    or seals the stream. Buffer-only growth and no-ops keep the version.

Parse failures:
    A ParseFailure from the block parser never reaches the caller (unless
    ``StreamConfig.strict_parsing`` is set). The span counts as zero blocks:
    committed blocks are untouched, the buffer empties, and the cursor stays
    put so the span is retried once more text arrives.

Thread Safety:
    ``merge`` is a pure function of its arguments and the active
    StreamConfig. Safe to call from any thread.

"""

from rivulet.blocks import BlockParser, PositionedBlock
from rivulet.config import get_stream_config
from rivulet.errors import ParseFailure
from rivulet.profiling import MergeAccumulator, get_merge_accumulator
from rivulet.promotion import partition
from rivulet.state import MachineState, MergeInput
from rivulet.utils.logger import get_logger

logger = get_logger(__name__)


def merge(
    previous: MachineState | None,
    merge_input: MergeInput,
    *,
    parser: BlockParser,
    strict: bool | None = None,
) -> MachineState:
    """Fold new input into the previous state.

    Args:
        previous: State from the last merge, or None for a cold start.
        merge_input: Full running text plus completion flag.
        parser: Block parser used for whatever span needs (re)parsing.
        strict: Re-raise ParseFailure instead of degrading. Defaults to
            the active ``StreamConfig.strict_parsing``.

    Returns:
        The new state (``previous`` itself on a no-op).

    Raises:
        ParseFailure: Only when strict parsing is enabled.

    """
    if strict is None:
        strict = get_stream_config().strict_parsing

    text = merge_input.text
    done = merge_input.done
    acc = get_merge_accumulator()

    if previous is not None and text == previous.text and done == previous.done:
        if acc is not None:
            acc.record_strategy("noop")
        return previous

    chunks = merge_input.chunks
    if chunks is None:
        chunks = (text,) if text else ()

    if (
        previous is not None
        and text.startswith(previous.text)
        and (done or not previous.done)
    ):
        if acc is not None:
            acc.record_strategy("extension")
        return _extend(previous, text, chunks, done, parser, strict, acc)

    if acc is not None:
        acc.record_strategy("divergence")
    if previous is None:
        logger.debug("Cold start: parsing %d chars", len(text))
        version = 0
    else:
        logger.debug(
            "Divergence at version %d: reparsing %d chars from scratch",
            previous.version,
            len(text),
        )
        version = previous.version + 1
    return _rebuild(text, chunks, done, version, parser, strict, acc)


def _extend(
    previous: MachineState,
    text: str,
    chunks: tuple[str, ...],
    done: bool,
    parser: BlockParser,
    strict: bool,
    acc: MergeAccumulator | None,
) -> MachineState:
    """Reparse only the suffix from the previous cursor."""
    nodes = _parse_span(
        parser, text[previous.cursor :], strict, acc, base=previous.cursor
    )

    if nodes is None:
        # Failed span: keep what is committed, retry from the same cursor.
        promoted: tuple = ()
        buffered = None
        cursor = len(text) if done else previous.cursor
    else:
        promoted, buffered, resume_offset = partition(nodes, done)
        if resume_offset is None:
            cursor = len(text)
        else:
            cursor = previous.cursor + resume_offset

    committed = previous.committed
    if promoted:
        committed = committed + promoted
        if acc is not None:
            acc.record_promotion(len(promoted))
        logger.debug(
            "Promoted %d block(s); %d committed", len(promoted), len(committed)
        )

    version = previous.version
    if promoted or (done and not previous.done):
        version += 1

    return MachineState(
        chunks=chunks,
        text=text,
        cursor=cursor,
        version=version,
        committed=committed,
        buffer=buffered,
        done=done,
    )


def _rebuild(
    text: str,
    chunks: tuple[str, ...],
    done: bool,
    version: int,
    parser: BlockParser,
    strict: bool,
    acc: MergeAccumulator | None,
) -> MachineState:
    """Parse the whole text from offset 0."""
    nodes = _parse_span(parser, text, strict, acc)

    if nodes is None:
        promoted: tuple = ()
        buffered = None
        cursor = len(text) if done else 0
    else:
        promoted, buffered, resume_offset = partition(nodes, done)
        cursor = len(text) if resume_offset is None else resume_offset

    if promoted and acc is not None:
        acc.record_promotion(len(promoted))

    return MachineState(
        chunks=chunks,
        text=text,
        cursor=cursor,
        version=version,
        committed=promoted,
        buffer=buffered,
        done=done,
    )


def _parse_span(
    parser: BlockParser,
    span: str,
    strict: bool,
    acc: MergeAccumulator | None,
    base: int = 0,
) -> tuple[PositionedBlock, ...] | None:
    """Parse a span starting at ``base``, returning None on ParseFailure."""
    try:
        nodes = tuple(parser.parse(span, base))
    except ParseFailure:
        if acc is not None:
            acc.record_parse(len(span), failed=True)
        if strict:
            raise
        logger.warning(
            "Block parser failed on a %d-char span; treating it as empty",
            len(span),
            exc_info=True,
        )
        return None

    if acc is not None:
        acc.record_parse(len(span))
    return nodes
