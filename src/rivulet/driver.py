"""Headless stream driver: reconcile renderer inputs into a session.

A renderer is typically handed either a growing list of chunks (streaming)
or one finished string (stable). ``StreamDriver`` turns successive inputs of
either kind into the cheapest session commands:

- streaming → streaming, chunk list extended: write only the new chunks
- streaming → streaming, chunk list rewritten: reset with the joined text
- streaming → stable, content extends the streamed text: finalize with
  the remaining suffix
- anything else: reset sealed on the stable content

``refresh()`` then reports whether anything a renderer depends on changed,
so it can skip work when a call produced an identical snapshot.

``DerivedState`` is the pure counterpart: it threads the previous result of
a ``derive(previous, props)`` function into the next call, which is how
``merge`` is driven without a Session.

Example:
    >>> driver = StreamDriver(streaming=True)
    >>> driver.update(chunks=["# Title\\n\\n", "Body"])
    True
    >>> len(driver.snapshot.committed_blocks)
    1

"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from rivulet.blocks import BlockParser
from rivulet.config import StreamConfig
from rivulet.merge import merge
from rivulet.session import Session
from rivulet.state import MachineState, MergeInput, Snapshot


@dataclass(frozen=True, slots=True)
class _StreamingInputs:
    chunks: tuple[str, ...]
    text: str


@dataclass(frozen=True, slots=True)
class _StableInputs:
    content: str


def snapshot_changed(previous: Snapshot | None, current: Snapshot) -> bool:
    """Whether a renderer needs to redraw between two snapshots.

    Compares buffer identity, committed length, version, done and cursor.
    Committed blocks themselves never change in place, so their count is
    enough.

    """
    if previous is None:
        return True
    if len(previous.buffer_blocks) != len(current.buffer_blocks):
        return True
    if any(a is not b for a, b in zip(previous.buffer_blocks, current.buffer_blocks)):
        return True
    return (
        len(previous.committed_blocks) != len(current.committed_blocks)
        or previous.version != current.version
        or previous.done != current.done
        or previous.cursor != current.cursor
    )


class StreamDriver:
    """Own one Session and feed it streaming or stable inputs.

    Args:
        streaming: Start in streaming mode (empty session) or stable mode
            (session sealed on ``content``).
        content: Initial stable content (ignored when streaming).
        parser: Block parser for the session.
        config: Stream configuration for the session.

    """

    __slots__ = ("_previous", "_session", "_snapshot")

    def __init__(
        self,
        streaming: bool = True,
        content: str = "",
        *,
        parser: BlockParser | None = None,
        config: StreamConfig | None = None,
    ) -> None:
        self._previous: _StreamingInputs | _StableInputs | None
        if streaming:
            self._session = Session(parser=parser, config=config)
            self._previous = None
        else:
            self._session = Session(
                {"value": content, "done": True}, parser=parser, config=config
            )
            self._previous = _StableInputs(content)
        self._snapshot: Snapshot = self._session.snapshot()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def snapshot(self) -> Snapshot:
        """Snapshot as of the last ``refresh()``."""
        return self._snapshot

    def apply_streaming(self, chunks: Iterable[str]) -> bool:
        """Apply a streaming chunk list. Returns whether the session changed."""
        chunks = tuple(chunks)
        previous = self._previous

        if isinstance(previous, _StreamingInputs) and _extends(chunks, previous.chunks):
            mutated = False
            for chunk in chunks[len(previous.chunks) :]:
                self._session.write(chunk)
                mutated = True
        else:
            self._session.reset({"value": "".join(chunks), "done": False})
            mutated = True

        self._previous = _StreamingInputs(chunks, "".join(chunks))
        return mutated

    def apply_stable(self, content: str) -> bool:
        """Apply finished content. Returns whether the session changed."""
        previous = self._previous
        session = self._session
        mutated = False

        if isinstance(previous, _StreamingInputs):
            if content.startswith(previous.text):
                if not session.done:
                    session.finalize(content[len(previous.text) :])
                    mutated = True
            else:
                session.reset({"value": content, "done": True})
                mutated = True
        elif not isinstance(previous, _StableInputs) or previous.content != content:
            session.reset({"value": content, "done": True})
            mutated = True
        elif not session.done:
            session.finalize()
            mutated = True

        self._previous = _StableInputs(content)
        return mutated

    def refresh(self) -> bool:
        """Pull the session's snapshot. Returns whether a redraw is needed."""
        previous = self._snapshot
        self._snapshot = self._session.snapshot()
        return snapshot_changed(previous, self._snapshot)

    def update(
        self,
        *,
        chunks: Sequence[str] | None = None,
        content: str | None = None,
    ) -> bool:
        """Apply one input (chunks XOR content) and refresh.

        Returns:
            True when the session was mutated or the snapshot changed.

        Raises:
            ValueError: Unless exactly one of ``chunks``/``content`` is given.

        """
        if (chunks is None) == (content is None):
            raise ValueError("update() takes exactly one of chunks= or content=")
        if chunks is not None:
            mutated = self.apply_streaming(chunks)
        else:
            mutated = self.apply_stable(content)  # type: ignore[arg-type]
        changed = self.refresh()
        return mutated or changed


def _extends(chunks: tuple[str, ...], previous: tuple[str, ...]) -> bool:
    """Whether ``chunks`` keeps every previous chunk unchanged, in place."""
    if len(chunks) < len(previous):
        return False
    return all(a == b for a, b in zip(chunks, previous))


class DerivedState[TProps, TState]:
    """Thread a derived state through successive calls.

    Each call passes the previous result (None the first time) and the new
    props to ``derive`` and remembers what it returns.

    Example:
        >>> counter = DerivedState(lambda prev, step: (prev or 0) + step)
        >>> counter(2), counter(3)
        (2, 5)

    """

    __slots__ = ("_derive", "_current")

    def __init__(self, derive: Callable[[TState | None, TProps], TState]) -> None:
        self._derive = derive
        self._current: TState | None = None

    @property
    def current(self) -> TState | None:
        return self._current

    def __call__(self, props: TProps) -> TState:
        current = self._derive(self._current, props)
        self._current = current
        return current


def merge_state(parser: BlockParser) -> DerivedState[MergeInput, MachineState]:
    """DerivedState that folds successive MergeInputs through ``merge``.

    Example:
        >>> from rivulet.blocks import PatitasBlockParser
        >>> derived = merge_state(PatitasBlockParser())
        >>> state = derived(MergeInput.from_chunks(["Intro\\n\\n", "Body"]))
        >>> len(state.committed), state.buffer is not None
        (1, True)

    """
    return DerivedState(lambda previous, merge_input: merge(previous, merge_input, parser=parser))
