"""Imperative session API over the pure merge engine.

A Session holds exactly one MachineState cell and replaces it on every
command. All parsing decisions are made by ``rivulet.merge.merge``.

States:
    empty ──write──▶ streaming ──write──▶ streaming
      │                  │
      └────finalize──────┴──finalize──▶ done ──reset──▶ empty/streaming/done

Example:
    >>> session = create_session()
    >>> snap = session.write("Hello world\\n\\nSecond block")
    >>> len(snap.committed_blocks), len(snap.buffer_blocks)
    (1, 1)
    >>> snap = session.finalize()
    >>> len(snap.committed_blocks), snap.done
    (2, True)

Thread Safety:
    Not thread-safe. Serialize writers before calling into a session.

"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from rivulet.blocks import BlockParser, PatitasBlockParser
from rivulet.config import StreamConfig, get_stream_config
from rivulet.errors import InvalidStateError
from rivulet.merge import merge
from rivulet.state import MachineState, MergeInput, Snapshot, empty_state


@dataclass(frozen=True, slots=True)
class SessionInit:
    """Seed for a session: initial text and whether it is already complete."""

    value: str = ""
    done: bool = False


type InitLike = SessionInit | Mapping[str, Any] | None


def _coerce_init(initial: InitLike) -> SessionInit:
    if initial is None:
        return SessionInit()
    if isinstance(initial, SessionInit):
        return initial
    return SessionInit(
        value=initial.get("value") or "",
        done=bool(initial.get("done", False)),
    )


class Session:
    """Stateful stream of Markdown chunks.

    Args:
        initial: Optional seed (SessionInit or ``{"value": ..., "done": ...}``).
        parser: Block parser to use. Defaults to a PatitasBlockParser built
            from ``config``.
        config: Stream configuration. Defaults to the active context config.

    """

    __slots__ = ("_parser", "_state", "_strict")

    def __init__(
        self,
        initial: InitLike = None,
        *,
        parser: BlockParser | None = None,
        config: StreamConfig | None = None,
    ) -> None:
        if config is None:
            config = get_stream_config()
        self._parser: BlockParser = (
            parser if parser is not None else PatitasBlockParser.from_config(config)
        )
        self._strict = config.strict_parsing
        self._state: MachineState = self._seed(_coerce_init(initial))

    def _seed(self, init: SessionInit) -> MachineState:
        if not init.value and not init.done:
            return empty_state()
        chunks = (init.value,) if init.value else ()
        return self._merge(None, MergeInput(init.value, init.done, chunks))

    def _merge(self, previous: MachineState | None, merge_input: MergeInput) -> MachineState:
        return merge(previous, merge_input, parser=self._parser, strict=self._strict)

    @property
    def state(self) -> MachineState:
        """Current machine state (immutable)."""
        return self._state

    @property
    def text(self) -> str:
        """Running text written so far."""
        return self._state.text

    @property
    def done(self) -> bool:
        return self._state.done

    @property
    def version(self) -> int:
        return self._state.version

    def write(self, chunk: str) -> Snapshot:
        """Append a chunk and merge it.

        Raises:
            InvalidStateError: If the session is already finalized.

        """
        state = self._state
        if state.done:
            raise InvalidStateError("write")
        if chunk:
            self._state = self._merge(
                state,
                MergeInput(state.text + chunk, False, state.chunks + (chunk,)),
            )
        return self._state.snapshot

    def finalize(self, extra: str | None = None) -> Snapshot:
        """Append an optional final suffix and seal the session.

        Every remaining block is promoted and the buffer empties. Calling
        finalize on a sealed session returns the current snapshot unchanged.

        """
        state = self._state
        if state.done:
            return state.snapshot
        text, chunks = state.text, state.chunks
        if extra:
            text, chunks = text + extra, chunks + (extra,)
        self._state = self._merge(state, MergeInput(text, True, chunks))
        return self._state.snapshot

    def reset(self, initial: InitLike = None) -> Snapshot:
        """Discard all state and reinitialize, optionally from a seed.

        The new state's version is one past the discarded state's version,
        so version-keyed caches never mistake it for the old stream.

        """
        version = self._state.version + 1
        seeded = self._seed(_coerce_init(initial))
        self._state = replace(seeded, version=version)
        return self._state.snapshot

    def snapshot(self) -> Snapshot:
        """Read the current snapshot without changing anything."""
        return self._state.snapshot

    def __repr__(self) -> str:
        state = self._state
        return (
            f"Session(committed={len(state.committed)}, "
            f"buffered={state.buffer is not None}, version={state.version}, "
            f"cursor={state.cursor}, done={state.done})"
        )


def create_session(
    initial: InitLike = None,
    *,
    parser: BlockParser | None = None,
    config: StreamConfig | None = None,
) -> Session:
    """Create a Session, optionally seeded with initial text."""
    return Session(initial, parser=parser, config=config)
