"""Tests for rivulet.session — the imperative session API."""

import pytest

from rivulet import create_session
from rivulet.errors import InvalidStateError, RivuletError
from rivulet.session import Session, SessionInit

# =========================================================================
# End-to-end scenarios with the Markdown parser
# =========================================================================


class TestScenarios:
    """Promotion behavior on real Markdown."""

    def test_promotes_completed_blocks_and_buffers_newest(self) -> None:
        session = create_session()

        session.write("Hello world\n\nSecond block")
        snapshot = session.snapshot()
        assert len(snapshot.committed_blocks) == 1
        assert len(snapshot.buffer_blocks) == 1

        session.write("\n\nThird block")
        snapshot = session.snapshot()
        assert len(snapshot.committed_blocks) == 2
        assert len(snapshot.buffer_blocks) == 1

    def test_finalize_flushes_remaining_block(self) -> None:
        session = create_session()

        session.write("Only block in stream")
        snapshot = session.snapshot()
        assert len(snapshot.committed_blocks) == 0
        assert len(snapshot.buffer_blocks) == 1

        session.finalize()
        snapshot = session.snapshot()
        assert len(snapshot.committed_blocks) == 1
        assert len(snapshot.buffer_blocks) == 0
        assert snapshot.done is True

    def test_finalize_accepts_final_suffix(self) -> None:
        session = create_session()

        session.write("First block\n\nSecond block sta")
        session.finalize("ble end")

        snapshot = session.snapshot()
        assert len(snapshot.committed_blocks) == 2
        assert len(snapshot.buffer_blocks) == 0

    def test_reset_rebuilds_session(self) -> None:
        session = create_session({"value": "Initial block", "done": True})

        snapshot = session.snapshot()
        assert len(snapshot.committed_blocks) == 1
        assert snapshot.done is True

        session.reset({"value": "Streaming block one\n\nblock two", "done": False})
        snapshot = session.snapshot()
        assert len(snapshot.committed_blocks) == 1
        assert len(snapshot.buffer_blocks) == 1
        assert snapshot.done is False

    def test_write_after_finalize_raises(self) -> None:
        session = create_session({"value": "hello", "done": True})

        with pytest.raises(InvalidStateError):
            session.write("world")

    def test_heading_then_paragraph(self) -> None:
        session = create_session()
        snapshot = session.write("# Title\n\nBody text")
        assert type(snapshot.committed_blocks[0]).__name__ == "Heading"
        assert type(snapshot.buffer_blocks[0]).__name__ == "Paragraph"

    def test_directive_streams_as_one_block(self) -> None:
        session = create_session()
        session.write(":::{note}\nFirst line\n")
        session.write("\nSecond paragraph inside\n")
        session.write(":::\n\nAfter")
        snapshot = session.finalize()
        names = [type(block).__name__ for block in snapshot.committed_blocks]
        assert names == ["Directive", "Paragraph"]

    def test_code_in_resumed_span_reads_from_full_text(self) -> None:
        session = create_session()
        session.write("Intro\n\nMiddle")
        session.write("\n\n```\ncode\n```\n\nEnd")
        snapshot = session.snapshot()
        code = snapshot.committed_blocks[-1]
        assert type(code).__name__ == "FencedCode"
        assert code.location.offset == session.text.index("```")
        assert code.get_code(session.text) == "code\n"


# =========================================================================
# Session mechanics (fake parser)
# =========================================================================


class TestCreate:
    def test_empty_session(self, parser) -> None:
        session = Session(parser=parser)
        snapshot = session.snapshot()
        assert snapshot.committed_blocks == ()
        assert snapshot.buffer_blocks == ()
        assert snapshot.version == 0
        assert snapshot.cursor == 0
        assert snapshot.done is False
        assert parser.calls == []

    def test_streaming_seed(self, parser) -> None:
        session = Session(SessionInit("A\n\nB"), parser=parser)
        snapshot = session.snapshot()
        assert [b.text for b in snapshot.committed_blocks] == ["A"]
        assert snapshot.buffer_blocks[0].text == "B"
        assert snapshot.version == 0

    def test_done_seed_commits_everything(self, parser) -> None:
        session = create_session({"value": "A\n\nB", "done": True}, parser=parser)
        assert len(session.snapshot().committed_blocks) == 2
        assert session.done is True

    def test_empty_done_seed(self, parser) -> None:
        session = create_session({"done": True}, parser=parser)
        assert session.done is True
        assert session.snapshot().committed_blocks == ()

    def test_mapping_without_value(self, parser) -> None:
        session = create_session({}, parser=parser)
        assert session.text == ""
        assert session.done is False


class TestWrite:
    def test_accumulates_text_and_chunks(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A\n\n")
        session.write("B")
        assert session.text == "A\n\nB"
        assert session.state.chunks == ("A\n\n", "B")

    def test_empty_chunk_is_noop(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A")
        state = session.state
        session.write("")
        assert session.state is state

    def test_returns_current_snapshot(self, parser) -> None:
        session = Session(parser=parser)
        snapshot = session.write("A\n\nB")
        assert snapshot is session.snapshot()

    def test_invalid_state_carries_operation(self, parser) -> None:
        session = create_session({"value": "x", "done": True}, parser=parser)
        with pytest.raises(InvalidStateError) as exc_info:
            session.write("y")
        assert exc_info.value.operation == "write"
        assert isinstance(exc_info.value, RivuletError)

    def test_buffer_growth_keeps_committed_reference(self, parser) -> None:
        session = Session(parser=parser)
        first = session.write("A\n\nB")
        second = session.write(" grows")
        third = session.write(" more")
        assert second.committed_blocks is first.committed_blocks
        assert third.committed_blocks is first.committed_blocks
        assert second.version == first.version

    def test_promotion_bumps_version(self, parser) -> None:
        session = Session(parser=parser)
        first = session.write("A\n\nB")
        second = session.write("\n\nC")
        assert second.version == first.version + 1


class TestFinalize:
    def test_idempotent(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A\n\nB")
        first = session.finalize()
        second = session.finalize()
        assert second is first
        assert second.committed_blocks is first.committed_blocks
        assert second.buffer_blocks == ()
        assert second.done is True

    def test_extra_ignored_once_done(self, parser) -> None:
        session = Session(parser=parser)
        session.finalize("A")
        session.finalize("B")
        assert session.text == "A"

    def test_extra_is_recorded_as_chunk(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A")
        session.finalize(" end")
        assert session.state.chunks == ("A", " end")
        assert session.snapshot().committed_blocks[0].text == "A end"

    def test_bumps_version(self, parser) -> None:
        session = Session(parser=parser)
        before = session.write("A")
        after = session.finalize()
        assert after.version == before.version + 1
        assert after.cursor == 1


class TestReset:
    def test_returns_to_empty(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A\n\nB")
        snapshot = session.reset()
        assert snapshot.committed_blocks == ()
        assert snapshot.buffer_blocks == ()
        assert snapshot.done is False
        assert session.text == ""

    def test_version_moves_forward(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A\n\nB\n\nC")
        before = session.version
        assert session.reset({"value": "X"}).version == before + 1

    def test_reopens_finalized_session(self, parser) -> None:
        session = create_session({"value": "A", "done": True}, parser=parser)
        session.reset()
        session.write("B")
        assert session.snapshot().buffer_blocks[0].text == "B"

    def test_reset_to_done(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A")
        snapshot = session.reset(SessionInit("X\n\nY", done=True))
        assert [b.text for b in snapshot.committed_blocks] == ["X", "Y"]
        assert snapshot.done is True


class TestSnapshot:
    def test_pure_read(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A\n\nB")
        calls = len(parser.calls)
        first = session.snapshot()
        second = session.snapshot()
        assert first is second
        assert len(parser.calls) == calls

    def test_snapshot_is_frozen(self, parser) -> None:
        session = Session(parser=parser)
        snapshot = session.write("A")
        with pytest.raises(AttributeError):
            snapshot.done = True  # type: ignore[misc]

    def test_repr(self, parser) -> None:
        session = Session(parser=parser)
        session.write("A\n\nB")
        assert repr(session) == (
            "Session(committed=1, buffered=True, version=1, cursor=3, done=False)"
        )
