"""Property-based tests for session invariants using Hypothesis.

These run the real Markdown parser over arbitrary chunk sequences and check
the guarantees a reconciling renderer relies on.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from rivulet import create_session

# Characters that open or close Markdown block constructs, so chunk
# boundaries land inside headings, fences, lists, quotes and directives.
MARKDOWN_ALPHABET = "ab #-*>`~:{}[]()!|=_\n "

chunk_lists = st.lists(st.text(alphabet=MARKDOWN_ALPHABET, max_size=24), max_size=12)


class TestSessionInvariants:
    @given(chunk_lists)
    @settings(max_examples=150, deadline=None)
    def test_committed_sequence_only_grows(self, chunks: list[str]) -> None:
        """Every committed block stays in place, unchanged, until reset."""
        session = create_session()
        seen: tuple = ()
        for chunk in chunks:
            committed = session.write(chunk).committed_blocks
            assert len(committed) >= len(seen)
            assert all(a is b for a, b in zip(seen, committed))
            seen = committed
        final = session.finalize().committed_blocks
        assert all(a is b for a, b in zip(seen, final))

    @given(chunk_lists)
    @settings(max_examples=150, deadline=None)
    def test_buffer_holds_at_most_one_block(self, chunks: list[str]) -> None:
        session = create_session()
        for chunk in chunks:
            assert len(session.write(chunk).buffer_blocks) <= 1
        assert session.finalize().buffer_blocks == ()

    @given(chunk_lists)
    @settings(max_examples=100, deadline=None)
    def test_cursor_is_monotonic_and_bounded(self, chunks: list[str]) -> None:
        session = create_session()
        cursor = 0
        for chunk in chunks:
            snapshot = session.write(chunk)
            assert cursor <= snapshot.cursor <= len(session.text)
            cursor = snapshot.cursor

    @given(chunk_lists)
    @settings(max_examples=100, deadline=None)
    def test_reference_stable_without_promotion(self, chunks: list[str]) -> None:
        session = create_session()
        previous = session.snapshot()
        for chunk in chunks:
            current = session.write(chunk)
            if len(current.committed_blocks) == len(previous.committed_blocks):
                assert current.committed_blocks is previous.committed_blocks
                assert current.version == previous.version
            previous = current

    @given(chunk_lists)
    @settings(max_examples=100, deadline=None)
    def test_finalize_is_idempotent(self, chunks: list[str]) -> None:
        session = create_session()
        for chunk in chunks:
            session.write(chunk)
        first = session.finalize()
        second = session.finalize()
        assert second.committed_blocks is first.committed_blocks
        assert second.buffer_blocks == ()
        assert second.done is True


class TestMalformedInput:
    @given(st.lists(st.text(alphabet=":::{}\n`~", max_size=16), max_size=10))
    @settings(max_examples=100, deadline=None)
    def test_truncated_directives_never_raise(self, chunks: list[str]) -> None:
        session = create_session()
        for chunk in chunks:
            session.write(chunk)
        session.finalize()

    @given(st.lists(st.text(max_size=32), max_size=8))
    @settings(max_examples=100, deadline=None)
    def test_arbitrary_text_never_raises(self, chunks: list[str]) -> None:
        session = create_session()
        for chunk in chunks:
            session.write(chunk)
        assert session.finalize().done is True
