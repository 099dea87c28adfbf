"""Benchmark chunked streaming vs reparsing the whole text per chunk.

Run with:
    pytest benchmarks/benchmark_streaming.py -v --benchmark-only
"""

try:
    import pytest

    from rivulet import PatitasBlockParser, create_session, merge
    from rivulet.state import MergeInput

    @pytest.mark.benchmark(group="stream")
    def test_benchmark_session_stream(benchmark, large_document, chunk_size):
        """Benchmark Session.write over the whole document, chunk by chunk."""
        chunks = [
            large_document[i : i + chunk_size]
            for i in range(0, len(large_document), chunk_size)
        ]

        def stream():
            session = create_session()
            for chunk in chunks:
                session.write(chunk)
            session.finalize()

        benchmark(stream)

    @pytest.mark.benchmark(group="stream")
    def test_benchmark_divergence_per_chunk(benchmark, large_document, chunk_size):
        """Baseline: every chunk forces a full reparse (worst case)."""
        parser = PatitasBlockParser()
        prefixes = [
            large_document[: i + chunk_size]
            for i in range(0, min(len(large_document), 4000), chunk_size)
        ]

        def reparse_everything():
            for prefix in prefixes:
                merge(None, MergeInput(prefix), parser=parser)

        benchmark(reparse_everything)

except ImportError:
    pass  # pytest not available
