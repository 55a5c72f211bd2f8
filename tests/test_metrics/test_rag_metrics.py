"""Tests for retrieval metrics."""

import threading

import pytest

from chatter_rag.metrics import RAGMetrics


@pytest.fixture
def metrics():
    return RAGMetrics()


def test_empty_summary(metrics):
    summary = metrics.get_summary()

    assert summary.total_searches == 0
    assert summary.success_rate == 0.0
    assert summary.retrieval_efficiency == 0.0
    assert summary.filter_rate == 0.0
    assert summary.tool_call_reduction == 0.0


def test_record_search(metrics, make_chunk):
    chunks = [make_chunk(file_path="a.py"), make_chunk(file_path="b.py"), make_chunk(file_path="a.py")]

    metrics.record_search("repo", requested=4, returned=chunks, filtered_from=10)
    metrics.record_search("other", requested=4, returned=[], filtered_from=0)

    summary = metrics.get_summary()
    assert summary.total_searches == 2
    assert summary.successful_searches == 1
    assert summary.success_rate == pytest.approx(0.5)
    assert summary.avg_chunks_per_search == pytest.approx(1.5)
    assert summary.total_chunks_requested == 8
    assert summary.total_chunks_returned == 3
    assert summary.retrieval_efficiency == pytest.approx(3 / 8)
    assert summary.total_chunks_filtered_out == 7
    assert summary.filter_rate == pytest.approx(0.7)
    assert summary.unique_files_retrieved == 2
    assert summary.unique_repositories_searched == 2


def test_availability_and_tool_calls(metrics):
    metrics.record_availability(True)
    metrics.record_availability(True)
    metrics.record_availability(False)
    metrics.record_tool_calls(3, rag_was_available=True)
    metrics.record_tool_calls(10, rag_was_available=False)

    summary = metrics.get_summary()
    assert summary.rag_available_count == 2
    assert summary.rag_unavailable_count == 1
    assert summary.tool_calls_with_rag == 3
    assert summary.tool_calls_without_rag == 10
    assert summary.tool_call_reduction == pytest.approx(0.7)


def test_reset(metrics, make_chunk):
    metrics.record_search("repo", 1, [make_chunk()], 1)
    metrics.record_availability(False)

    metrics.reset()

    assert metrics.get_summary().total_searches == 0
    assert metrics.get_summary().rag_unavailable_count == 0


def test_concurrent_recording(metrics, make_chunk):
    chunk = make_chunk()

    def worker():
        for _ in range(200):
            metrics.record_search("repo", 1, [chunk], 2)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert metrics.get_summary().total_searches == 800
    assert metrics.get_summary().total_chunks_filtered_out == 800


def test_log_summary_runs(metrics, make_chunk):
    metrics.record_search("repo", 2, [make_chunk()], 3)
    metrics.record_tool_calls(1, rag_was_available=False)

    metrics.log_summary()
