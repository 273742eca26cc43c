"""Unit tests for job logging context."""

import logging
import threading

from vpt.logging.context import (
    JobContextFilter,
    clear_job_context,
    get_job_context,
    job_context,
    set_job_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("vpt.test", logging.INFO, __file__, 1, "msg", None, None)


class TestJobContext:
    """Tests for job context management."""

    def setup_method(self):
        clear_job_context()

    def test_set_and_clear(self):
        set_job_context("abc123", "/videos/clip.mp4")
        assert get_job_context() == ("abc123", "/videos/clip.mp4")

        clear_job_context()
        assert get_job_context() == (None, None)

    def test_context_manager_restores_previous(self):
        """Nested contexts restore the outer one on exit."""
        with job_context("outer"):
            with job_context("inner", "/videos/b.mp4"):
                assert get_job_context() == ("inner", "/videos/b.mp4")
            assert get_job_context() == ("outer", None)
        assert get_job_context() == (None, None)

    def test_restores_on_exception(self):
        try:
            with job_context("failing"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert get_job_context() == (None, None)

    def test_threads_are_isolated(self):
        """A context set in one thread is invisible in another."""
        seen: list[tuple] = []

        def worker():
            seen.append(get_job_context())

        with job_context("main-thread"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == [(None, None)]


class TestJobContextFilter:
    """Tests for JobContextFilter."""

    def setup_method(self):
        clear_job_context()

    def test_no_context(self):
        record = _record()
        assert JobContextFilter().filter(record) is True
        assert record.job_id is None
        assert record.input_path is None
        assert record.job_tag == ""

    def test_with_job_and_input(self):
        record = _record()
        with job_context("3f2a9c1e7d", "/videos/clip.mp4"):
            JobContextFilter().filter(record)
        assert record.job_id == "3f2a9c1e7d"
        assert record.input_path == "/videos/clip.mp4"
        assert record.job_tag == "[3f2a9c1e:clip.mp4] "

    def test_with_job_only(self):
        record = _record()
        with job_context("3f2a9c1e7d"):
            JobContextFilter().filter(record)
        assert record.job_tag == "[3f2a9c1e] "
