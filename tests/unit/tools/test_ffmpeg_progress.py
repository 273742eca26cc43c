"""Unit tests for FFmpeg stderr progress parsing."""

from datetime import timedelta

import pytest

from vpt.tools.ffmpeg_progress import (
    MAX_RUNNING_PERCENT,
    ProgressTracker,
    parse_duration,
    parse_size,
    parse_speed,
    parse_time,
)

PROGRESS_LINE = (
    "frame= 1234 fps= 30 q=28.0 size=    5120kB time=00:01:23.45 "
    "bitrate= 502.1kbits/s speed=2.0x"
)


class TestParsers:
    """Tests for the single-token parsers."""

    def test_parse_duration(self):
        line = "  Duration: 01:02:03.50, start: 0.000000, bitrate: 1205 kb/s"
        assert parse_duration(line) == pytest.approx(3723.5)

    def test_parse_duration_absent(self):
        assert parse_duration("Input #0, mov,mp4") is None

    def test_parse_time(self):
        assert parse_time(PROGRESS_LINE) == pytest.approx(83.45)

    def test_parse_time_absent(self):
        assert parse_time("frame=    0 fps=0.0 q=0.0 size=0kB time=N/A") is None

    def test_parse_speed(self):
        assert parse_speed(PROGRESS_LINE) == 2.0
        assert parse_speed("speed=N/A") is None

    @pytest.mark.parametrize(
        "line,expected",
        [
            (PROGRESS_LINE, "5120kB"),
            ("size=   12MiB time=00:00:01.00", "12MiB"),
            ("Lsize=    1024kB time=00:00:10.00", "1024kB"),
            ("time=00:00:01.00", None),
        ],
    )
    def test_parse_size(self, line, expected):
        assert parse_size(line) == expected


class TestProgressTracker:
    """Tests for ProgressTracker."""

    def test_waits_for_duration(self):
        """No events until the total duration is known."""
        tracker = ProgressTracker()
        assert tracker.feed(PROGRESS_LINE) is None
        assert tracker.total_seconds is None

    def test_discovers_duration(self):
        tracker = ProgressTracker()
        assert tracker.feed("  Duration: 00:02:00.00, start: 0.0") is None

        event = tracker.feed(PROGRESS_LINE)

        assert event is not None
        assert event.percent == 69
        assert event.speed == 2.0
        assert event.size == "5120kB"
        assert event.eta == timedelta(seconds=(120 - 83.45) / 2.0)
        assert event.message == "Processing... 1:23 / 2:00 (2x) - ETA: 00:00:18"

    def test_only_first_duration_used(self):
        """Later Duration lines (e.g. from a second input) are ignored."""
        tracker = ProgressTracker()
        tracker.feed("  Duration: 00:00:10.00, start: 0.0")
        tracker.feed("  Duration: 00:00:02.00, start: 0.0")
        assert tracker.total_seconds == 10

    def test_known_duration_skips_discovery(self):
        tracker = ProgressTracker(known_duration=200)
        tracker.feed("  Duration: 00:00:10.00, start: 0.0")
        assert tracker.total_seconds == 200

    def test_trim_overrides_duration(self):
        tracker = ProgressTracker(known_duration=600, trim_start=30, trim_end=90)
        assert tracker.total_seconds == 60

        event = tracker.feed("time=00:00:30.00 speed=1.0x")
        assert event is not None
        assert event.percent == 50

    def test_trim_start_only(self):
        tracker = ProgressTracker(known_duration=100, trim_start=20)
        assert tracker.total_seconds == 80

    def test_speed_scales_total(self):
        """Progress follows output time, so a 2x render reaches 50% halfway."""
        tracker = ProgressTracker(known_duration=100, speed=2.0)
        assert tracker.total_seconds == 50

        event = tracker.feed("time=00:00:25.00 speed=4.0x")
        assert event is not None
        assert event.percent == 50

    def test_slow_speed_with_trim(self):
        tracker = ProgressTracker(trim_start=10, trim_end=40, speed=0.5)
        assert tracker.total_seconds == 60

    def test_monotonic(self):
        """Percent never decreases even if time goes backwards."""
        tracker = ProgressTracker(known_duration=100)
        percents = [
            tracker.feed(f"time=00:00:{sec:05.2f}").percent
            for sec in (10.0, 40.0, 30.0, 50.0)
        ]
        assert percents == [10, 40, 40, 50]
        assert tracker.percent == 50

    def test_capped_below_100(self):
        tracker = ProgressTracker(known_duration=10)
        event = tracker.feed("time=00:00:12.00 speed=1.0x")
        assert event.percent == MAX_RUNNING_PERCENT
        assert event.eta is None

    def test_no_eta_when_stalled(self):
        tracker = ProgressTracker(known_duration=100)
        event = tracker.feed("time=00:00:10.00 speed=0.00x")
        assert event.eta is None
        assert event.message == "Processing... 0:10 / 1:40 (0x)"
