"""Shared test fixtures for VPT."""

import io
import subprocess
import time
from pathlib import Path

import pytest

# Stderr of a 10 second encode at roughly 5x speed
FFMPEG_STDERR = [
    "Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'clip.mp4':\n",
    "  Duration: 00:00:10.00, start: 0.000000, bitrate: 1205 kb/s\n",
    "  Stream #0:0(und): Video: h264 (High), yuv420p, 1280x720, 30 fps\n",
    "frame=   75 fps=0.0 q=28.0 size=     256kB time=00:00:02.50 "
    "bitrate= 838.9kbits/s speed=5.00x\n",
    "frame=  150 fps=149 q=28.0 size=     512kB time=00:00:05.00 "
    "bitrate= 838.9kbits/s speed=4.98x\n",
    "frame=  300 fps=149 q=-1.0 Lsize=    1024kB time=00:00:10.00 "
    "bitrate= 838.9kbits/s speed=5.01x\n",
]


class FakeProcess:
    """Stand-in for subprocess.Popen driven by canned stderr lines.

    A hanging process never exits on its own: poll() returns None and
    wait(timeout) raises TimeoutExpired until kill() is called.
    """

    def __init__(
        self,
        stderr_lines: list[str] | None = None,
        returncode: int = 0,
        output_path: Path | None = None,
        hang: bool = False,
    ) -> None:
        self.stderr = io.StringIO("".join(stderr_lines or []))
        self._final_returncode = returncode
        self._hang = hang
        self.killed = False
        self.returncode: int | None = None if hang else returncode
        if output_path is not None:
            output_path.write_bytes(b"\x00" * 1024)

    def poll(self) -> int | None:
        return self.returncode

    def wait(self, timeout: float | None = None) -> int:
        if self.returncode is None:
            if timeout is None:
                raise AssertionError("wait() without timeout on a hanging process")
            time.sleep(timeout)
            raise subprocess.TimeoutExpired("ffmpeg", timeout)
        return self.returncode

    def kill(self) -> None:
        self.killed = True
        if self.returncode is None:
            self.returncode = -9


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    """Create an (empty) source media file."""
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"")
    return path


@pytest.fixture
def ffmpeg_path(tmp_path: Path) -> Path:
    """Create a placeholder encoder executable path."""
    path = tmp_path / "bin" / "ffmpeg"
    path.parent.mkdir()
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def ffmpeg_stderr() -> list[str]:
    """Return canned ffmpeg stderr for a 10 second encode."""
    return list(FFMPEG_STDERR)


@pytest.fixture
def fake_process() -> type[FakeProcess]:
    """Return the FakeProcess class for building Popen stand-ins."""
    return FakeProcess
