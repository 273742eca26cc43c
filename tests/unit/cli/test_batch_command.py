"""Unit tests for the batch CLI command."""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from vpt.cli import main
from vpt.cli.exit_codes import ExitCode
from vpt.config.models import JobsConfig, ToolPathsConfig, VPTConfig
from vpt.executor.exceptions import ToolNotFoundError


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch("vpt.cli.configure_logging"):
        yield


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config(ffmpeg_path: Path) -> VPTConfig:
    return VPTConfig(
        tools=ToolPathsConfig(ffmpeg=ffmpeg_path),
        jobs=JobsConfig(poll_interval=0.01),
    )


@pytest.fixture
def job_file(tmp_path: Path) -> Path:
    (tmp_path / "a.mp4").write_bytes(b"")
    (tmp_path / "b.mp4").write_bytes(b"")
    path = tmp_path / "jobs.yaml"
    path.write_text(
        """
jobs:
  - input_path: a.mp4
    output_path: a_out.mp4
    scale: 480p
  - input_path: b.mp4
    output_path: b_out.mp4
    mute: true
"""
    )
    return path


def _invoke(runner, config, *args):
    return runner.invoke(main, ["batch", *map(str, args)], obj={"config": config})


class TestBatchDryRun:
    """Tests for batch --dry-run."""

    def test_prints_each_command(self, runner, config, job_file):
        result = _invoke(runner, config, job_file, "--dry-run")

        assert result.exit_code == 0, result.output
        assert f"# [1/2] {job_file.parent / 'a.mp4'}" in result.output
        assert f"# [2/2] {job_file.parent / 'b.mp4'}" in result.output
        assert result.output.count("ffmpeg -y -hide_banner") == 2
        assert "-an" in result.output


class TestBatchValidation:
    """Tests for invalid batch input."""

    def test_invalid_job_file(self, runner, config, tmp_path):
        path = tmp_path / "jobs.yaml"
        path.write_text("jobs:\n  - input_path: a.mp4\n    speed: -1\n")

        result = _invoke(runner, config, path)

        assert result.exit_code == ExitCode.VALIDATION_ERROR
        assert "jobs[0].speed" in result.output

    def test_job_file_not_utf8(self, runner, config, tmp_path):
        path = tmp_path / "jobs.yaml"
        path.write_bytes(b"jobs:\n  - input_path: \xff\xfe.mp4\n")

        result = _invoke(runner, config, path, "--dry-run")

        assert result.exit_code == ExitCode.VALIDATION_ERROR
        assert "not valid UTF-8" in result.output

    def test_missing_job_file(self, runner, config, tmp_path):
        result = _invoke(runner, config, tmp_path / "missing.yaml")
        assert result.exit_code == 2

    def test_tool_missing(self, runner, job_file):
        with patch(
            "vpt.jobs.orchestrator.require_tool",
            side_effect=ToolNotFoundError("ffmpeg"),
        ):
            result = _invoke(runner, VPTConfig(), job_file)

        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE


class TestBatchRun:
    """Tests for running a batch."""

    def test_all_succeed(self, runner, config, job_file, ffmpeg_stderr, fake_process):
        base = job_file.parent
        processes = [
            fake_process(ffmpeg_stderr, output_path=base / "a_out.mp4"),
            fake_process(ffmpeg_stderr, output_path=base / "b_out.mp4"),
        ]

        with patch("vpt.executor.runner.subprocess.Popen", side_effect=processes):
            result = _invoke(runner, config, job_file, "--quiet")

        assert result.exit_code == 0, result.output
        assert "2 done, 0 failed, 0 cancelled, 0 remaining" in result.output

    def test_failure_continues_and_sets_exit_code(
        self, runner, config, job_file, ffmpeg_stderr, fake_process
    ):
        base = job_file.parent
        processes = [
            fake_process(ffmpeg_stderr[:4], returncode=1),
            fake_process(ffmpeg_stderr, output_path=base / "b_out.mp4"),
        ]

        with patch(
            "vpt.executor.runner.subprocess.Popen", side_effect=processes
        ) as mock_popen:
            result = _invoke(runner, config, job_file, "--quiet")

        assert result.exit_code == ExitCode.OPERATION_FAILED
        assert mock_popen.call_count == 2
        assert "1 done, 1 failed, 0 cancelled, 0 remaining" in result.output
        assert (base / "b_out.mp4").exists()
