"""Unit tests for compiling EditSpecs into encoder commands."""

from pathlib import Path

import pytest

from vpt.config.models import EncodingConfig
from vpt.edit.exceptions import EditSpecError
from vpt.edit.models import EditSpec
from vpt.executor.command import build_command, format_command
from vpt.executor.types import ComplexGraph, SimpleChain

INPUT = Path("/videos/clip.mp4")
OUTPUT = Path("/videos/out.mp4")


def _spec(**kwargs) -> EditSpec:
    kwargs.setdefault("output_path", OUTPUT)
    return EditSpec(input_path=INPUT, **kwargs)


class TestBuildCommandSimple:
    """Tests for commands without a watermark."""

    def test_plain_transcode(self):
        command = build_command(_spec())

        assert isinstance(command, SimpleChain)
        assert command.args == (
            "-y",
            "-hide_banner",
            "-i",
            "/videos/clip.mp4",
            "-map",
            "0:v?",
            "-map",
            "0:a?",
            "-c:v",
            "libx264",
            "-preset",
            "veryfast",
            "-crf",
            "20",
            "-c:a",
            "aac",
            "-b:a",
            "192k",
            "/videos/out.mp4",
        )
        assert command.output_path == OUTPUT

    def test_deterministic(self):
        """Equal specs compile to identical arguments."""
        spec = _spec(scale="720p", speed=1.5, stereo_to_mono=True)
        assert build_command(spec).args == build_command(spec).args

    def test_filters_joined(self):
        command = build_command(_spec(flip_horizontal=True, speed=2.0))

        args = list(command.args)
        assert args[args.index("-vf") + 1] == "hflip,setpts=0.5*PTS"
        assert args[args.index("-af") + 1] == "atempo=2"
        assert command.video_filters == ("hflip", "setpts=0.5*PTS")
        assert command.audio_filters == ("atempo=2",)

    def test_trim_before_input(self):
        command = build_command(_spec(trim_start=65.25, trim_end=120))

        args = list(command.args)
        assert args[2:6] == ["-ss", "00:01:05.250", "-to", "00:02:00.000"]
        assert args.index("-to") < args.index("-i")

    def test_muted(self):
        """Muted output drops audio and never maps it."""
        command = build_command(_spec(mute=True, volume_adjustments_db=(3,)))

        args = list(command.args)
        assert "-an" in args
        assert "0:a?" not in args
        assert "-af" not in args
        assert "-c:a" not in args

    def test_codec_overrides(self):
        command = build_command(_spec(video_codec="libx265", audio_codec="libopus"))

        args = list(command.args)
        assert args[args.index("-c:v") + 1] == "libx265"
        assert args[args.index("-c:a") + 1] == "libopus"
        assert "-b:a" not in args

    def test_video_copy_has_no_quality_args(self):
        args = list(build_command(_spec(video_codec="copy")).args)
        assert args[args.index("-c:v") + 1] == "copy"
        assert "-crf" not in args
        assert "-preset" not in args

    def test_encoding_config_defaults(self):
        encoding = EncodingConfig(preset="slow", crf=18, audio_bitrate="")
        args = list(build_command(_spec(), encoding).args)

        assert args[args.index("-preset") + 1] == "slow"
        assert args[args.index("-crf") + 1] == "18"
        assert "-b:a" not in args

    def test_custom_args_before_output(self):
        command = build_command(_spec(custom_args='-b:v 2M -metadata title="My Clip"'))

        assert command.args[-5:] == (
            "-b:v",
            "2M",
            "-metadata",
            "title=My Clip",
            "/videos/out.mp4",
        )

    def test_unbalanced_custom_args_rejected(self):
        with pytest.raises(EditSpecError, match="custom_args"):
            build_command(_spec(custom_args='-metadata title="oops'))

    def test_output_extension_target(self):
        spec = _spec(output_path=Path("/videos/out.mkv"), output_extension="mkv")
        assert build_command(spec).args[-1] == "/videos/out.mkv"

    def test_unresolved_output_rejected(self):
        with pytest.raises(EditSpecError, match="output_path"):
            build_command(EditSpec(input_path=INPUT))


class TestBuildCommandWatermark:
    """Tests for commands with a watermark overlay."""

    def test_image_watermark_uses_complex_graph(self):
        spec = _spec(
            scale="720p",
            speed=2.0,
            watermark={"image_path": "/logo.png", "opacity": 0.5},
        )
        command = build_command(spec)

        assert isinstance(command, ComplexGraph)
        assert command.watermark_path == Path("/logo.png")

        args = list(command.args)
        assert args[args.index("-i", 3) + 1] == "/logo.png"
        assert args[args.index("-filter_complex") + 1] == command.filter_graph
        assert "-vf" not in args
        assert args[args.index("-af") + 1] == "atempo=2"

        maps = [args[i + 1] for i, a in enumerate(args) if a == "-map"]
        assert maps == ["[outv]", "0:a?"]

    def test_muted_watermark_maps_video_only(self):
        spec = _spec(mute=True, watermark={"image_path": "/logo.png"})
        args = list(build_command(spec).args)

        maps = [args[i + 1] for i, a in enumerate(args) if a == "-map"]
        assert maps == ["[outv]"]
        assert "-an" in args

    def test_unrasterized_text_rejected(self):
        spec = _spec(watermark={"text": "(c) me"})
        with pytest.raises(EditSpecError, match="rasterized"):
            build_command(spec)


class TestFormatCommand:
    """Tests for format_command()."""

    def test_shell_quoted(self):
        spec = EditSpec(
            input_path=Path("/videos/my clip.mp4"), output_path=Path("/out/o.mp4")
        )
        text = format_command("ffmpeg", build_command(spec))

        assert text.startswith("ffmpeg -y -hide_banner -i '/videos/my clip.mp4'")
        assert text.endswith("/out/o.mp4")
