"""Compile an EditSpec into an FFmpeg argument vector.

The argument layout is:

    -y -hide_banner [-ss START] [-to END] -i INPUT [-i WATERMARK]
    [-vf CHAIN | -filter_complex GRAPH] [-af CHAIN] -map ...
    -c:v CODEC [-preset P -crf N] [-c:a CODEC [-b:a RATE] | -an]
    [CUSTOM ARGS] OUTPUT

Compilation is pure: it never touches the filesystem or mutates the edit spec.
"""

from __future__ import annotations

import shlex

from vpt.config.models import EncodingConfig
from vpt.core.formatting import format_timestamp
from vpt.edit.exceptions import EditSpecError
from vpt.edit.models import EditSpec
from vpt.executor.filters import build_audio_filters, build_video_filters
from vpt.executor.types import CompiledCommand, ComplexGraph, SimpleChain
from vpt.executor.watermark import build_watermark_graph


def _trim_args(spec: EditSpec) -> list[str]:
    args: list[str] = []
    if spec.trim_start is not None:
        args += ["-ss", format_timestamp(spec.trim_start.total_seconds())]
    if spec.trim_end is not None:
        args += ["-to", format_timestamp(spec.trim_end.total_seconds())]
    return args


def _video_codec_args(spec: EditSpec, encoding: EncodingConfig) -> list[str]:
    codec = spec.video_codec or encoding.video_codec
    if codec == "copy":
        return ["-c:v", "copy"]
    return ["-c:v", codec, "-preset", encoding.preset, "-crf", str(encoding.crf)]


def _audio_codec_args(spec: EditSpec, encoding: EncodingConfig) -> list[str]:
    if spec.mute:
        return ["-an"]
    if spec.audio_codec:
        return ["-c:a", spec.audio_codec]
    args = ["-c:a", encoding.audio_codec]
    if encoding.audio_bitrate:
        args += ["-b:a", encoding.audio_bitrate]
    return args


def _custom_args(spec: EditSpec) -> list[str]:
    if not spec.custom_args:
        return []
    try:
        return shlex.split(spec.custom_args)
    except ValueError as e:
        raise EditSpecError(f"Cannot parse custom_args: {e}") from e


def build_command(
    spec: EditSpec, encoding: EncodingConfig | None = None
) -> CompiledCommand:
    """Translate a resolved EditSpec into an encoder command.

    Args:
        spec: Edit to compile. output_path must be set and any text
            watermark must already be rasterized (see resolved_watermark).
        encoding: Default encoder settings (defaults to EncodingConfig()).

    Returns:
        ComplexGraph when a watermark is present, otherwise SimpleChain.

    Raises:
        EditSpecError: If the edit spec is not in a compilable state.
    """
    encoding = encoding or EncodingConfig()

    if spec.output_path is None:
        raise EditSpecError("output_path must be resolved before compilation")

    watermark = spec.watermark
    if watermark is not None:
        if watermark.is_text:
            raise EditSpecError("text watermark must be rasterized before compilation")
        if watermark.image_path is None:
            raise EditSpecError("watermark has neither image_path nor text")

    video_filters = build_video_filters(spec)
    audio_filters = build_audio_filters(spec)

    args: list[str] = ["-y", "-hide_banner"]
    args += _trim_args(spec)
    args += ["-i", str(spec.input_path)]

    if watermark is not None:
        assert watermark.image_path is not None
        graph = build_watermark_graph(video_filters, watermark)
        args += ["-i", str(watermark.image_path)]
        args += ["-filter_complex", graph]
        if audio_filters:
            args += ["-af", ",".join(audio_filters)]
        args += ["-map", "[outv]"]
    else:
        if video_filters:
            args += ["-vf", ",".join(video_filters)]
        if audio_filters:
            args += ["-af", ",".join(audio_filters)]
        args += ["-map", "0:v?"]

    if not spec.mute:
        args += ["-map", "0:a?"]

    args += _video_codec_args(spec, encoding)
    args += _audio_codec_args(spec, encoding)
    args += _custom_args(spec)
    args.append(str(spec.output_path))

    if watermark is not None:
        assert watermark.image_path is not None
        return ComplexGraph(
            args=tuple(args),
            output_path=spec.output_path,
            filter_graph=graph,
            watermark_path=watermark.image_path,
            audio_filters=tuple(audio_filters),
        )
    return SimpleChain(
        args=tuple(args),
        output_path=spec.output_path,
        video_filters=tuple(video_filters),
        audio_filters=tuple(audio_filters),
    )


def format_command(tool: str, command: CompiledCommand) -> str:
    """Render a command as a shell-quoted string for logs and dry runs."""
    return shlex.join([tool, *command.args])
