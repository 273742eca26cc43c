"""Human-readable descriptions of an edit for render summaries."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from vpt.config.models import EncodingConfig
from vpt.core.formatting import format_decimal, format_eta
from vpt.edit.models import EditSpec, ScaleTarget, WatermarkPosition

# Assumed video bitrate (Mbps) for size estimates when nothing better is known
_DEFAULT_VIDEO_MBPS: dict[ScaleTarget, float] = {
    ScaleTarget.P2160: 20.0,
    ScaleTarget.P1440: 10.0,
}
_FALLBACK_VIDEO_MBPS = 6.0

_BITRATE_ARG = re.compile(r"-b:v\s+(\d+(?:\.\d+)?)([kKmM])")


@dataclass(frozen=True)
class RenderSummary:
    """What a render will produce, for display before it starts."""

    video_codec: str
    audio_codec: str
    size_estimate: str
    duration: str
    output_path: Path | None


def describe_video_codec(spec: EditSpec, encoding: EncodingConfig | None = None) -> str:
    """Effective video codec, e.g. "libx264 (Auto)" when not overridden."""
    if spec.video_codec:
        return spec.video_codec
    default = (encoding or EncodingConfig()).video_codec
    return f"{default} (Auto)"


def describe_audio_codec(spec: EditSpec, encoding: EncodingConfig | None = None) -> str:
    """Effective audio codec, e.g. "aac (Auto)", or "None (Muted)"."""
    if spec.mute:
        return "None (Muted)"
    if spec.audio_codec:
        return spec.audio_codec
    default = (encoding or EncodingConfig()).audio_codec
    return f"{default} (Auto)"


def estimate_output_size(spec: EditSpec, duration_seconds: float | None) -> str:
    """Rough output size from duration and assumed bitrates.

    A "-b:v" value in custom_args takes precedence over the assumed video
    bitrate.

    Returns:
        "~123 MB", "~1.5 GB", or "Unknown" when the duration is not known.
    """
    if not duration_seconds or duration_seconds <= 0:
        return "Unknown"

    video_mbps = _DEFAULT_VIDEO_MBPS.get(spec.scale, _FALLBACK_VIDEO_MBPS)
    match = _BITRATE_ARG.search(spec.custom_args)
    if match:
        value = float(match.group(1))
        video_mbps = value / 1000 if match.group(2).lower() == "k" else value

    audio_mbps = 0.0 if spec.mute else 0.192
    total_mb = duration_seconds * (video_mbps + audio_mbps) / 8
    if total_mb >= 1024:
        return f"~{format_decimal(total_mb / 1024, 2)} GB"
    return f"~{total_mb:.0f} MB"


def summarize_render(
    spec: EditSpec, encoding: EncodingConfig | None = None
) -> RenderSummary:
    """Build the pre-render summary for an edit."""
    duration = spec.expected_duration
    if duration:
        duration_text = format_eta(timedelta(seconds=duration))
    else:
        duration_text = "Unknown"

    return RenderSummary(
        video_codec=describe_video_codec(spec, encoding),
        audio_codec=describe_audio_codec(spec, encoding),
        size_estimate=estimate_output_size(spec, duration),
        duration=duration_text,
        output_path=spec.output_path,
    )


def describe_edits(spec: EditSpec) -> list[str]:
    """List the enabled edits in application order.

    Returns:
        Short phrases such as "crop 640x360+0+60" or "speed 2x". Empty when
        the edit is a plain transcode.
    """
    edits: list[str] = []

    if spec.trim_start is not None or spec.trim_end is not None:
        start = spec.trim_start.total_seconds() if spec.trim_start else 0.0
        end = (
            f"{format_decimal(spec.trim_end.total_seconds(), 3)}s"
            if spec.trim_end is not None
            else "end"
        )
        edits.append(f"trim {format_decimal(start, 3)}s-{end}")
    if spec.crop is not None:
        c = spec.crop
        edits.append(f"crop {c.width}x{c.height}+{c.x}+{c.y}")
    if spec.scale is not ScaleTarget.ORIGINAL:
        edits.append(f"scale {spec.scale.value}")
    if spec.rotate_90:
        edits.append("rotate 90")
    elif spec.rotate_180:
        edits.append("rotate 180")
    elif spec.rotate_270:
        edits.append("rotate 270")
    elif spec.rotate_degrees is not None and abs(spec.rotate_degrees) > 0.001:
        edits.append(f"rotate {format_decimal(spec.rotate_degrees, 2)}")
    if spec.flip_horizontal:
        edits.append("flip horizontal")
    if spec.flip_vertical:
        edits.append("flip vertical")
    if spec.has_speed_change:
        edits.append(f"speed {format_decimal(spec.speed, 2)}x")

    if spec.mute:
        edits.append("mute")
    else:
        if spec.volume_db != 0:
            edits.append(f"volume {spec.volume_db:+g}dB")
        if spec.stereo_to_mono:
            edits.append("mono")

    wm = spec.watermark
    if wm is not None:
        source = f'text "{wm.text}"' if wm.is_text else str(wm.image_path)
        where = (
            f"{wm.offset_x},{wm.offset_y}"
            if wm.position is WatermarkPosition.CUSTOM
            else wm.position.value
        )
        edits.append(f"watermark {source} at {where}")

    return edits
