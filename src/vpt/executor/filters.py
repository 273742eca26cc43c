"""Filter chain construction for edit requests.

Pure functions mapping EditSpec fields to FFmpeg filter expressions. The
video chain is always ordered crop, scale, rotation, flips, speed. The audio
chain is ordered gain, mono mix, tempo.
"""

from __future__ import annotations

import math

from vpt.core.formatting import format_decimal
from vpt.edit.exceptions import EditSpecError
from vpt.edit.models import CropRect, EditSpec, ScaleTarget

# Valid range of a single atempo stage
TEMPO_MIN = 0.5
TEMPO_MAX = 2.0

# Custom rotations smaller than this (degrees) are treated as no rotation
MIN_ROTATION_DEGREES = 0.001

MONO_MIX_FILTER = "pan=mono|c0=.5*c0+.5*c1"


def crop_filter(crop: CropRect) -> str:
    """Build a crop filter: crop=W:H:X:Y."""
    return f"crop={crop.width}:{crop.height}:{crop.x}:{crop.y}"


def scale_filter(target: ScaleTarget) -> str | None:
    """Build a scale-and-letterbox filter for a resolution class.

    Returns:
        The filter expression, or None for ScaleTarget.ORIGINAL.
    """
    dimensions = target.dimensions
    if dimensions is None:
        return None
    w, h = dimensions
    return (
        f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
        f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2"
    )


def rotation_filter(spec: EditSpec) -> str | None:
    """Build the rotation filter for at most one orientation choice."""
    if spec.rotate_90:
        return "transpose=clock"
    if spec.rotate_180:
        return "transpose=clock,transpose=clock"
    if spec.rotate_270:
        return "transpose=cclock"
    degrees = spec.rotate_degrees
    if degrees is not None and abs(degrees) > MIN_ROTATION_DEGREES:
        rad = format_decimal(math.radians(degrees), 8)
        return f"rotate={rad}:'rotw(iw,ih)':'roth(iw,ih)':0:0:black"
    return None


def tempo_stages(multiplier: float) -> tuple[float, ...]:
    """Split a speed multiplier into atempo stages.

    A single atempo stage only accepts factors within [0.5, 2.0], so factors
    outside that range are decomposed into a fixed stage and a remainder.

    Args:
        multiplier: Speed multiplier, must be > 0.

    Returns:
        (m,) within range, (0.5, m/0.5) below it, (2.0, m/2.0) above it.

    Raises:
        EditSpecError: If multiplier is not positive.
    """
    if multiplier <= 0:
        raise EditSpecError(f"speed must be greater than 0, got {multiplier}")
    if multiplier < TEMPO_MIN:
        return (TEMPO_MIN, multiplier / TEMPO_MIN)
    if multiplier > TEMPO_MAX:
        return (TEMPO_MAX, multiplier / TEMPO_MAX)
    return (multiplier,)


def tempo_filter(multiplier: float) -> str:
    """Build the atempo chain for a speed multiplier."""
    stages = tempo_stages(multiplier)
    if len(stages) == 1:
        return f"atempo={format_decimal(stages[0], 4)}"
    fixed, remainder = stages
    return f"atempo={fixed:.1f},atempo={format_decimal(remainder, 4)}"


def build_video_filters(spec: EditSpec) -> list[str]:
    """Build the ordered video filter chain.

    Returns:
        Filter expressions in application order; empty if no video edits.
    """
    if spec.speed <= 0:
        raise EditSpecError(f"speed must be greater than 0, got {spec.speed}")

    filters: list[str] = []

    if spec.crop is not None:
        filters.append(crop_filter(spec.crop))

    scale = scale_filter(spec.scale)
    if scale:
        filters.append(scale)

    rotation = rotation_filter(spec)
    if rotation:
        filters.append(rotation)

    if spec.flip_horizontal:
        filters.append("hflip")
    if spec.flip_vertical:
        filters.append("vflip")

    if spec.has_speed_change:
        filters.append(f"setpts={format_decimal(1.0 / spec.speed, 4)}*PTS")

    return filters


def build_audio_filters(spec: EditSpec) -> list[str]:
    """Build the ordered audio filter chain.

    Returns:
        Filter expressions in application order; always empty when muted.
    """
    if spec.mute:
        return []

    filters: list[str] = []

    gain = spec.volume_db
    if gain != 0:
        filters.append(f"volume={format_decimal(gain, 3)}dB")

    if spec.stereo_to_mono:
        filters.append(MONO_MIX_FILTER)

    if spec.has_speed_change:
        filters.append(tempo_filter(spec.speed))

    return filters
