"""Edit options shared by CLI commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from vpt.edit.models import ScaleTarget, WatermarkPosition

_CROP_HELP = "Crop rectangle as W:H:X:Y in source pixels."


def _parse_crop(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> dict[str, int] | None:
    if value is None:
        return None
    parts = value.split(":")
    if len(parts) != 4:
        raise click.BadParameter("expected W:H:X:Y")
    try:
        width, height, x, y = (int(p) for p in parts)
    except ValueError as e:
        raise click.BadParameter("expected integers in W:H:X:Y") from e
    return {"width": width, "height": height, "x": x, "y": y}


def _parse_time(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> float | str | None:
    """Accept plain seconds ("12.5") or a clock time ("00:00:12.5")."""
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return value


_EDIT_OPTIONS: list[Callable[[Callable[..., Any]], Callable[..., Any]]] = [
    click.option(
        "--output",
        "-o",
        "output_path",
        type=click.Path(path_type=Path, dir_okay=False),
        default=None,
        help="Output file (default: next to input with a timestamp suffix).",
    ),
    click.option(
        "--format",
        "output_extension",
        default="",
        help="Output container extension, e.g. mkv (default: keep input's).",
    ),
    click.option("--crop", callback=_parse_crop, default=None, help=_CROP_HELP),
    click.option(
        "--scale",
        type=click.Choice([t.value for t in ScaleTarget], case_sensitive=False),
        default=ScaleTarget.ORIGINAL.value,
        help="Scale and letterbox to a resolution class.",
    ),
    click.option(
        "--rotate",
        type=click.Choice(["90", "180", "270"]),
        default=None,
        help="Rotate clockwise by a right angle.",
    ),
    click.option(
        "--rotate-degrees", type=float, default=None, help="Rotate by any angle."
    ),
    click.option("--hflip", is_flag=True, help="Flip horizontally."),
    click.option("--vflip", is_flag=True, help="Flip vertically."),
    click.option(
        "--start",
        "trim_start",
        callback=_parse_time,
        default=None,
        help="Trim start (seconds or HH:MM:SS).",
    ),
    click.option(
        "--end",
        "trim_end",
        callback=_parse_time,
        default=None,
        help="Trim end (seconds or HH:MM:SS).",
    ),
    click.option("--speed", type=float, default=1.0, help="Speed multiplier."),
    click.option("--mute", is_flag=True, help="Drop all audio."),
    click.option("--mono", "stereo_to_mono", is_flag=True, help="Mix down to mono."),
    click.option(
        "--volume",
        "volume_adjustments_db",
        type=float,
        multiple=True,
        help="Gain in dB (repeatable; values are summed).",
    ),
    click.option("--video-codec", default="", help="Video codec override."),
    click.option("--audio-codec", default="", help="Audio codec override."),
    click.option(
        "--watermark-image",
        type=click.Path(path_type=Path, dir_okay=False),
        default=None,
        help="Image to overlay.",
    ),
    click.option("--watermark-text", default=None, help="Text to overlay."),
    click.option(
        "--watermark-position",
        type=click.Choice([p.value for p in WatermarkPosition], case_sensitive=False),
        default=WatermarkPosition.BOTTOM_RIGHT.value,
        help="Watermark anchor.",
    ),
    click.option(
        "--watermark-offset",
        type=(int, int),
        default=(0, 0),
        help="X Y offset for --watermark-position custom.",
    ),
    click.option(
        "--watermark-opacity", type=float, default=1.0, help="Opacity 0.0-1.0."
    ),
    click.option(
        "--watermark-scale",
        type=float,
        default=0.15,
        help="Watermark width as a fraction of frame width.",
    ),
    click.option(
        "--font-size", type=float, default=32.0, help="Text watermark font size."
    ),
    click.option(
        "--duration",
        "total_duration",
        type=float,
        default=None,
        help="Known input duration in seconds (skips detection).",
    ),
    click.option(
        "--args", "custom_args", default="", help="Extra encoder arguments."
    ),
]


def edit_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach all edit options to a click command."""
    for option in reversed(_EDIT_OPTIONS):
        func = option(func)
    return func


def spec_fields_from_options(
    input_path: Path, options: dict[str, Any]
) -> dict[str, Any]:
    """Map parsed CLI options to EditSpec fields.

    The result is validated by EditSpec.model_validate, so invalid
    combinations surface as a pydantic ValidationError.
    """
    rotate = options.get("rotate")
    fields: dict[str, Any] = {
        "input_path": input_path,
        "output_path": options.get("output_path"),
        "output_extension": options.get("output_extension") or "",
        "crop": options.get("crop"),
        "scale": options.get("scale", ScaleTarget.ORIGINAL.value).lower(),
        "rotate_90": rotate == "90",
        "rotate_180": rotate == "180",
        "rotate_270": rotate == "270",
        "rotate_degrees": options.get("rotate_degrees"),
        "flip_horizontal": options.get("hflip", False),
        "flip_vertical": options.get("vflip", False),
        "trim_start": options.get("trim_start"),
        "trim_end": options.get("trim_end"),
        "speed": options.get("speed", 1.0),
        "mute": options.get("mute", False),
        "stereo_to_mono": options.get("stereo_to_mono", False),
        "volume_adjustments_db": tuple(options.get("volume_adjustments_db", ())),
        "video_codec": options.get("video_codec", ""),
        "audio_codec": options.get("audio_codec", ""),
        "custom_args": options.get("custom_args", ""),
        "total_duration": options.get("total_duration"),
    }

    image = options.get("watermark_image")
    text = options.get("watermark_text")
    if image is not None or text:
        offset_x, offset_y = options.get("watermark_offset", (0, 0))
        fields["watermark"] = {
            "image_path": image,
            "text": text,
            "position": options.get(
                "watermark_position", WatermarkPosition.BOTTOM_RIGHT.value
            ).lower(),
            "offset_x": offset_x,
            "offset_y": offset_y,
            "opacity": options.get("watermark_opacity", 1.0),
            "scale": options.get("watermark_scale", 0.15),
            "font_size": options.get("font_size", 32.0),
        }
    return fields
