"""Watermark overlay support.

Builds the -filter_complex graph that overlays a watermark image on the
edited video, and rasterizes text watermarks to transparent PNGs with Pillow.
"""

from __future__ import annotations

import logging
import math
import tempfile
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from vpt.core.formatting import format_decimal
from vpt.edit.models import EditSpec, WatermarkPosition, WatermarkSpec
from vpt.executor.ffmpeg_utils import cleanup_temp_file

logger = logging.getLogger(__name__)

# Padding around rasterized text: total extra width and height in pixels
TEXT_PAD_X = 20
TEXT_PAD_Y = 10

# Bold sans fonts tried in order before Pillow's built-in font
BOLD_FONT_CANDIDATES = (
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "C:/Windows/Fonts/segoeuib.ttf",
    "arialbd.ttf",
)

_ANCHORS: dict[WatermarkPosition, str] = {
    WatermarkPosition.TOP_LEFT: "x=10:y=10",
    WatermarkPosition.TOP_RIGHT: "x=W-w-10:y=10",
    WatermarkPosition.BOTTOM_LEFT: "x=10:y=H-h-10",
    WatermarkPosition.BOTTOM_RIGHT: "x=W-w-10:y=H-h-10",
    WatermarkPosition.CENTER: "x=(W-w)/2:y=(H-h)/2",
}


def overlay_position(watermark: WatermarkSpec) -> str:
    """Overlay coordinates for the watermark anchor.

    Custom positions use the integer offsets from the top-left corner.
    """
    if watermark.position is WatermarkPosition.CUSTOM:
        return f"x={int(watermark.offset_x)}:y={int(watermark.offset_y)}"
    return _ANCHORS[watermark.position]


def build_watermark_graph(video_filters: list[str], watermark: WatermarkSpec) -> str:
    """Build the complex filter graph overlaying input 1 onto input 0.

    Args:
        video_filters: The ordinary video chain, applied to the main video
            before the overlay.
        watermark: Watermark settings.

    Returns:
        Graph whose final video pad is labelled [outv].
    """
    main_chain = ",".join(video_filters) if video_filters else "null"
    scale = format_decimal(watermark.scale, 2, min_decimals=1)
    opacity = format_decimal(watermark.opacity, 2, min_decimals=1)

    return (
        f"[0:v]{main_chain}[main];"
        f"[1:v][main]scale2ref=w=iw*{scale}:h=-1[wm_sized][main_ref];"
        f"[wm_sized]format=rgba,colorchannelmixer=aa={opacity}[wm_final];"
        f"[main_ref][wm_final]overlay={overlay_position(watermark)}[outv]"
    )


def _load_bold_font(size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for candidate in BOLD_FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.warning("No bold TrueType font found, using Pillow default font")
    return ImageFont.load_default(size)


def rasterize_text_watermark(
    text: str,
    font_size: float = 32.0,
    temp_dir: Path | None = None,
) -> Path:
    """Render text to a transparent PNG.

    White bold text is drawn at (10, 5) on a canvas sized to the text plus
    padding.

    Args:
        text: Watermark text.
        font_size: Font size in points.
        temp_dir: Directory for the PNG (None = system temp dir).

    Returns:
        Path to the written PNG. The caller owns and must delete it.

    Raises:
        OSError: If the image cannot be written.
    """
    font = _load_bold_font(font_size)

    measure = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    left, top, right, bottom = measure.textbbox((0, 0), text, font=font)
    width = math.ceil(right - left) + TEXT_PAD_X
    height = math.ceil(bottom - top) + TEXT_PAD_Y

    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.text((10 - left, 5 - top), text, fill=(255, 255, 255, 255), font=font)

    directory = temp_dir or Path(tempfile.gettempdir())
    directory.mkdir(parents=True, exist_ok=True)
    png_path = directory / f"vpt_textwm_{uuid.uuid4().hex}.png"
    image.save(png_path, "PNG")

    logger.debug(
        "Rasterized text watermark",
        extra={"path": str(png_path), "width": width, "height": height},
    )
    return png_path


@contextmanager
def resolved_watermark(
    spec: EditSpec, temp_dir: Path | None = None
) -> Iterator[EditSpec]:
    """Yield a spec whose watermark (if any) is an image.

    Text watermarks are rasterized once on entry and the temporary PNG is
    deleted on exit. Specs without a text watermark are yielded unchanged.

    Example:
        with resolved_watermark(spec) as ready:
            command = build_command(ready)
            ...
    """
    watermark = spec.watermark
    if watermark is None or not watermark.is_text:
        yield spec
        return

    assert watermark.text is not None
    png_path = rasterize_text_watermark(watermark.text, watermark.font_size, temp_dir)
    try:
        image_watermark = watermark.model_copy(
            update={"image_path": png_path, "text": None}
        )
        yield spec.model_copy(update={"watermark": image_watermark})
    finally:
        cleanup_temp_file(png_path)
