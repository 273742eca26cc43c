"""Pydantic models describing a requested edit.

This module contains the immutable request types consumed by the command
compiler:
- CropRect: Crop rectangle in source pixels
- ScaleTarget: Resolution class for scale-and-pad
- WatermarkPosition: Overlay anchor
- WatermarkSpec: Image or text overlay settings
- EditSpec: The complete transformation of one media file
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ScaleTarget(str, Enum):
    """Target resolution class for scaling."""

    ORIGINAL = "original"
    P240 = "240p"
    P360 = "360p"
    P480 = "480p"
    P720 = "720p"
    P1080 = "1080p"
    P1440 = "1440p"
    P2160 = "2160p"

    @property
    def dimensions(self) -> tuple[int, int] | None:
        """Frame size (width, height) for this class, None for original."""
        return SCALE_DIMENSIONS.get(self)


SCALE_DIMENSIONS: dict[ScaleTarget, tuple[int, int]] = {
    ScaleTarget.P240: (426, 240),
    ScaleTarget.P360: (640, 360),
    ScaleTarget.P480: (854, 480),
    ScaleTarget.P720: (1280, 720),
    ScaleTarget.P1080: (1920, 1080),
    ScaleTarget.P1440: (2560, 1440),
    ScaleTarget.P2160: (3840, 2160),
}


class WatermarkPosition(str, Enum):
    """Anchor for the watermark overlay."""

    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"
    CENTER = "center"
    CUSTOM = "custom"


class CropRect(BaseModel):
    """Crop rectangle in source-resolution pixels."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class WatermarkSpec(BaseModel):
    """Watermark overlay settings.

    Exactly one of image_path or text must be set. Text watermarks are
    rasterized to a PNG before compilation (see vpt.executor.watermark).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    image_path: Path | None = None
    text: str | None = None
    position: WatermarkPosition = WatermarkPosition.BOTTOM_RIGHT
    offset_x: int = 0
    offset_y: int = 0
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    scale: float = Field(default=0.15, gt=0.0, le=1.0)
    """Watermark width as a fraction of the output frame width."""
    font_size: float = Field(default=32.0, gt=0.0)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str | None) -> str | None:
        """Treat blank text as no text."""
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_source(self) -> WatermarkSpec:
        """Require exactly one watermark source."""
        if self.image_path is not None and self.text is not None:
            raise ValueError("watermark takes either image_path or text, not both")
        if self.image_path is None and self.text is None:
            raise ValueError("watermark requires image_path or text")
        return self

    @property
    def is_text(self) -> bool:
        """True when this watermark still needs rasterizing."""
        return self.text is not None


class EditSpec(BaseModel):
    """Complete, immutable description of one requested transformation.

    Durations (trim_start, trim_end) accept seconds or "HH:MM:SS[.fff]"
    strings. The output path may be left unset; it is resolved by the
    orchestrator before compilation.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    input_path: Path
    output_path: Path | None = None
    output_extension: str = ""

    # Geometry
    crop: CropRect | None = None
    scale: ScaleTarget = ScaleTarget.ORIGINAL

    # Orientation
    rotate_90: bool = False
    rotate_180: bool = False
    rotate_270: bool = False
    rotate_degrees: float | None = None
    flip_horizontal: bool = False
    flip_vertical: bool = False

    # Temporal
    trim_start: timedelta | None = None
    trim_end: timedelta | None = None
    speed: float = Field(default=1.0, gt=0.0)

    # Audio
    mute: bool = False
    stereo_to_mono: bool = False
    volume_adjustments_db: tuple[float, ...] = ()
    audio_codec: str = ""

    watermark: WatermarkSpec | None = None

    # Transcode overrides
    video_codec: str = ""
    custom_args: str = ""

    total_duration: float | None = Field(default=None, gt=0.0)
    """Known source duration in seconds; skips duration discovery."""

    @field_validator("output_extension")
    @classmethod
    def validate_output_extension(cls, v: str) -> str:
        """Normalize extension overrides to a bare name ("mkv", not ".mkv")."""
        v = v.strip().lstrip(".")
        if any(sep in v for sep in ("/", "\\")):
            raise ValueError(f"Invalid output_extension '{v}'")
        return v

    @field_validator("audio_codec", "video_codec", "custom_args")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip surrounding whitespace so blank overrides mean default."""
        return v.strip()

    @field_validator("trim_start", "trim_end")
    @classmethod
    def validate_trim(cls, v: timedelta | None) -> timedelta | None:
        """Reject negative trim points."""
        if v is not None and v < timedelta(0):
            raise ValueError("trim points must not be negative")
        return v

    @model_validator(mode="after")
    def validate_edit(self) -> EditSpec:
        """Validate cross-field constraints."""
        orientations = [
            name
            for name, enabled in (
                ("rotate_90", self.rotate_90),
                ("rotate_180", self.rotate_180),
                ("rotate_270", self.rotate_270),
                ("rotate_degrees", self.rotate_degrees is not None),
            )
            if enabled
        ]
        if len(orientations) > 1:
            raise ValueError(
                f"Conflicting rotations: {', '.join(orientations)}. "
                "Choose at most one."
            )

        if (
            self.trim_start is not None
            and self.trim_end is not None
            and self.trim_start >= self.trim_end
        ):
            raise ValueError("trim_start must be before trim_end")

        return self

    @property
    def volume_db(self) -> float:
        """Net gain in decibels, rounded to 3 decimals."""
        return round(sum(self.volume_adjustments_db), 3)

    @property
    def has_speed_change(self) -> bool:
        """True when the speed differs enough from 1.0 to be applied."""
        return abs(self.speed - 1.0) > 0.01

    @property
    def expected_duration(self) -> float | None:
        """Duration of the output in source seconds, when known up front.

        trim_end (or total_duration) minus trim_start. None when neither
        trim_end nor total_duration is set.
        """
        if self.trim_end is not None:
            end = self.trim_end.total_seconds()
        elif self.total_duration is not None:
            end = self.total_duration
        else:
            return None
        start = self.trim_start.total_seconds() if self.trim_start else 0.0
        return max(0.0, end - start)
