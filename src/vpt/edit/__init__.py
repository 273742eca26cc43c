"""Edit request models and descriptions."""

from vpt.edit.describe import (
    RenderSummary,
    describe_audio_codec,
    describe_edits,
    describe_video_codec,
    estimate_output_size,
    summarize_render,
)
from vpt.edit.exceptions import EditSpecError, JobFileError
from vpt.edit.loader import format_validation_error, load_job_file, parse_job_data
from vpt.edit.models import (
    SCALE_DIMENSIONS,
    CropRect,
    EditSpec,
    ScaleTarget,
    WatermarkPosition,
    WatermarkSpec,
)

__all__ = [
    "SCALE_DIMENSIONS",
    "CropRect",
    "EditSpec",
    "EditSpecError",
    "JobFileError",
    "RenderSummary",
    "ScaleTarget",
    "WatermarkPosition",
    "WatermarkSpec",
    "describe_audio_codec",
    "describe_edits",
    "describe_video_codec",
    "estimate_output_size",
    "format_validation_error",
    "load_job_file",
    "parse_job_data",
    "summarize_render",
]
