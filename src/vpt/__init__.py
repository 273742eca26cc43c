"""VPT - edit and transcode media files by driving ffmpeg.

Public entry points:

- EditSpec: declarative description of one edit/transcode request
- TranscodeOrchestrator: runs one EditSpec end-to-end
- BatchQueue: runs many EditSpecs strictly one at a time
"""

from vpt.edit.models import EditSpec
from vpt.jobs.orchestrator import TranscodeOrchestrator
from vpt.jobs.queue import BatchQueue

__version__ = "0.1.0"

__all__ = [
    "BatchQueue",
    "EditSpec",
    "TranscodeOrchestrator",
    "__version__",
]
