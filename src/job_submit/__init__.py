"""Job submit module for the video-on-demand pipeline.

This module handles MediaConvert job creation:
- Job template download and customization
- Source aspect ratio probing
- Job submission and failure notifications
- Lambda handler
"""

from .job_settings import customize_job_settings, get_job_settings
from .mediaconvert import create_job, get_file_metadata
from .notifications import send_error
from .video_ratio import calculate_video_ratio

__all__ = [
    "customize_job_settings",
    "get_job_settings",
    "create_job",
    "get_file_metadata",
    "send_error",
    "calculate_video_ratio",
]
