"""Shared utilities for the video-on-demand job submit function."""

from .config import Settings, get_settings
from .exceptions import (
    VodPipelineError,
    JobSettingsDownloadError,
    JobSettingsUpdateFailure,
    InvalidOutputGroupType,
    GroupNameResolutionFailure,
    FileMetadataError,
    VideoRatioError,
    JobSubmissionError,
    RetryableError,
)
from .models import (
    OutputGroupType,
    SourceObject,
    JobMetadata,
    SubmittedJob,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "VodPipelineError",
    "JobSettingsDownloadError",
    "JobSettingsUpdateFailure",
    "InvalidOutputGroupType",
    "GroupNameResolutionFailure",
    "FileMetadataError",
    "VideoRatioError",
    "JobSubmissionError",
    "RetryableError",
    # Models
    "OutputGroupType",
    "SourceObject",
    "JobMetadata",
    "SubmittedJob",
]
