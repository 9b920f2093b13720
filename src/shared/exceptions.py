"""Custom exception hierarchy for the job submit function.

All pipeline-specific exceptions inherit from VodPipelineError,
enabling consistent error handling and structured SNS notifications.

Exception hierarchy:
    VodPipelineError (base)
    ├── JobSettingsDownloadError
    ├── JobSettingsUpdateFailure
    ├── InvalidOutputGroupType
    ├── GroupNameResolutionFailure
    ├── FileMetadataError
    ├── VideoRatioError
    ├── JobSubmissionError
    └── RetryableError
"""

from typing import Any

CUSTOM_SETTINGS_HELP = (
    "Details on using custom settings: "
    "https://github.com/awslabs/video-on-demand-on-aws-foundations"
)


class VodPipelineError(Exception):
    """Base exception for all pipeline errors.

    Provides structured error information suitable for logging
    and SNS notifications.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for metrics/filtering
        details: Additional context as key-value pairs
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize pipeline error.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (e.g., 'VIDEO_RATIO_ERROR')
            details: Additional context for debugging
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON serialization.

        Returns:
            Dictionary with error_code, error_message, and details.
            Note: Uses 'error_message' instead of 'message' to avoid conflicts
            with Python's logging module which reserves 'message' internally.
        """
        return {
            "error_code": self.error_code,
            "error_message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.error_code!r}, {self.message!r})"


class JobSettingsDownloadError(VodPipelineError):
    """Raised when the job template cannot be downloaded or fails shape validation.

    This covers:
    - Template object missing from the source bucket
    - Invalid JSON
    - Missing Settings key or more than one input
    """

    MESSAGE = (
        "Failed to download and validate the job-settings.json file. "
        "Please check its contents and location. " + CUSTOM_SETTINGS_HELP
    )

    def __init__(self, cause: Exception, details: dict[str, Any] | None = None) -> None:
        error_details = dict(details or {})
        error_details["error"] = str(cause)
        super().__init__(self.MESSAGE, "JOB_SETTINGS_DOWNLOAD_ERROR", error_details)
        self.cause = cause


class JobSettingsUpdateFailure(VodPipelineError):
    """Raised when the job template cannot be customized.

    This is the only error the customizer lets escape. It wraps the
    underlying cause, which is kept on ``cause`` and chained.
    """

    MESSAGE = "Failed to update the job-settings.json file. " + CUSTOM_SETTINGS_HELP

    def __init__(self, cause: Exception) -> None:
        super().__init__(
            self.MESSAGE,
            "JOB_SETTINGS_UPDATE_ERROR",
            {"error": str(cause), "error_type": type(cause).__name__},
        )
        self.cause = cause


class InvalidOutputGroupType(VodPipelineError):
    """Raised when an output group's Type is not a recognized tag."""

    def __init__(self, group_type: Any) -> None:
        super().__init__(
            "OutputGroupSettings.Type is not a valid type. Please check your job settings file.",
            "INVALID_OUTPUT_GROUP_TYPE",
            {"type": group_type},
        )


class GroupNameResolutionFailure(VodPipelineError):
    """Raised when an output group has neither CustomName nor a usable Name."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            "Cannot validate group name in job.Settings.OutputGroups. "
            "Please check your job settings file.",
            "GROUP_NAME_RESOLUTION_ERROR",
            details,
        )


class FileMetadataError(VodPipelineError):
    """Raised when the source object's metadata cannot be read."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "FILE_METADATA_ERROR", details)


class VideoRatioError(VodPipelineError):
    """Raised when the source aspect ratio cannot be probed.

    This covers:
    - ffprobe missing, failing or timing out
    - Unparseable ffprobe output
    - No stream with usable dimensions
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "VIDEO_RATIO_ERROR", details)


class JobSubmissionError(VodPipelineError):
    """Raised when MediaConvert job submission fails.

    This covers:
    - API errors from MediaConvert
    - Invalid job settings rejected by the service
    - IAM permission errors
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "JOB_SUBMISSION_ERROR", details)


class RetryableError(VodPipelineError):
    """Raised when a transient error persists after all retries."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize retryable error.

        Args:
            message: Error description
            original_error: The underlying exception that triggered this
            details: Additional context
        """
        error_details = details or {}
        if original_error:
            error_details["original_error"] = str(original_error)
            error_details["original_error_type"] = type(original_error).__name__

        super().__init__(message, "RETRYABLE_ERROR", error_details)
        self.original_error = original_error
