"""Environment-aware configuration with validation.

This module provides centralized configuration management using Pydantic Settings.
All environment variables are validated at startup to fail fast on misconfigurations.
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Job submit settings loaded from environment variables.

    The Lambda environment is populated by the stack; every value has a
    default so unit tests and local runs can construct settings directly.

    Example:
        >>> settings = get_settings()
        >>> print(settings.job_settings_file)
        'job-settings.json'
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_REGION",
        description="AWS region for all services",
    )

    # MediaConvert
    mediaconvert_endpoint: str = Field(
        default="",
        alias="MEDIACONVERT_ENDPOINT",
        description="Account-specific MediaConvert API endpoint URL",
    )
    mediaconvert_role: str = Field(
        default="",
        alias="MEDIACONVERT_ROLE",
        description="IAM role ARN MediaConvert assumes to read and write S3",
    )

    # S3
    job_settings_file: str = Field(
        default="job-settings.json",
        alias="JOB_SETTINGS",
        description="Name of the job template file inside each source folder",
    )
    destination_bucket: str = Field(
        default="",
        alias="DESTINATION_BUCKET",
        description="S3 bucket for transcoded outputs",
    )
    signed_url_expires: int = Field(
        default=600,
        ge=60,
        le=3600,
        alias="SIGNED_URL_EXPIRES",
        description="Lifetime of the presigned URL handed to ffprobe (seconds)",
    )

    # Solution tracking
    solution_id: str = Field(
        default="SO0146",
        alias="SOLUTION_ID",
        description="Solution identifier attached to every job",
    )
    stack_name: str = Field(
        default="",
        alias="STACKNAME",
        description="CloudFormation stack name",
    )

    # SNS
    sns_topic_arn: str = Field(
        default="",
        alias="SNS_TOPIC_ARN",
        description="SNS topic for job submit failure notifications",
    )

    # Aspect ratio probing
    adjust_aspect_ratio: bool = Field(
        default=True,
        alias="ADJUST_ASPECT_RATIO",
        description="Probe the source and recompute HLS rendition heights",
    )
    ffprobe_path: str = Field(
        default="/opt/bin/ffprobe",
        alias="FFPROBE_PATH",
        description="Path to the ffprobe binary (Lambda layer)",
    )
    ffprobe_timeout_seconds: int = Field(
        default=60,
        ge=1,
        le=600,
        alias="FFPROBE_TIMEOUT_SECONDS",
        description="Timeout for a single ffprobe run",
    )

    # Retry Configuration
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        alias="MAX_RETRIES",
        description="Maximum retry attempts for throttled CreateJob calls",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.1,
        le=30.0,
        alias="RETRY_DELAY_SECONDS",
        description="Initial delay between retries (exponential backoff)",
    )

    @field_validator("mediaconvert_endpoint", mode="before")
    @classmethod
    def validate_mediaconvert_endpoint(cls, v: str) -> str:
        """Ensure MediaConvert endpoint is a valid URL."""
        if v and not v.startswith("https://"):
            raise ValueError("MediaConvert endpoint must start with https://")
        return v

    @field_validator("mediaconvert_role", "sns_topic_arn", mode="before")
    @classmethod
    def validate_arn_format(cls, v: str) -> str:
        """Validate ARN format."""
        if v and not v.startswith("arn:aws:"):
            raise ValueError("Invalid ARN format - must start with 'arn:aws:'")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached for the lifetime of the process.
    This is safe for Lambda because each invocation gets a fresh process
    or reuses a warm container with the same settings.

    Returns:
        Validated Settings instance

    Raises:
        ValidationError: If environment variables are invalid
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when environment variables change.
    """
    get_settings.cache_clear()
