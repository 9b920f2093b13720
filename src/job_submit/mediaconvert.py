"""Source metadata lookup and MediaConvert job submission."""

import uuid
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from ..shared.aws_clients import get_mediaconvert_client, get_s3_client, retry_with_backoff
from ..shared.config import get_settings
from ..shared.exceptions import FileMetadataError, JobSubmissionError

logger = Logger(service="job-submit")


def get_file_metadata(bucket: str, key: str) -> dict[str, str]:
    """Read the user metadata of a source object.

    Args:
        bucket: Source bucket
        key: Source object key

    Returns:
        User metadata (x-amz-meta-* headers), empty if none were set

    Raises:
        FileMetadataError: If the object cannot be read
    """
    logger.info("Getting file metadata", extra={"bucket": bucket, "key": key})

    try:
        response = get_s3_client().head_object(Bucket=bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
        raise FileMetadataError(
            "Failed to get file meta",
            {"bucket": bucket, "key": key, "error": str(e)},
        ) from e

    metadata = response.get("Metadata") or {}
    logger.debug("File metadata", extra={"file_metadata": metadata})
    return metadata


def create_job(job: dict[str, Any]) -> dict[str, Any]:
    """Create an encoding job in MediaConvert.

    Throttling and other transient errors are retried with backoff. Every
    attempt carries the same ClientRequestToken, so a retry after a job was
    already created returns that job instead of queuing a duplicate.

    Args:
        job: Customized job template (CreateJob request parameters); a
            ClientRequestToken is added if the template has none

    Returns:
        The created job as returned by MediaConvert

    Raises:
        JobSubmissionError: If MediaConvert rejects the job
        RetryableError: If transient errors persist after all retries
    """
    settings = get_settings()
    client = get_mediaconvert_client()

    job.setdefault("ClientRequestToken", str(uuid.uuid4()))

    try:
        response = retry_with_backoff(
            lambda: client.create_job(**job),
            max_retries=settings.max_retries,
            base_delay=settings.retry_delay_seconds,
        )
    except ClientError as e:
        error = e.response.get("Error", {})
        raise JobSubmissionError(
            f"MediaConvert rejected the job: {error.get('Message', str(e))}",
            {"error_code": error.get("Code"), "role": job.get("Role"), "queue": job.get("Queue")},
        ) from e

    created = response["Job"]
    logger.info(
        "Job submitted to MediaConvert",
        extra={"job_id": created.get("Id"), "status": created.get("Status"), "job": job},
    )
    return created
