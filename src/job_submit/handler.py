"""Lambda handler for submitting MediaConvert encoding jobs.

This Lambda is triggered by S3 ObjectCreated events when a source video is
uploaded to the source bucket.

Flow (per record):
1. Read the source object's user metadata
2. Download the folder's job template and validate it
3. Probe the source aspect ratio (optional)
4. Customize the template with input, outputs, role and metadata
5. Submit the job to MediaConvert

Any failure is published to the error SNS topic and the job is not submitted.
"""

import os
import uuid
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from ..shared.config import Settings, get_settings
from ..shared.models import JobMetadata, SourceObject, SubmittedJob
from .job_settings import customize_job_settings, get_job_settings
from .mediaconvert import create_job, get_file_metadata
from .notifications import error_to_dict, send_error
from .video_ratio import calculate_video_ratio

logger = Logger(service="job-submit")
tracer = Tracer(service="job-submit")
metrics = Metrics(service="job-submit", namespace="VideoOnDemand")

# User metadata key that lets uploaders choose the output folder
GUID_METADATA_KEY = "guid"


@logger.inject_lambda_context(log_event=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Submit an encoding job for every uploaded source video.

    Args:
        event: S3 ObjectCreated event
        context: Lambda context

    Returns:
        Submission summary

    Output structure:
        {
            "submitted": [{"job_id": "...", "input_path": "...", ...}],
            "failed": [{"input_path": "...", "error": {...}}],
            "skipped": ["s3://bucket/folder/job-settings.json"]
        }
    """
    settings = get_settings()

    result: dict[str, list[Any]] = {"submitted": [], "failed": [], "skipped": []}

    for record in event.get("Records", []):
        source = SourceObject.from_event_key(
            record["s3"]["bucket"]["name"],
            record["s3"]["object"]["key"],
        )

        # Uploading a template into the source bucket must not submit a job for it
        if os.path.basename(source.key) == settings.job_settings_file:
            logger.info("Skipping job settings upload", extra={"key": source.key})
            result["skipped"].append(source.input_path)
            continue

        try:
            submitted = submit_job(source, settings)
        except Exception as e:
            logger.exception(
                "Job submit failed",
                extra={"input_path": source.input_path},
            )
            metrics.add_metric(name="JobSubmitFailures", unit=MetricUnit.Count, value=1)
            try:
                send_error(
                    topic_arn=settings.sns_topic_arn,
                    stack_name=settings.stack_name,
                    log_group_name=context.log_group_name,
                    error=e,
                    source=source.input_path,
                )
            except Exception:
                # Remaining records in the batch still get processed
                logger.exception(
                    "Failed to send error notification",
                    extra={"input_path": source.input_path},
                )
            result["failed"].append(
                {"input_path": source.input_path, "error": error_to_dict(e)}
            )
            continue

        metrics.add_metric(name="JobsSubmitted", unit=MetricUnit.Count, value=1)
        result["submitted"].append(submitted.model_dump())

    return result


@tracer.capture_method
def submit_job(source: SourceObject, settings: Settings) -> SubmittedJob:
    """Build and submit the MediaConvert job for one source video.

    Raises:
        VodPipelineError: From any step; nothing is submitted in that case
    """
    file_metadata = get_file_metadata(source.bucket, source.key)

    guid = file_metadata.get(GUID_METADATA_KEY) or str(uuid.uuid4())
    metadata = JobMetadata(
        guid=guid,
        stack_name=settings.stack_name,
        solution_id=settings.solution_id,
    )
    output_path = f"s3://{settings.destination_bucket}/{guid}"

    logger.info(
        "Building job",
        extra={"guid": guid, "input_path": source.input_path, "output_path": output_path},
    )

    job = get_job_settings(source.bucket, source.settings_key(settings.job_settings_file))

    ratio = 0.0
    if settings.adjust_aspect_ratio:
        ratio = calculate_video_ratio(source.bucket, source.key)

    job = customize_job_settings(
        job,
        input_path=source.input_path,
        output_path=output_path,
        metadata=metadata.to_user_metadata(file_metadata),
        role=settings.mediaconvert_role,
        ratio=ratio,
    )

    created = create_job(job)

    return SubmittedJob(
        job_id=created["Id"],
        arn=created.get("Arn"),
        status=created.get("Status"),
        input_path=source.input_path,
        output_path=output_path,
    )
