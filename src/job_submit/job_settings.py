"""MediaConvert job template download and customization.

Each source folder carries a generic job template (job-settings.json).
Before submission the template is customized for the uploaded file:

- the single input points at the uploaded object
- every output group gets a destination under the job's output root
- HLS rendition heights follow the probed source aspect ratio
- role, queue, acceleration and tracking metadata are filled in

Multiple output groups of the same type are supported: each type keeps its
own ordinal counter so their destinations don't collide.
"""

import json
import math
import re
from typing import Any

from aws_lambda_powertools import Logger

from ..shared.aws_clients import get_s3_client
from ..shared.exceptions import (
    GroupNameResolutionFailure,
    InvalidOutputGroupType,
    JobSettingsDownloadError,
    JobSettingsUpdateFailure,
)
from ..shared.models import OutputGroupType

logger = Logger(service="job-submit")

# PREFERRED enables acceleration only when the source supports it
DEFAULT_ACCELERATION_SETTINGS: dict[str, str] = {"Mode": "PREFERRED"}

_WHITESPACE = re.compile(r"\s+")


def get_job_settings(bucket: str, settings_file: str) -> dict[str, Any]:
    """Download the job template from S3 and run a basic validation.

    Args:
        bucket: Source bucket holding the template
        settings_file: Key of the template (``{folder}/job-settings.json``)

    Returns:
        Parsed job template

    Raises:
        JobSettingsDownloadError: If the template is missing, not JSON, or
            fails shape validation
    """
    logger.info(
        "Downloading job settings",
        extra={"bucket": bucket, "settings_file": settings_file},
    )

    try:
        response = get_s3_client().get_object(Bucket=bucket, Key=settings_file)
        job = json.loads(response["Body"].read())
        validate_job_settings(job)
    except Exception as e:
        raise JobSettingsDownloadError(
            e, {"bucket": bucket, "settings_file": settings_file}
        ) from e

    return job


def validate_job_settings(job: Any) -> None:
    """Check the template has a Settings block with at most one input.

    Raises:
        ValueError: If the template shape is invalid
    """
    if not isinstance(job, dict) or not isinstance(job.get("Settings"), dict):
        raise ValueError("Invalid settings file in s3: missing Settings")

    inputs = job["Settings"].get("Inputs")
    if inputs is not None and (not isinstance(inputs, list) or len(inputs) > 1):
        raise ValueError("Invalid settings file in s3: expected a single input")


def customize_job_settings(
    job: dict[str, Any],
    input_path: str,
    output_path: str,
    metadata: dict[str, str],
    role: str,
    ratio: float = 0,
) -> dict[str, Any]:
    """Update a job template with the source and destination details.

    The template is mutated in place and returned. On failure the template
    may be partially updated and must not be submitted.

    Args:
        job: Parsed job template (already shape-validated)
        input_path: S3 URI of the source video
        output_path: Output root; group destinations are created beneath it
        metadata: Solution tracking metadata, wins over template UserMetadata
        role: MediaConvert IAM role ARN
        ratio: Source width / height; 0 leaves rendition heights untouched

    Returns:
        The customized job template

    Raises:
        JobSettingsUpdateFailure: For any invalid or unexpected template content
    """
    logger.info(
        "Updating job settings with the source and destination details",
        extra={"input_path": input_path, "output_path": output_path, "ratio": ratio},
    )

    try:
        if ratio < 0:
            raise ValueError(f"Aspect ratio must be positive, got {ratio}")

        # Local to this call: concurrent customizations never share ordinals
        ordinals = dict.fromkeys(OutputGroupType, 0)

        job["Settings"]["Inputs"][0]["FileInput"] = input_path

        for group in job["Settings"]["OutputGroups"]:
            group_settings = group["OutputGroupSettings"]
            group_type = _resolve_group_type(group_settings.get("Type"))

            ordinals[group_type] += 1
            group_settings[group_type.settings_key]["Destination"] = _destination_path(
                output_path, group, ordinals[group_type]
            )

            if group_type is OutputGroupType.HLS and ratio:
                _apply_ratio(group.get("Outputs") or [], ratio)

        if "AccelerationSettings" not in job:
            job["AccelerationSettings"] = dict(DEFAULT_ACCELERATION_SETTINGS)

        job["Role"] = role

        # Jobs take the queue name, not its ARN
        queue = job.get("Queue")
        if isinstance(queue, str) and "/" in queue:
            job["Queue"] = queue.rsplit("/", 1)[-1]

        job["UserMetadata"] = {**(job.get("UserMetadata") or {}), **metadata}

    except Exception as e:
        logger.error(
            "Failed to update job settings",
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        raise JobSettingsUpdateFailure(e) from e

    return job


def _resolve_group_type(value: Any) -> OutputGroupType:
    """Map an OutputGroupSettings.Type tag onto the closed set of types."""
    try:
        return OutputGroupType(value)
    except ValueError:
        raise InvalidOutputGroupType(value) from None


def _destination_path(output_path: str, group: dict[str, Any], ordinal: int) -> str:
    """Build the destination for an output group.

    CustomName is used as-is (minus whitespace); otherwise the group Name is
    suffixed with the group's ordinal among groups of the same type.
    """
    custom_name = group.get("CustomName")
    if custom_name:
        if not isinstance(custom_name, str):
            raise GroupNameResolutionFailure({"custom_name": repr(custom_name)})
        return f"{output_path}/{_WHITESPACE.sub('', custom_name)}/"

    name = group.get("Name")
    if not isinstance(name, str):
        raise GroupNameResolutionFailure({"name": repr(name)})
    return f"{output_path}/{_WHITESPACE.sub('', name)}{ordinal}/"


def _apply_ratio(outputs: list[dict[str, Any]], ratio: float) -> None:
    """Recompute rendition heights from their widths, discarding any set height."""
    for output in outputs:
        video = output.get("VideoDescription")
        if video and video.get("Width"):
            video["Height"] = scaled_height(video["Width"], ratio)


def scaled_height(width: int, ratio: float) -> int:
    """Height for a width at the given aspect ratio, rounding halves up."""
    return math.floor(width / ratio + 0.5)
