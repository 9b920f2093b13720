"""SNS error notifications for failed job submissions.

Operators subscribe to the stack's topic; each message links to the
function's CloudWatch log group alongside the structured error.
"""

import json
from typing import Any

from aws_lambda_powertools import Logger

from ..shared.aws_clients import get_sns_client
from ..shared.config import get_settings
from ..shared.exceptions import VodPipelineError

logger = Logger(service="job-submit")

# SNS rejects longer subjects
SNS_SUBJECT_LIMIT = 100


def error_to_dict(error: BaseException) -> dict[str, Any]:
    """Structured form of any error raised while submitting a job."""
    if isinstance(error, VodPipelineError):
        return error.to_dict()
    return {
        "error_code": "UNEXPECTED_ERROR",
        "error_message": str(error),
        "details": {"error_type": type(error).__name__},
    }


def log_group_url(region: str, log_group_name: str) -> str:
    """CloudWatch console link to a log group."""
    return (
        f"https://console.aws.amazon.com/cloudwatch/home?region={region}"
        f"#logStream:group={log_group_name}"
    )


def format_error_message(
    error: BaseException,
    log_group_name: str,
    region: str,
    source: str | None = None,
) -> str:
    """Format the JSON notification body.

    Args:
        error: The failure to report
        log_group_name: Log group of the failing function
        region: AWS region for the console link
        source: S3 URI of the source video, if known

    Returns:
        Pretty-printed JSON string
    """
    message: dict[str, Any] = {
        "Details": log_group_url(region, log_group_name),
        "Error": error_to_dict(error),
    }
    if source:
        message["Source"] = source
    return json.dumps(message, indent=2, default=str)


def send_error(
    topic_arn: str,
    stack_name: str,
    log_group_name: str,
    error: BaseException,
    source: str | None = None,
) -> dict[str, Any]:
    """Publish a job submit failure to SNS.

    Args:
        topic_arn: Error topic; the notification is skipped when empty
        stack_name: Stack name used in the subject line
        log_group_name: Log group of the failing function
        error: The failure to report
        source: S3 URI of the source video, if known

    Returns:
        Notification result with the SNS message id when sent
    """
    if not topic_arn:
        logger.info("No error SNS topic configured, skipping notification")
        return {"notification_sent": False, "reason": "No topic configured"}

    settings = get_settings()

    logger.info(
        "Sending SNS error notification",
        extra={"topic_arn": topic_arn, "error": str(error)},
    )

    subject = f"{stack_name}: Encoding Job Submit Failed"
    response = get_sns_client().publish(
        TargetArn=topic_arn,
        Subject=subject[:SNS_SUBJECT_LIMIT],
        Message=format_error_message(error, log_group_name, settings.aws_region, source),
    )

    return {
        "notification_sent": True,
        "message_id": response["MessageId"],
    }
