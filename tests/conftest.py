"""Pytest configuration and shared fixtures.

This module provides:
- AWS credential mocking for moto
- Pre-configured AWS service clients
- Sample job templates and S3 events
- Environment variable setup
"""

import copy
import json
import os
from dataclasses import dataclass
from typing import Any, Generator

import boto3
import pytest
from moto import mock_aws

# Set dummy AWS credentials BEFORE importing any application code
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"

# Set application environment variables
os.environ["AWS_REGION"] = "us-east-1"
os.environ["MEDIACONVERT_ENDPOINT"] = "https://test.mediaconvert.us-east-1.amazonaws.com"
os.environ["MEDIACONVERT_ROLE"] = "arn:aws:iam::123456789012:role/MediaConvertRole"
os.environ["DESTINATION_BUCKET"] = "test-destination-bucket"
os.environ["STACKNAME"] = "test-vod-stack"
os.environ["SOLUTION_ID"] = "SO0146"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["POWERTOOLS_TRACE_DISABLED"] = "true"
os.environ["POWERTOOLS_METRICS_NAMESPACE"] = "VideoOnDemand"

SOURCE_BUCKET = "test-source-bucket"


@pytest.fixture(autouse=True)
def clear_caches() -> Generator[None, None, None]:
    """Reset cached settings and clients so each test sees its own env and mocks."""
    from src.shared.aws_clients import clear_client_cache
    from src.shared.config import clear_settings_cache

    clear_settings_cache()
    clear_client_cache()
    yield
    clear_settings_cache()
    clear_client_cache()


# =============================================================================
# AWS Fixtures
# =============================================================================


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def aws_mock(aws_credentials: None) -> Generator[None, None, None]:
    """Single moto context shared by every client in a test."""
    with mock_aws():
        yield


@pytest.fixture
def s3_client(aws_mock: None) -> Any:
    """Mocked S3 client."""
    return boto3.client("s3", region_name="us-east-1")


@pytest.fixture
def sns_client(aws_mock: None) -> Any:
    """Mocked SNS client."""
    return boto3.client("sns", region_name="us-east-1")


@pytest.fixture
def source_bucket(s3_client: Any) -> str:
    """Create the source bucket."""
    s3_client.create_bucket(Bucket=SOURCE_BUCKET)
    return SOURCE_BUCKET


@pytest.fixture
def error_topic(sns_client: Any, monkeypatch: pytest.MonkeyPatch) -> str:
    """Create the error topic and point the function at it."""
    from src.shared.config import clear_settings_cache

    topic_arn = sns_client.create_topic(Name="test-vod-errors")["TopicArn"]
    monkeypatch.setenv("SNS_TOPIC_ARN", topic_arn)
    clear_settings_cache()
    return topic_arn


@pytest.fixture
def error_queue(sns_client: Any, error_topic: str) -> Any:
    """SQS queue subscribed to the error topic, for reading published notifications."""
    sqs = boto3.client("sqs", region_name="us-east-1")
    queue_url = sqs.create_queue(QueueName="test-vod-errors")["QueueUrl"]
    queue_arn = sqs.get_queue_attributes(
        QueueUrl=queue_url, AttributeNames=["QueueArn"]
    )["Attributes"]["QueueArn"]
    sns_client.subscribe(
        TopicArn=error_topic,
        Protocol="sqs",
        Endpoint=queue_arn,
        Attributes={"RawMessageDelivery": "true"},
    )

    def receive() -> list[str]:
        messages = sqs.receive_message(QueueUrl=queue_url, MaxNumberOfMessages=10)
        return [m["Body"] for m in messages.get("Messages", [])]

    return receive


# =============================================================================
# Lambda Fixtures
# =============================================================================


@dataclass
class FakeLambdaContext:
    """Minimal Lambda context accepted by Powertools decorators."""

    function_name: str = "test-vod-job-submit"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:test-vod-job-submit"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"
    log_group_name: str = "/aws/lambda/test-vod-job-submit"


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    """Fake Lambda context."""
    return FakeLambdaContext()


def make_s3_put_event(bucket: str, key: str) -> dict:
    """S3 PutObject event for a single object (key URL-encoded like S3 does)."""
    return {
        "Records": [
            {
                "eventVersion": "2.1",
                "eventSource": "aws:s3",
                "awsRegion": "us-east-1",
                "eventTime": "2024-01-15T10:00:00.000Z",
                "eventName": "ObjectCreated:Put",
                "s3": {
                    "bucket": {
                        "name": bucket,
                        "arn": f"arn:aws:s3:::{bucket}",
                    },
                    "object": {
                        "key": key.replace(" ", "+"),
                        "size": 1048576,
                        "eTag": "abc123",
                    },
                },
            }
        ]
    }


@pytest.fixture
def s3_event_factory() -> Any:
    """Builder for S3 PutObject events on arbitrary keys."""
    return make_s3_put_event


@pytest.fixture
def s3_put_event() -> dict:
    """Sample S3 PutObject event for a source video upload."""
    return make_s3_put_event(SOURCE_BUCKET, "assets01/my video.mp4")


# =============================================================================
# Sample Data Fixtures
# =============================================================================


JOB_TEMPLATE: dict[str, Any] = {
    "Queue": "arn:aws:mediaconvert:us-east-1:123456789012:queues/Default",
    "UserMetadata": {"owner": "media-team"},
    "StatusUpdateInterval": "SECONDS_60",
    "Priority": 0,
    "Settings": {
        "TimecodeConfig": {"Source": "ZEROBASED"},
        "Inputs": [
            {
                "FileInput": "",
                "AudioSelectors": {"Audio Selector 1": {"DefaultSelection": "DEFAULT"}},
                "VideoSelector": {},
                "TimecodeSource": "ZEROBASED",
            }
        ],
        "OutputGroups": [
            {
                "Name": "File Group",
                "OutputGroupSettings": {
                    "Type": "FILE_GROUP_SETTINGS",
                    "FileGroupSettings": {"Destination": ""},
                },
                "Outputs": [
                    {
                        "ContainerSettings": {"Container": "MP4"},
                        "VideoDescription": {"Width": 1280, "Height": 720},
                    }
                ],
            },
            {
                "Name": "Apple HLS",
                "OutputGroupSettings": {
                    "Type": "HLS_GROUP_SETTINGS",
                    "HlsGroupSettings": {
                        "SegmentLength": 6,
                        "MinSegmentLength": 0,
                        "Destination": "",
                    },
                },
                "Outputs": [
                    {
                        "NameModifier": "_1080p",
                        "ContainerSettings": {"Container": "M3U8"},
                        "VideoDescription": {"Width": 1920, "Height": 1000},
                    },
                    {
                        "NameModifier": "_720p",
                        "ContainerSettings": {"Container": "M3U8"},
                        "VideoDescription": {"Width": 1280, "Height": 700},
                    },
                    {
                        "NameModifier": "_audio",
                        "ContainerSettings": {"Container": "M3U8"},
                        "AudioDescriptions": [{"AudioSourceName": "Audio Selector 1"}],
                    },
                ],
            },
            {
                "Name": "DASH ISO",
                "OutputGroupSettings": {
                    "Type": "DASH_ISO_GROUP_SETTINGS",
                    "DashIsoGroupSettings": {"SegmentLength": 30, "Destination": ""},
                },
                "Outputs": [
                    {
                        "ContainerSettings": {"Container": "MPD"},
                        "VideoDescription": {"Width": 1920, "Height": 1000},
                    }
                ],
            },
            {
                "Name": "MS Smooth",
                "OutputGroupSettings": {
                    "Type": "MS_SMOOTH_GROUP_SETTINGS",
                    "MsSmoothGroupSettings": {"FragmentLength": 2, "Destination": ""},
                },
                "Outputs": [],
            },
            {
                "Name": "CMAF",
                "OutputGroupSettings": {
                    "Type": "CMAF_GROUP_SETTINGS",
                    "CmafGroupSettings": {"SegmentLength": 30, "Destination": ""},
                },
                "Outputs": [],
            },
        ],
    },
}


@pytest.fixture
def job_template() -> dict[str, Any]:
    """Job template with one output group of each recognized type."""
    return copy.deepcopy(JOB_TEMPLATE)


@pytest.fixture
def job_template_json(job_template: dict[str, Any]) -> str:
    """The sample job template as uploaded to S3."""
    return json.dumps(job_template)


@pytest.fixture
def ffprobe_report() -> dict[str, Any]:
    """ffprobe JSON report for a 1920x1080 H.264 source."""
    return {
        "streams": [
            {
                "index": 0,
                "codec_name": "h264",
                "codec_type": "video",
                "width": 1920,
                "height": 1080,
                "r_frame_rate": "24000/1001",
            },
            {
                "index": 1,
                "codec_name": "aac",
                "codec_type": "audio",
                "channels": 2,
                "sample_rate": "48000",
            },
        ],
        "format": {
            "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
            "duration": "600.000000",
            "size": "1048576",
        },
    }
