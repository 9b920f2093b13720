"""Source aspect ratio detection using FFprobe.

The source is never downloaded: ffprobe reads the object through a
short-lived presigned URL. The binary is provided by a Lambda layer.
"""

import json
import subprocess
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from ..shared.aws_clients import get_s3_client
from ..shared.config import get_settings
from ..shared.exceptions import VideoRatioError

logger = Logger(service="job-submit")


def calculate_video_ratio(bucket: str, key: str) -> float:
    """Calculate the width / height ratio of a source video.

    Args:
        bucket: Source bucket
        key: Source object key

    Returns:
        Aspect ratio of the first video stream (e.g. 1.777... for 16:9)

    Raises:
        VideoRatioError: If the source cannot be probed or has no usable
            video dimensions
    """
    settings = get_settings()

    logger.info("Calculating video ratio", extra={"bucket": bucket, "key": key})

    try:
        video_url = get_s3_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=settings.signed_url_expires,
        )
    except (ClientError, BotoCoreError) as e:
        raise VideoRatioError(
            "Failed to sign the source URL",
            {"bucket": bucket, "key": key, "error": str(e)},
        ) from e

    probe = run_ffprobe(video_url, settings.ffprobe_path, settings.ffprobe_timeout_seconds)
    width, height = _video_dimensions(probe)
    ratio = width / height

    logger.info(
        "Video ratio calculated",
        extra={"key": key, "width": width, "height": height, "ratio": ratio},
    )
    return ratio


def run_ffprobe(url: str, ffprobe_path: str, timeout: int) -> dict[str, Any]:
    """Run ffprobe against a URL and return its parsed JSON report.

    Raises:
        VideoRatioError: If FFprobe fails, times out, or is not installed
    """
    try:
        result = subprocess.run(
            [
                ffprobe_path,
                "-v", "error",
                "-print_format", "json",
                "-show_format",
                "-show_streams",
                url,
            ],
            capture_output=True,
            text=True,
            timeout=timeout,
        )

        if result.returncode != 0:
            raise VideoRatioError(
                f"FFprobe failed: {result.stderr}",
                {"returncode": result.returncode, "stderr": result.stderr},
            )

        probe = json.loads(result.stdout)

    except subprocess.TimeoutExpired:
        raise VideoRatioError(
            "FFprobe timed out",
            {"timeout_seconds": timeout},
        )
    except FileNotFoundError:
        raise VideoRatioError(
            "FFprobe not found - ensure the FFmpeg layer is attached",
            {"ffprobe_path": ffprobe_path},
        )
    except json.JSONDecodeError as e:
        raise VideoRatioError(f"Invalid FFprobe output: {e}")

    if not isinstance(probe, dict):
        raise VideoRatioError(
            "Invalid FFprobe output: expected a JSON object",
            {"output_type": type(probe).__name__},
        )
    return probe


def _video_dimensions(probe: dict[str, Any]) -> tuple[int, int]:
    """Pick width and height from the first video stream in an ffprobe report."""
    streams = probe.get("streams") or []
    video_streams = [s for s in streams if s.get("codec_type") == "video"]
    # Older reports may omit codec_type; fall back to the first stream
    stream = video_streams[0] if video_streams else (streams[0] if streams else {})

    width = _parse_int(stream.get("width"))
    height = _parse_int(stream.get("height"))
    if not width or not height:
        raise VideoRatioError(
            "No video stream with usable dimensions",
            {"width": stream.get("width"), "height": stream.get("height")},
        )
    return width, height


def _parse_int(value: Any) -> int | None:
    """Safely parse integer value."""
    if value is None:
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None
