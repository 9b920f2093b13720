"""Pydantic models and enums shared across the job submit function.

This module defines:
- Output group type tags recognized in MediaConvert job templates
- The source object an S3 event refers to
- Job tracking metadata and the submission result

The job template itself stays a plain dictionary: it is owned by the
MediaConvert CreateJob schema and every field the customizer does not
touch has to reach the API unchanged.
"""

from enum import Enum
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field


class OutputGroupType(str, Enum):
    """Output group types a job template may contain."""

    FILE = "FILE_GROUP_SETTINGS"
    HLS = "HLS_GROUP_SETTINGS"
    DASH_ISO = "DASH_ISO_GROUP_SETTINGS"
    MS_SMOOTH = "MS_SMOOTH_GROUP_SETTINGS"
    CMAF = "CMAF_GROUP_SETTINGS"

    @property
    def settings_key(self) -> str:
        """Key of the type-specific settings inside OutputGroupSettings."""
        return OUTPUT_GROUP_SETTINGS_KEYS[self]


OUTPUT_GROUP_SETTINGS_KEYS: dict[OutputGroupType, str] = {
    OutputGroupType.FILE: "FileGroupSettings",
    OutputGroupType.HLS: "HlsGroupSettings",
    OutputGroupType.DASH_ISO: "DashIsoGroupSettings",
    OutputGroupType.MS_SMOOTH: "MsSmoothGroupSettings",
    OutputGroupType.CMAF: "CmafGroupSettings",
}


class SourceObject(BaseModel):
    """A source video uploaded to the source bucket."""

    model_config = ConfigDict(frozen=True)

    bucket: str = Field(min_length=1, description="Source bucket name")
    key: str = Field(min_length=1, description="Decoded object key")

    @classmethod
    def from_event_key(cls, bucket: str, raw_key: str) -> "SourceObject":
        """Build from an S3 event record, whose keys are URL-encoded with '+' for spaces."""
        return cls(bucket=unquote_plus(bucket), key=unquote_plus(raw_key))

    @property
    def input_path(self) -> str:
        """S3 URI MediaConvert reads the source from."""
        return f"s3://{self.bucket}/{self.key}"

    @property
    def folder(self) -> str:
        """Top-level folder of the key; each folder carries its own job template."""
        return self.key.split("/")[0]

    def settings_key(self, file_name: str) -> str:
        """Key of the job template that applies to this object."""
        return f"{self.folder}/{file_name}"


class JobMetadata(BaseModel):
    """Solution tracking metadata attached to every submitted job."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    guid: str = Field(alias="Guid", min_length=1)
    stack_name: str = Field(alias="StackName")
    solution_id: str = Field(alias="SolutionId")

    def to_user_metadata(self, file_metadata: dict[str, str] | None = None) -> dict[str, str]:
        """Merge source object metadata with the tracking keys.

        Tracking keys win on collision so jobs stay attributable.
        """
        return {**(file_metadata or {}), **self.model_dump(by_alias=True)}


class SubmittedJob(BaseModel):
    """Result of a successful CreateJob call."""

    job_id: str
    arn: str | None = None
    status: str | None = None
    input_path: str
    output_path: str
