"""Data model shared across s3-tools components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt

from .core.config import settings


@dataclass(frozen=True)
class ObjectReference:
    """Identifies a single object by bucket and key."""

    bucket: str
    key: str

    def __str__(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


@dataclass(frozen=True)
class DeleteBatch:
    """Objects from one listing page, deleted in a single request."""

    bucket: str
    objects: tuple[ObjectReference, ...]

    @classmethod
    def from_keys(cls, bucket: str, keys: Iterable[str]) -> "DeleteBatch":
        return cls(
            bucket=bucket,
            objects=tuple(ObjectReference(bucket=bucket, key=key) for key in keys),
        )

    @property
    def keys(self) -> list[str]:
        return [obj.key for obj in self.objects]

    def __len__(self) -> int:
        return len(self.objects)


class RetryPolicy(BaseModel):
    """Retry configuration for remote calls.

    Set once when a client is built and shared read-only by every call the
    client makes. ``max_delay`` caps each backoff delay; left unset, delays
    keep doubling for as many attempts as are allowed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: PositiveInt = Field(
        5, description="Total attempts per retried call, including the first"
    )
    base_delay: PositiveFloat = Field(
        0.5, description="Delay in seconds before the second attempt"
    )
    max_delay: Optional[PositiveFloat] = Field(
        None, description="Upper bound in seconds for a single backoff delay"
    )

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        """Build a policy from the S3_TOOLS_RETRY_* settings."""
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )


class OutputFormat(str, Enum):
    """How a fetched object is returned to the caller.

    Values are the return-type names callers may pass as plain strings.
    """

    RAW = "buffer"
    TEXT = "string"
    PARSED = "object"
    FULL_RESPONSE = "all"


@dataclass(frozen=True)
class GetResponse:
    """Result of a Get against the storage service.

    ``body`` is None when the service returned no payload, which is also how
    a missing object is reported.
    """

    body: Optional[bytes]
    content_type: Optional[str] = None
    envelope: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ListPage:
    """One page of keys from a prefix listing."""

    keys: tuple[str, ...]
    truncated: bool = False
