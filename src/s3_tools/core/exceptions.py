"""Exception hierarchy for s3-tools."""

from typing import Optional


class S3ToolsError(Exception):
    """Base exception for all s3-tools errors."""

    pass


class ValidationError(S3ToolsError):
    """Raised when caller input fails validation."""

    pass


class ObjectNotFoundError(S3ToolsError):
    """Raised when a fetched object carries no usable body."""

    def __init__(self, bucket: str, key: str):
        self.bucket = bucket
        self.key = key
        super().__init__(f"Object not found: s3://{bucket}/{key}")


class TransportError(S3ToolsError):
    """Raised when a call to the storage service fails.

    The transport decides whether the failure is worth retrying; callers
    read ``retryable`` rather than inspecting the underlying cause.
    """

    retryable = False

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        self.operation = operation
        self.error_code = error_code
        super().__init__(message)


class RetryableTransportError(TransportError):
    """Raised when a storage call failed in a recoverable way."""

    retryable = True


class TerminalTransportError(TransportError):
    """Raised when a storage call failed and retrying would not help."""

    retryable = False


class PayloadError(S3ToolsError):
    """Raised when a fetched payload cannot be turned into a result."""

    pass


class DecompressionError(PayloadError):
    """Raised when a payload is not a valid gzip stream."""

    pass


class FormatError(PayloadError):
    """Raised when a payload cannot be decoded or parsed."""

    pass
