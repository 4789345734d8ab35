"""Storage service transport.

The object store client and the bulk deleter only need four calls from the
storage service: Get, Put, List and a batched Delete. ``StorageTransport``
describes them; ``Boto3Transport`` implements them over a boto3 S3 client
and translates every botocore failure into a ``TransportError`` whose
``retryable`` flag callers trust as-is.
"""

from typing import Any, Mapping, Protocol

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    IncompleteReadError,
    ReadTimeoutError,
    ResponseStreamingError,
)

from s3_tools.core import get_logger
from s3_tools.core.exceptions import (
    RetryableTransportError,
    TerminalTransportError,
    TransportError,
    ValidationError,
)
from s3_tools.objectstorage.clients import S3ClientManager
from s3_tools.schemas import DeleteBatch, GetResponse, ListPage

logger = get_logger(__name__)

# S3 refuses DeleteObjects requests with more keys than this
MAX_KEYS_PER_PAGE = 1000

RETRYABLE_ERROR_CODES = frozenset(
    {
        "SlowDown",
        "Throttling",
        "ThrottlingException",
        "ThrottledException",
        "RequestThrottled",
        "RequestThrottledException",
        "TooManyRequestsException",
        "TooManyRequests",
        "RequestLimitExceeded",
        "BandwidthLimitExceeded",
        "RequestTimeout",
        "RequestTimeoutException",
        "RequestTimeTooSkewed",
        "PriorRequestNotComplete",
        "InternalError",
        "ServiceUnavailable",
    }
)

NOT_FOUND_ERROR_CODES = frozenset({"NoSuchKey", "404", "NotFound"})

RETRYABLE_BOTOCORE_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ReadTimeoutError,
    ConnectTimeoutError,
    ResponseStreamingError,
    IncompleteReadError,
)


class StorageTransport(Protocol):
    """Calls the object store client and bulk deleter make against storage."""

    def get_object(self, bucket: str, key: str) -> GetResponse:
        """Fetch an object. A missing object yields a response without body."""
        ...

    def put_object(
        self, bucket: str, key: str, body: bytes, content_type: str
    ) -> Mapping[str, Any]:
        """Store an object and return the service acknowledgement."""
        ...

    def list_objects(self, bucket: str, prefix: str) -> ListPage:
        """List the first page of keys under a prefix."""
        ...

    def delete_objects(self, batch: DeleteBatch) -> Mapping[str, Any]:
        """Delete every object in the batch with a single request."""
        ...


def _client_error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _client_error_status(error: ClientError) -> int:
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
    try:
        return int(status)
    except (TypeError, ValueError):
        return 0


def is_retryable_client_error(error: ClientError) -> bool:
    """Whether a service error is throttling, a timeout, or server-side."""
    if _client_error_code(error) in RETRYABLE_ERROR_CODES:
        return True
    status = _client_error_status(error)
    return status == 429 or status >= 500


def classify_error(error: Exception, operation: str) -> TransportError:
    """Translate a botocore failure into a TransportError.

    Args:
        error: Exception raised by the boto3 client
        operation: Name of the S3 operation that failed

    Returns:
        RetryableTransportError for throttling, timeouts, 5xx responses and
        connection failures; TerminalTransportError for everything else
    """
    if isinstance(error, ClientError):
        code = _client_error_code(error)
        message = f"S3 {operation} failed: {error}"
        if is_retryable_client_error(error):
            return RetryableTransportError(
                message, operation=operation, error_code=code
            )
        return TerminalTransportError(message, operation=operation, error_code=code)

    if isinstance(error, RETRYABLE_BOTOCORE_ERRORS):
        return RetryableTransportError(
            f"S3 {operation} connection failed: {error}",
            operation=operation,
            error_code=type(error).__name__,
        )

    return TerminalTransportError(
        f"S3 {operation} failed: {error}",
        operation=operation,
        error_code=type(error).__name__,
    )


class Boto3Transport:
    """StorageTransport backed by a boto3 S3 client."""

    def __init__(
        self,
        client_manager: S3ClientManager,
        page_size: int = MAX_KEYS_PER_PAGE,
    ):
        """Initialize the transport.

        Args:
            client_manager: Manager providing the boto3 S3 client
            page_size: Keys requested per listing page (1 to 1000)

        Raises:
            ValidationError: If page_size is out of range
        """
        if not 1 <= page_size <= MAX_KEYS_PER_PAGE:
            raise ValidationError(
                f"page_size must be between 1 and {MAX_KEYS_PER_PAGE}, got: {page_size}"
            )
        self.client_manager = client_manager
        self.page_size = page_size

    @property
    def client(self):
        return self.client_manager.client

    def get_object(self, bucket: str, key: str) -> GetResponse:
        """Fetch an object and read its body.

        The returned envelope is the service response with ``Body`` replaced
        by the bytes read from the stream.
        """
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
            stream = response["Body"]
            try:
                body = stream.read()
            finally:
                stream.close()
        except ClientError as e:
            if _client_error_code(e) in NOT_FOUND_ERROR_CODES:
                logger.debug("S3 object missing", bucket=bucket, key=key)
                return GetResponse(body=None, envelope=e.response)
            raise classify_error(e, "GetObject") from e
        except BotoCoreError as e:
            raise classify_error(e, "GetObject") from e

        return GetResponse(
            body=body,
            content_type=response.get("ContentType"),
            envelope={**response, "Body": body},
        )

    def put_object(
        self, bucket: str, key: str, body: bytes, content_type: str
    ) -> Mapping[str, Any]:
        try:
            return self.client.put_object(
                Bucket=bucket, Key=key, Body=body, ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            raise classify_error(e, "PutObject") from e

    def list_objects(self, bucket: str, prefix: str) -> ListPage:
        try:
            response = self.client.list_objects_v2(
                Bucket=bucket, Prefix=prefix, MaxKeys=self.page_size
            )
        except (ClientError, BotoCoreError) as e:
            raise classify_error(e, "ListObjectsV2") from e

        keys = tuple(obj["Key"] for obj in response.get("Contents", []))
        return ListPage(keys=keys, truncated=bool(response.get("IsTruncated", False)))

    def delete_objects(self, batch: DeleteBatch) -> Mapping[str, Any]:
        try:
            response = self.client.delete_objects(
                Bucket=batch.bucket,
                Delete={
                    "Objects": [{"Key": key} for key in batch.keys],
                    "Quiet": True,
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise classify_error(e, "DeleteObjects") from e

        errors = response.get("Errors", [])
        if errors:
            failed = [err.get("Key") for err in errors]
            logger.error(
                "S3 batch delete partially failed",
                bucket=batch.bucket,
                failed_count=len(failed),
            )
            raise TerminalTransportError(
                f"Failed to delete {len(failed)} object(s) from '{batch.bucket}': "
                f"{failed}",
                operation="DeleteObjects",
                error_code=errors[0].get("Code"),
            )
        return response
