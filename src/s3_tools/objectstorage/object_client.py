"""Single-object get and put against the storage service.

ObjectStoreClient validates caller input, issues the call through a
StorageTransport, and hands a failed call to the retry executor when the
transport marks the failure as retryable. Fetched payloads are passed to
the response formatter.

Missing Objects:
    The storage service does not always distinguish an absent object from
    one with no content at this layer. A response without a body, or with
    an empty body, is reported as ObjectNotFoundError.
"""

import json
import time
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel

from s3_tools.core import get_logger, get_tracer
from s3_tools.core.exceptions import (
    ObjectNotFoundError,
    TransportError,
    ValidationError,
)
from s3_tools.formatting import FormattedResult, format_response
from s3_tools.objectstorage.transport import StorageTransport
from s3_tools.retry import backoff_delay, execute
from s3_tools.schemas import GetResponse, OutputFormat, RetryPolicy

logger = get_logger(__name__)
tracer = get_tracer(__name__)

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"


def is_retryable(error: BaseException) -> bool:
    """Read the retry classification the transport attached to an error."""
    return isinstance(error, TransportError) and error.retryable


def require_name(value: Any, name: str) -> str:
    """Check that a bucket or key is a non-empty string."""
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{name} must be a non-empty string, got: {value!r}")
    return value


def resolve_output_format(output_format: Union[OutputFormat, str]) -> OutputFormat:
    """Resolve a format member or its string value to an OutputFormat."""
    try:
        return OutputFormat(output_format)
    except ValueError:
        allowed = ", ".join(repr(f.value) for f in OutputFormat)
        raise ValidationError(
            f"output_format must be one of {allowed}, got: {output_format!r}"
        ) from None


def call_with_retry(
    operation: Callable[[], T],
    retry_policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Issue a call once, then retry it with backoff if it failed retryably.

    The first retry waits one base delay like any other, and the retry
    sequence gets the policy's full max_attempts on top of the first call.
    """
    try:
        return operation()
    except TransportError as e:
        if not e.retryable:
            raise
        logger.warning(
            "Retryable storage error, starting backoff",
            operation=e.operation,
            error_code=e.error_code,
        )
        sleep(backoff_delay(1, retry_policy.base_delay, retry_policy.max_delay))

    return execute(
        operation,
        is_retryable,
        max_attempts=retry_policy.max_attempts,
        base_delay=retry_policy.base_delay,
        max_delay=retry_policy.max_delay,
        sleep=sleep,
    )


class ObjectStoreClient:
    """Gets and puts single objects with retries and output formatting."""

    def __init__(
        self,
        transport: StorageTransport,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the client.

        Args:
            transport: Storage service transport
            retry_policy: Retry configuration, defaults to the configured settings
            sleep: Function used to wait between retry attempts
        """
        self.transport = transport
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self._sleep = sleep
        logger.info(
            "Object store client initialized",
            max_attempts=self.retry_policy.max_attempts,
        )

    def get_object(
        self,
        bucket: str,
        key: str,
        output_format: Union[OutputFormat, str] = OutputFormat.PARSED,
        is_compressed: bool = False,
    ) -> FormattedResult:
        """Fetch an object and return it in the requested representation.

        Args:
            bucket: Bucket holding the object
            key: Object key
            output_format: RAW bytes, TEXT, PARSED JSON or the FULL_RESPONSE
                envelope; the string values "buffer", "string", "object"
                and "all" are accepted too
            is_compressed: Gunzip the body before decoding

        Returns:
            The formatted object content

        Raises:
            ValidationError: If any argument is invalid; no call is made
            ObjectNotFoundError: If the response carries no body
            TransportError: If the call fails, after retries when retryable
            DecompressionError: If the body is not valid gzip
            FormatError: If the body cannot be decoded or parsed
        """
        require_name(bucket, "bucket")
        require_name(key, "key")
        fmt = resolve_output_format(output_format)
        if not isinstance(is_compressed, bool):
            raise ValidationError(
                f"is_compressed must be a boolean, got: {is_compressed!r}"
            )

        with tracer.start_as_current_span("s3_tools.get_object") as span:
            span.set_attribute("s3.bucket", bucket)
            span.set_attribute("s3.key", key)

            response: GetResponse = call_with_retry(
                lambda: self.transport.get_object(bucket, key),
                self.retry_policy,
                self._sleep,
            )

            if not isinstance(response.body, (bytes, bytearray)) or not response.body:
                logger.info("Object has no body", bucket=bucket, key=key)
                raise ObjectNotFoundError(bucket, key)

            logger.debug(
                "Object fetched",
                bucket=bucket,
                key=key,
                size=len(response.body),
                output_format=fmt.value,
            )
            return format_response(response, fmt, is_compressed)

    def put_json_object(
        self,
        bucket: str,
        key: str,
        value: Union[Mapping[str, Any], list, tuple, BaseModel],
    ) -> Mapping[str, Any]:
        """Serialize a structured value to JSON and store it.

        Args:
            bucket: Destination bucket
            key: Destination key
            value: Mapping, list, tuple or pydantic model to store

        Returns:
            The storage service acknowledgement

        Raises:
            ValidationError: If any argument is invalid or value cannot be
                serialized; no call is made
            TransportError: If the call fails, after retries when retryable
        """
        require_name(bucket, "bucket")
        require_name(key, "key")
        body = self._serialize(value)

        with tracer.start_as_current_span("s3_tools.put_json_object") as span:
            span.set_attribute("s3.bucket", bucket)
            span.set_attribute("s3.key", key)

            ack = call_with_retry(
                lambda: self.transport.put_object(bucket, key, body, JSON_CONTENT_TYPE),
                self.retry_policy,
                self._sleep,
            )

        logger.info("JSON object stored", bucket=bucket, key=key, size=len(body))
        return ack

    @staticmethod
    def _serialize(value: Any) -> bytes:
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        elif not isinstance(value, (Mapping, list, tuple)):
            raise ValidationError(
                f"value must be a structured value (mapping or sequence), "
                f"got: {type(value).__name__}"
            )

        try:
            return json.dumps(value).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ValidationError(f"value is not JSON serializable: {e}") from e
