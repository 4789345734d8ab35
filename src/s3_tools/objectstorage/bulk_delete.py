"""Empty every object under an S3 prefix."""

import time
from typing import Callable, Optional

from s3_tools.core import get_logger, get_tracer
from s3_tools.core.exceptions import ValidationError
from s3_tools.objectstorage.object_client import call_with_retry, require_name
from s3_tools.objectstorage.transport import StorageTransport
from s3_tools.schemas import DeleteBatch, RetryPolicy

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class BulkPrefixDeleter:
    """Deletes all objects under a prefix, one listing page at a time.

    Each pass lists the prefix from the start, deletes the returned page in
    a single batched request, and stops once a listing comes back empty or
    untruncated. Deleted keys drop out of later listings, so no continuation
    token is carried between passes. Concurrent writers to the same prefix
    can leave objects behind; that case is not guarded against.
    """

    def __init__(
        self,
        transport: StorageTransport,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.transport = transport
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self._sleep = sleep

    def empty_prefix(self, bucket: str, prefix: str) -> int:
        """Delete every object whose key starts with ``prefix``.

        Args:
            bucket: Bucket to empty
            prefix: Key prefix; an empty string selects the whole bucket

        Returns:
            Number of keys submitted for deletion

        Raises:
            ValidationError: If bucket or prefix is invalid
            TransportError: If a list or delete call fails
        """
        require_name(bucket, "bucket")
        if not isinstance(prefix, str):
            raise ValidationError(f"prefix must be a string, got: {prefix!r}")

        logger.info("Emptying S3 prefix", bucket=bucket, prefix=prefix)

        deleted = 0
        pages = 0
        with tracer.start_as_current_span("s3_tools.empty_prefix") as span:
            span.set_attribute("s3.bucket", bucket)
            span.set_attribute("s3.prefix", prefix)

            while True:
                page = call_with_retry(
                    lambda: self.transport.list_objects(bucket, prefix),
                    self.retry_policy,
                    self._sleep,
                )
                if not page.keys:
                    break

                batch = DeleteBatch.from_keys(bucket, page.keys)
                call_with_retry(
                    lambda: self.transport.delete_objects(batch),
                    self.retry_policy,
                    self._sleep,
                )
                pages += 1
                deleted += len(batch)
                logger.debug(
                    "Deleted listing page",
                    bucket=bucket,
                    prefix=prefix,
                    page=pages,
                    object_count=len(batch),
                )

                if not page.truncated:
                    break

            span.set_attribute("s3.deleted_count", deleted)

        logger.info(
            "S3 prefix emptied",
            bucket=bucket,
            prefix=prefix,
            pages=pages,
            deleted_count=deleted,
        )
        return deleted
