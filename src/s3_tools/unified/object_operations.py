"""Unified object operations over one transport and retry policy."""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from s3_tools.core import get_logger, settings
from s3_tools.formatting import FormattedResult
from s3_tools.objectstorage import (
    Boto3Transport,
    BulkPrefixDeleter,
    ObjectStoreClient,
    S3ClientConfig,
    S3ClientManager,
    StorageTransport,
)
from s3_tools.schemas import OutputFormat, RetryPolicy

logger = get_logger(__name__)


class S3Tools:
    """Get, put and bulk-delete objects through a shared transport.

    Example:
        >>> tools = create_s3_tools(S3ClientConfig(aws_profile="my-profile"))
        >>> tools.put_json_object("bucket", "reports/1.json", {"ok": True})
        >>> tools.get_object("bucket", "reports/1.json")
        {'ok': True}
        >>> tools.empty_prefix("bucket", "reports/")
    """

    def __init__(
        self,
        transport: StorageTransport,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self.client = ObjectStoreClient(transport, self.retry_policy)
        self.deleter = BulkPrefixDeleter(transport, self.retry_policy)

    def get_object(
        self,
        bucket: str,
        key: str,
        output_format: Union[OutputFormat, str] = OutputFormat.PARSED,
        is_compressed: bool = False,
    ) -> FormattedResult:
        return self.client.get_object(bucket, key, output_format, is_compressed)

    def put_json_object(
        self,
        bucket: str,
        key: str,
        value: Union[Mapping[str, Any], list, tuple, BaseModel],
    ) -> Mapping[str, Any]:
        return self.client.put_json_object(bucket, key, value)

    def empty_prefix(self, bucket: str, prefix: str) -> int:
        return self.deleter.empty_prefix(bucket, prefix)

    # Older name kept for callers that treat prefixes as directories
    empty_directory = empty_prefix


def create_s3_tools(
    config: Optional[S3ClientConfig] = None,
    retry_policy: Optional[RetryPolicy] = None,
    page_size: Optional[int] = None,
) -> S3Tools:
    """Build S3Tools on a boto3 client.

    Args:
        config: S3 client configuration, defaults to the AWS credential chain
        retry_policy: Retry configuration, defaults to the configured settings
        page_size: Keys per listing page when emptying prefixes

    Returns:
        Ready-to-use S3Tools instance
    """
    transport = Boto3Transport(
        S3ClientManager(config),
        page_size=page_size or settings.delete_page_size,
    )
    logger.info("S3 tools created", page_size=transport.page_size)
    return S3Tools(transport, retry_policy)
