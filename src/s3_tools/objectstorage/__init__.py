"""Object storage operations for S3-compatible services."""

from .bulk_delete import BulkPrefixDeleter
from .clients import S3ClientConfig, S3ClientManager
from .object_client import ObjectStoreClient
from .transport import Boto3Transport, StorageTransport, classify_error

__all__ = [
    "Boto3Transport",
    "BulkPrefixDeleter",
    "ObjectStoreClient",
    "S3ClientConfig",
    "S3ClientManager",
    "StorageTransport",
    "classify_error",
]
