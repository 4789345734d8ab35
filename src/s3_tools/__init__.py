"""Client-side access layer for S3-compatible object storage.

This package wraps an object storage service with three reusable pieces:
a retry executor with exponential backoff, a response formatter that
composes gzip decompression with several output representations, and a
paginated deleter that empties a key prefix.

Key Features:
    - Fetch objects as bytes, text, parsed JSON or the raw response
    - Store structured values as JSON objects
    - Empty a prefix page by page with batched deletes
    - Retry throttled and transient failures with backoff

Recommended Usage:
    >>> from s3_tools import OutputFormat, S3ClientConfig, create_s3_tools
    >>> tools = create_s3_tools(S3ClientConfig(endpoint_url="http://localhost:9000"))
    >>> tools.put_json_object("bucket", "data/item.json", {"id": 1})
    >>> tools.get_object("bucket", "data/item.json", OutputFormat.TEXT)
    '{"id": 1}'

Advanced Usage:
    Build the pieces directly over any StorageTransport:

    >>> from s3_tools.objectstorage import ObjectStoreClient, BulkPrefixDeleter
    >>> from s3_tools.retry import execute
"""

__version__ = "0.1.0"

from .core.exceptions import (
    DecompressionError,
    FormatError,
    ObjectNotFoundError,
    PayloadError,
    RetryableTransportError,
    S3ToolsError,
    TerminalTransportError,
    TransportError,
    ValidationError,
)
from .formatting import format_response
from .objectstorage import (
    Boto3Transport,
    BulkPrefixDeleter,
    ObjectStoreClient,
    S3ClientConfig,
    S3ClientManager,
    StorageTransport,
)
from .retry import execute
from .schemas import (
    DeleteBatch,
    GetResponse,
    ListPage,
    ObjectReference,
    OutputFormat,
    RetryPolicy,
)

# Unified interface (recommended)
from .unified import S3Tools, create_s3_tools

__all__ = [
    # Unified interface
    "S3Tools",
    "create_s3_tools",
    # Components
    "Boto3Transport",
    "BulkPrefixDeleter",
    "ObjectStoreClient",
    "S3ClientConfig",
    "S3ClientManager",
    "StorageTransport",
    "execute",
    "format_response",
    # Data model
    "DeleteBatch",
    "GetResponse",
    "ListPage",
    "ObjectReference",
    "OutputFormat",
    "RetryPolicy",
    # Errors
    "DecompressionError",
    "FormatError",
    "ObjectNotFoundError",
    "PayloadError",
    "RetryableTransportError",
    "S3ToolsError",
    "TerminalTransportError",
    "TransportError",
    "ValidationError",
]
