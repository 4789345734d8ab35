"""Unified interface bundling the object store client and bulk deleter."""

from .object_operations import S3Tools, create_s3_tools

__all__ = ["S3Tools", "create_s3_tools"]
