"""Test configuration and fixtures for s3-tools."""

import boto3
import pytest
from moto import mock_aws

from s3_tools.objectstorage import Boto3Transport, S3ClientConfig, S3ClientManager
from s3_tools.schemas import RetryPolicy

from fake_transport import TEST_BUCKET, FakeTransport


@pytest.fixture
def transport():
    """Empty in-memory transport."""
    return FakeTransport()


@pytest.fixture
def retry_policy():
    """Small retry policy so exhaustion tests stay short."""
    return RetryPolicy(max_attempts=3, base_delay=0.1)


@pytest.fixture
def sleeps():
    """Records backoff delays instead of sleeping."""
    return []


@pytest.fixture
def client_config():
    """S3 client configuration matching the mocked credentials."""
    return S3ClientConfig(
        access_key_id="test_key",
        secret_access_key="test_secret",
        region_name="us-east-1",
    )


@pytest.fixture
def s3_client(client_config):
    """Mocked S3 with an empty test bucket."""
    with mock_aws():
        client = boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name="us-east-1",
        )
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def boto3_transport(s3_client, client_config):
    """Boto3Transport talking to the mocked S3."""
    return Boto3Transport(S3ClientManager(client_config))
