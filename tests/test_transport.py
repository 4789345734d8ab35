"""Tests for the boto3 storage transport and its error classification."""

from unittest.mock import Mock

import boto3
import pytest
from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    IncompleteReadError,
    NoCredentialsError,
    ReadTimeoutError,
    ResponseStreamingError,
)
from botocore.stub import Stubber

from s3_tools.core.exceptions import (
    RetryableTransportError,
    TerminalTransportError,
    ValidationError,
)
from s3_tools.objectstorage import Boto3Transport, S3ClientManager
from s3_tools.objectstorage.transport import classify_error
from s3_tools.schemas import DeleteBatch

from fake_transport import TEST_BUCKET


def client_error(code: str, status: int, operation: str = "GetObject") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} message"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


@pytest.fixture
def stubbed():
    """Boto3Transport over a stubbed client that never reaches the network."""
    client = boto3.client(
        "s3",
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
    )
    with Stubber(client) as stubber:
        yield Boto3Transport(Mock(client=client)), stubber


class TestClassifyError:
    """Test translation of botocore failures."""

    @pytest.mark.parametrize(
        "code,status",
        [
            ("SlowDown", 503),
            ("Throttling", 400),
            ("RequestTimeout", 400),
            ("InternalError", 500),
            ("ServiceUnavailable", 503),
            ("SomethingNew", 502),
            ("TooManyRequests", 429),
            ("Unknown", 429),
        ],
    )
    def test_retryable_client_errors(self, code, status):
        error = classify_error(client_error(code, status), "GetObject")

        assert isinstance(error, RetryableTransportError)
        assert error.retryable is True
        assert error.error_code == code
        assert error.operation == "GetObject"

    @pytest.mark.parametrize(
        "code,status",
        [
            ("AccessDenied", 403),
            ("NoSuchBucket", 404),
            ("InvalidArgument", 400),
            ("EntityTooLarge", 400),
        ],
    )
    def test_terminal_client_errors(self, code, status):
        error = classify_error(client_error(code, status), "PutObject")

        assert isinstance(error, TerminalTransportError)
        assert error.retryable is False
        assert error.error_code == code

    def test_connection_errors_are_retryable(self):
        error = classify_error(
            EndpointConnectionError(endpoint_url="http://localhost:9000"), "GetObject"
        )
        assert isinstance(error, RetryableTransportError)
        assert error.error_code == "EndpointConnectionError"

    def test_read_timeout_is_retryable(self):
        error = classify_error(
            ReadTimeoutError(endpoint_url="http://localhost:9000"), "GetObject"
        )
        assert error.retryable is True

    @pytest.mark.parametrize(
        "error",
        [
            ResponseStreamingError(error="Connection broken: reset by peer"),
            IncompleteReadError(actual_bytes=10, expected_bytes=100),
        ],
    )
    def test_interrupted_body_read_is_retryable(self, error):
        assert classify_error(error, "GetObject").retryable is True

    def test_other_botocore_errors_are_terminal(self):
        error = classify_error(NoCredentialsError(), "ListObjectsV2")
        assert isinstance(error, TerminalTransportError)


class TestBoto3TransportStubbed:
    """Test transport behaviour with injected service responses."""

    def test_no_such_key_returns_empty_response(self, stubbed):
        transport, stubber = stubbed
        stubber.add_client_error(
            "get_object", service_error_code="NoSuchKey", http_status_code=404
        )

        response = transport.get_object("bucket", "missing")

        assert response.body is None

    def test_throttled_get_raises_retryable_with_cause(self, stubbed):
        transport, stubber = stubbed
        stubber.add_client_error(
            "get_object", service_error_code="SlowDown", http_status_code=503
        )

        with pytest.raises(RetryableTransportError) as exc_info:
            transport.get_object("bucket", "key")

        assert isinstance(exc_info.value.__cause__, ClientError)

    def test_access_denied_put_raises_terminal(self, stubbed):
        transport, stubber = stubbed
        stubber.add_client_error(
            "put_object", service_error_code="AccessDenied", http_status_code=403
        )

        with pytest.raises(TerminalTransportError) as exc_info:
            transport.put_object("bucket", "key", b"{}", "application/json")

        assert exc_info.value.error_code == "AccessDenied"

    def test_partial_delete_failure_raises_terminal(self, stubbed):
        transport, stubber = stubbed
        stubber.add_response(
            "delete_objects",
            {
                "Errors": [
                    {"Key": "p/b", "Code": "AccessDenied", "Message": "Access Denied"}
                ]
            },
            {
                "Bucket": "bucket",
                "Delete": {
                    "Objects": [{"Key": "p/a"}, {"Key": "p/b"}],
                    "Quiet": True,
                },
            },
        )

        with pytest.raises(TerminalTransportError, match="p/b"):
            transport.delete_objects(DeleteBatch.from_keys("bucket", ["p/a", "p/b"]))

    def test_list_requests_page_size(self, stubbed):
        transport, stubber = stubbed
        stubber.add_response(
            "list_objects_v2",
            {"Contents": [{"Key": "p/a"}, {"Key": "p/b"}], "IsTruncated": True},
            {"Bucket": "bucket", "Prefix": "p/", "MaxKeys": 1000},
        )

        page = transport.list_objects("bucket", "p/")

        assert page.keys == ("p/a", "p/b")
        assert page.truncated is True


class TestBoto3TransportBodyRead:
    """Test reading the response stream of a fetched object."""

    def test_stream_closed_after_read(self):
        stream = Mock()
        stream.read.return_value = b"payload"
        client = Mock()
        client.get_object.return_value = {"Body": stream, "ContentLength": 7}

        response = Boto3Transport(Mock(client=client)).get_object("bucket", "key")

        assert response.body == b"payload"
        assert response.envelope["Body"] == b"payload"
        assert response.envelope["ContentLength"] == 7
        stream.close.assert_called_once()

    def test_interrupted_read_closes_stream_and_is_retryable(self):
        stream = Mock()
        stream.read.side_effect = ResponseStreamingError(error="connection reset")
        client = Mock()
        client.get_object.return_value = {"Body": stream}

        with pytest.raises(RetryableTransportError) as exc_info:
            Boto3Transport(Mock(client=client)).get_object("bucket", "key")

        assert exc_info.value.error_code == "ResponseStreamingError"
        assert isinstance(exc_info.value.__cause__, ResponseStreamingError)
        stream.close.assert_called_once()


class TestBoto3TransportWithS3:
    """Test the transport against mocked S3."""

    def test_envelope_body_holds_payload(self, boto3_transport):
        boto3_transport.put_object(TEST_BUCKET, "k", b"payload", "text/plain")

        response = boto3_transport.get_object(TEST_BUCKET, "k")

        assert response.envelope["Body"] == b"payload"
        assert response.envelope["ContentLength"] == len(b"payload")

    def test_put_get_round_trip(self, boto3_transport):
        boto3_transport.put_object(TEST_BUCKET, "a.json", b'{"a": 1}', "application/json")

        response = boto3_transport.get_object(TEST_BUCKET, "a.json")

        assert response.body == b'{"a": 1}'
        assert response.content_type == "application/json"
        assert response.envelope["ContentType"] == "application/json"

    def test_list_and_delete(self, s3_client, boto3_transport):
        for key in ["p/1", "p/2", "q/1"]:
            s3_client.put_object(Bucket=TEST_BUCKET, Key=key, Body=b"x")

        page = boto3_transport.list_objects(TEST_BUCKET, "p/")
        assert page.keys == ("p/1", "p/2")
        assert page.truncated is False

        boto3_transport.delete_objects(DeleteBatch.from_keys(TEST_BUCKET, page.keys))

        assert boto3_transport.list_objects(TEST_BUCKET, "p/").keys == ()
        assert boto3_transport.list_objects(TEST_BUCKET, "q/").keys == ("q/1",)

    def test_empty_listing(self, boto3_transport):
        page = boto3_transport.list_objects(TEST_BUCKET, "none/")
        assert page.keys == ()
        assert page.truncated is False


class TestBoto3TransportConfig:
    """Test transport construction."""

    @pytest.mark.parametrize("page_size", [0, -1, 1001])
    def test_page_size_out_of_range(self, page_size):
        with pytest.raises(ValidationError, match="page_size"):
            Boto3Transport(Mock(spec=S3ClientManager), page_size=page_size)

    def test_default_page_size(self):
        assert Boto3Transport(Mock(spec=S3ClientManager)).page_size == 1000
