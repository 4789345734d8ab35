"""Turn a fetched object payload into the representation a caller asked for.

Formatting is a pure transform of bytes already received from the storage
service, so none of the errors raised here are worth retrying.
"""

import gzip
import json
import zlib
from typing import Any, Mapping, Union

from s3_tools.core.exceptions import DecompressionError, FormatError
from s3_tools.schemas import GetResponse, OutputFormat

# bytes for RAW, str for TEXT, any JSON value for PARSED, the envelope for
# FULL_RESPONSE
FormattedResult = Union[bytes, str, Mapping[str, Any], Any]


def decompress(data: bytes) -> bytes:
    """Gunzip ``data``, raising DecompressionError on a malformed stream."""
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise DecompressionError(f"Failed to decompress gzip payload: {e}") from e


def decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Payload is not valid UTF-8 text: {e}") from e


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"Payload is not valid JSON: {e}") from e


def format_response(
    response: GetResponse, output_format: OutputFormat, is_compressed: bool
) -> FormattedResult:
    """Format a Get response.

    Args:
        response: Response returned by the transport
        output_format: Representation to return
        is_compressed: Whether the body is gzip-compressed; ignored for
            FULL_RESPONSE

    Returns:
        Body bytes, decoded text, parsed JSON value, or the raw envelope

    Raises:
        DecompressionError: If is_compressed and the body is not valid gzip
        FormatError: If the body cannot be decoded as text or parsed as JSON
    """
    if output_format is OutputFormat.FULL_RESPONSE:
        return response.envelope

    body = response.body or b""
    if is_compressed:
        body = decompress(body)

    if output_format is OutputFormat.RAW:
        return body
    if output_format is OutputFormat.TEXT:
        return decode_text(body)
    if output_format is OutputFormat.PARSED:
        return _parse_json(decode_text(body))

    raise FormatError(f"Unsupported output format: {output_format!r}")
