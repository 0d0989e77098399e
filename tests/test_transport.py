"""Tests for the transport response value."""

from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from soapkit import TransportResponse
from soapkit.transport import content_type_param


class TestContentTypeParam:
    """Tests for content_type_param function."""

    def test_quoted_parameter(self) -> None:
        """Test reading a quoted parameter."""
        value = 'multipart/related; type="text/xml"; boundary="abc"'
        assert content_type_param(value, 'type') == 'text/xml'

    def test_missing_parameter(self) -> None:
        """Test that an absent parameter is None."""
        assert content_type_param('text/xml', 'charset') is None

    def test_missing_header(self) -> None:
        """Test that an absent header is None."""
        assert content_type_param(None, 'charset') is None


class TestTransportResponse:
    """Tests for TransportResponse."""

    def test_str_body_is_stored_as_bytes(self) -> None:
        """Test that a str body is encoded as UTF-8."""
        transport = TransportResponse(status_code=200, body='<a>é</a>')

        assert transport.body == '<a>é</a>'.encode('utf-8')
        assert transport.text == '<a>é</a>'

    def test_header_lookup_ignores_case(self) -> None:
        """Test case-insensitive header access."""
        transport = TransportResponse(
            status_code=200, headers={'content-type': 'text/xml; charset=utf-8'}
        )

        assert transport.header('Content-Type') == 'text/xml; charset=utf-8'
        assert transport.content_type == 'text/xml; charset=utf-8'
        assert transport.header('X-Missing') is None

    def test_text_uses_declared_charset(self) -> None:
        """Test decoding with the charset of Content-Type."""
        transport = TransportResponse(
            status_code=200,
            headers={'Content-Type': 'text/xml; charset=ISO-8859-1'},
            body='café'.encode('latin-1'),
        )

        assert transport.charset == 'ISO-8859-1'
        assert transport.text == 'café'

    def test_text_with_unknown_charset_falls_back_to_utf8(self) -> None:
        """Test that an unknown charset decodes as UTF-8."""
        transport = TransportResponse(
            status_code=200,
            headers={'Content-Type': 'text/xml; charset=no-such-charset'},
            body='café'.encode('utf-8'),
        )

        assert transport.text == 'café'

    def test_is_immutable(self) -> None:
        """Test that fields cannot be reassigned."""
        transport = TransportResponse(status_code=200)

        with pytest.raises(ValidationError):
            transport.status_code = 500  # pyright: ignore[reportAttributeAccessIssue]

    def test_status_code_required(self) -> None:
        """Test that the status code is mandatory."""
        with pytest.raises(ValidationError):
            TransportResponse()  # pyright: ignore[reportCallIssue]

    def test_from_requests(self, mock_requests_response: Mock) -> None:
        """Test adapting a requests.Response."""
        transport = TransportResponse.from_requests(mock_requests_response)

        assert transport.status_code == 200  # noqa: PLR2004
        assert transport.body == mock_requests_response.content
        assert transport.header('content-type') == 'text/xml; charset=utf-8'
        assert transport.origin is mock_requests_response

    def test_repr(self) -> None:
        """Test the debug representation."""
        transport = TransportResponse(
            status_code=404, headers={'Content-Type': 'text/plain'}, body='Not found'
        )

        assert repr(transport) == (
            "TransportResponse(status_code=404, content_type='text/plain', body=9 bytes)"
        )
