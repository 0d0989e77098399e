# soapkit/transport.py
"""
Transport response value consumed by SoapResponse.

The HTTP layer is not part of soapkit. Whatever sent the request hands over
a TransportResponse: the status code, the response headers and the raw body.
The most common source, a ``requests.Response``, can be adapted with
TransportResponse.from_requests().
"""

import logging
from email.message import Message
from typing import Any

import requests
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from requests.structures import CaseInsensitiveDict

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CHARSET: str = 'utf-8'


def content_type_param(content_type: str | None, param: str) -> str | None:
    """
    Read one parameter of a structured Content-Type value.

    Quoted values are unquoted and parameters may appear in any order.

    Example:
        >>> content_type_param('multipart/related; type="text/xml"; boundary="abc"', 'boundary')
        'abc'
    """
    if not content_type:
        return None

    message: Message = Message()
    message['Content-Type'] = content_type
    value: Any = message.get_param(param, header='Content-Type')

    # RFC 2231 encoded values come back as (charset, language, value)
    if isinstance(value, tuple):
        value = value[2]
    return value or None


class TransportResponse(BaseModel):
    """
    Immutable HTTP response as received from the transport.

    Attributes:
        status_code: The HTTP status code.
        headers: The response headers. Lookups through header() ignore case.
        body: The raw response body. A str is accepted and stored as UTF-8.
        origin: The object this value was adapted from, if any
                (e.g. the requests.Response).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status_code: int = Field(..., description='HTTP status code')
    headers: dict[str, str] = Field(
        default_factory=dict, description='HTTP response headers'
    )
    body: bytes = Field(default=b'', description='Raw response body')
    origin: Any = Field(default=None, exclude=True, repr=False)

    _lookup: CaseInsensitiveDict = PrivateAttr()

    def model_post_init(self, __context: Any) -> None:
        self._lookup = CaseInsensitiveDict(self.headers)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return a header value, ignoring the case of the name."""
        return self._lookup.get(name, default)

    @property
    def content_type(self) -> str | None:
        return self.header('Content-Type')

    @property
    def charset(self) -> str:
        """The charset declared in Content-Type, UTF-8 if none is declared."""
        return content_type_param(self.content_type, 'charset') or DEFAULT_CHARSET

    @property
    def text(self) -> str:
        """
        The body decoded with the declared charset.

        Undecodable bytes are replaced rather than raising; an unknown
        charset falls back to UTF-8.
        """
        try:
            return self.body.decode(self.charset, errors='replace')
        except LookupError:
            logger.debug('Unknown charset %r, decoding body as UTF-8', self.charset)
            return self.body.decode(DEFAULT_CHARSET, errors='replace')

    @classmethod
    def from_requests(cls, response: requests.Response) -> 'TransportResponse':
        """
        Adapt a ``requests.Response``.

        Args:
            response: The response returned by requests.

        Returns:
            A TransportResponse holding the status, headers and raw content.
        """
        logger.debug(
            'Adapting requests response (HTTP %r, %d bytes)',
            response.status_code,
            len(response.content or b''),
        )
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content or b'',
            origin=response,
        )

    def __repr__(self) -> str:
        return (
            f'TransportResponse('
            f'status_code={self.status_code}, '
            f'content_type={self.content_type!r}, '
            f'body={len(self.body)} bytes'
            f')'
        )
