# soapkit/multipart.py
"""
Multipart MIME decoding for SOAP responses with attachments (SwA / MTOM).

The framing and transfer-encoding rules are handled by the standard library
``email`` parser; this module only feeds it the response and reshapes the
result into MimePart values.
"""

import logging
from email.generator import BytesGenerator
from email.message import Message
from email.parser import BytesParser
from email.policy import compat32
from io import BytesIO

from pydantic import BaseModel, ConfigDict, Field
from requests.structures import CaseInsensitiveDict

from soapkit.exceptions import MalformedMultipartError
from soapkit.transport import DEFAULT_CHARSET, content_type_param

logger: logging.Logger = logging.getLogger(__name__)

MULTIPART_PREFIX: str = 'multipart'


def is_multipart(content_type: str | None) -> bool:
    """
    Return whether a Content-Type value declares a multipart body.

    The check is a case-sensitive prefix match on 'multipart'; parameters
    are ignored. A missing header is never multipart.
    """
    return bool(content_type) and content_type.startswith(MULTIPART_PREFIX)


def extract_boundary(content_type: str | None) -> str | None:
    """
    Extract the boundary parameter from a multipart Content-Type value.

    Args:
        content_type: The Content-Type header value.

    Returns:
        The unquoted boundary, or None if the value is not multipart or has
        no boundary parameter.

    Example:
        >>> extract_boundary('multipart/related; boundary="abc123"; charset=UTF-8')
        'abc123'
    """
    if not is_multipart(content_type):
        return None
    return content_type_param(content_type, 'boundary')


class MimePart(BaseModel):
    """
    One decoded part of a multipart body.

    Attributes:
        headers: The MIME headers of the part.
        body: The content after Content-Transfer-Encoding decoding. For a
              nested multipart container this is the container content as
              re-serialized by the email generator, with LF line endings.
        parts: The nested parts when this part is itself multipart.
    """

    model_config = ConfigDict(frozen=True)

    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b''
    parts: list['MimePart'] = Field(default_factory=list)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return a header value, ignoring the case of the name."""
        return CaseInsensitiveDict(self.headers).get(name, default)

    @property
    def content_type(self) -> str | None:
        return self.header('Content-Type')

    @property
    def content_id(self) -> str | None:
        """The Content-ID without its angle brackets."""
        content_id: str | None = self.header('Content-ID')
        if content_id is None:
            return None
        return content_id.strip().strip('<>')

    @property
    def filename(self) -> str | None:
        """The filename parameter of Content-Disposition, if any."""
        disposition: str | None = self.header('Content-Disposition')
        if not disposition:
            return None
        message: Message = Message()
        message['Content-Disposition'] = disposition
        return message.get_filename()

    @property
    def is_multipart(self) -> bool:
        return is_multipart(self.content_type)

    @property
    def text(self) -> str:
        """The body decoded with the part charset (UTF-8 if none is declared)."""
        charset: str = content_type_param(self.content_type, 'charset') or DEFAULT_CHARSET
        try:
            return self.body.decode(charset, errors='replace')
        except LookupError:
            logger.debug('Unknown charset %r in MIME part, decoding as UTF-8', charset)
            return self.body.decode(DEFAULT_CHARSET, errors='replace')

    def __repr__(self) -> str:
        return (
            f'MimePart(content_type={self.content_type!r}, '
            f'body={len(self.body)} bytes, parts={len(self.parts)})'
        )


def _container_content(message: Message) -> bytes:
    # compat32 serialises with '\n', so the first blank line ends the headers
    buffer: BytesIO = BytesIO()
    BytesGenerator(buffer, mangle_from_=False).flatten(message)
    return buffer.getvalue().split(b'\n\n', 1)[-1]


def _to_mime_part(message: Message) -> MimePart:
    headers: dict[str, str] = {name: str(value) for name, value in message.items()}

    if message.is_multipart():
        return MimePart(
            headers=headers,
            body=_container_content(message),
            parts=[_to_mime_part(sub) for sub in message.get_payload()],
        )

    payload: bytes | None = message.get_payload(decode=True)
    return MimePart(headers=headers, body=payload or b'')


def split_multipart(body: bytes, content_type: str) -> list[MimePart]:
    """
    Split a multipart body into decoded parts.

    Args:
        body: The raw multipart body (without the outer HTTP headers).
        content_type: The Content-Type header declaring the boundary.

    Returns:
        The parts in document order. Parts that are themselves multipart
        carry their own nested parts.

    Raises:
        MalformedMultipartError: If the boundary parameter is missing or no
            part delimited by the boundary is found.
    """
    boundary: str | None = extract_boundary(content_type)
    if not boundary:
        message_text: str = f'Multipart Content-Type without a boundary: {content_type!r}'
        logger.error(message_text)
        raise MalformedMultipartError(message_text)

    logger.debug('Splitting multipart body (%d bytes) on boundary %r', len(body), boundary)

    # The parser wants a complete message, so the outer Content-Type is put back
    envelope: bytes = f'Content-Type: {content_type}\r\n\r\n'.encode('utf-8') + body
    message: Message = BytesParser(policy=compat32).parsebytes(envelope)

    if not message.is_multipart() or not message.get_payload():
        message_text = f'No MIME part delimited by boundary {boundary!r} found in body'
        logger.error(message_text)
        raise MalformedMultipartError(message_text)

    for defect in message.defects:
        logger.debug('MIME defect while splitting body: %r', defect)

    parts: list[MimePart] = [_to_mime_part(sub) for sub in message.get_payload()]
    logger.debug('Decoded %d MIME parts', len(parts))
    return parts
