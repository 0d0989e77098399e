# soapkit/response.py
"""
SOAP response wrapper.

This module provides SoapResponse, the object handed back to callers after
a SOAP request. It classifies the response (SOAP fault, HTTP error or
success), decodes multipart bodies carrying attachments, and exposes the
envelope as nested dictionaries.
"""

import logging
from typing import Any

import requests
from lxml import etree

from soapkit.exceptions import HttpError, SoapFaultError
from soapkit.faults import HttpErrorInfo, SoapFault
from soapkit.multipart import MimePart, extract_boundary, is_multipart, split_multipart
from soapkit.transport import TransportResponse, content_type_param
from soapkit.utils import (
    ResponseSection,
    SoapKitConfig,
    decode_xml,
    get_settings,
    parse_xml,
)

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)


def _lookup(mapping: dict[str, Any], name: str) -> Any:
    # Matches 'envelope', 'Envelope' and 'soapenv:envelope' alike, so the
    # envelope is found whatever the tag conversion options are
    for key, value in mapping.items():
        if key.rsplit(':', 1)[-1].lower() == name:
            return value
    raise KeyError(name)


class SoapResponse:
    """
    A SOAP response and the HTTP response it came from.

    On construction the response is decoded (when multipart) and, if the
    raise-on-error policy is active, checked: a SOAP fault raises
    SoapFaultError, otherwise a non-2xx status raises HttpError. With the
    policy disabled construction always succeeds and callers check
    ``success``, ``has_fault`` and ``has_http_error`` themselves, or call
    validate().

    Derived values (fault, HTTP error, parsed tree) are computed at most
    once and cached. The caching is not thread-safe: share a SoapResponse
    between threads only after touching the values you need.

    Attributes:
        http: The TransportResponse.
        raise_errors: The raise-on-error policy applied at construction.
        parts: All MIME parts of a multipart response, empty otherwise.
        attachments: The MIME parts after the first, empty otherwise.

    Usage:
        >>> response = SoapResponse(TransportResponse(status_code=200, body=xml))
        >>> response['authenticate_response']['return']
        >>> response.to_array('authenticate_response', 'return')

        >>> response = SoapResponse(transport, raise_errors=False)
        >>> if response.has_fault:
        ...     print(response.soap_fault.message)
    """

    def __init__(
        self,
        http: TransportResponse,
        raise_errors: bool | None = None,
        config: SoapKitConfig | None = None,
    ) -> None:
        """
        Wrap a transport response.

        Args:
            http: The transport response to wrap.
            raise_errors: Raise on SOAP faults and HTTP errors. If None, the
                          value comes from config, or from the process-wide
                          settings when config is None as well.
            config: Configuration to use instead of the process-wide settings.

        Raises:
            SoapFaultError: The body carries a SOAP fault (policy active).
            HttpError: The status code is not 2xx and there is no fault
                       (policy active).
            MalformedMultipartError: Content-Type declares multipart but the
                                     body cannot be split.
        """
        self.http: TransportResponse = http

        config = config if config is not None else get_settings()
        self._options: ResponseSection = config.response
        self.raise_errors: bool = (
            raise_errors if raise_errors is not None else self._options.raise_errors
        )

        self.parts: list[MimePart] = []
        self.attachments: list[MimePart] = []
        self._primary_part: MimePart | None = None

        self._soap_fault: SoapFault | None = None
        self._http_error: HttpErrorInfo | None = None
        self._hash: dict[str, Any] | None = None

        logger.debug('Wrapping %r (raise_errors=%s)', http, self.raise_errors)

        self._decode_multipart()

        if self.raise_errors:
            self.validate()

    @classmethod
    def from_requests(
        cls, response: requests.Response, **kwargs: Any
    ) -> 'SoapResponse':
        """
        Wrap a ``requests.Response``.

        Args:
            response: The response returned by requests.
            **kwargs: Passed on to SoapResponse (raise_errors, config).
        """
        return cls(TransportResponse.from_requests(response), **kwargs)

    # ========================================================================
    # Classification
    # ========================================================================

    @property
    def success(self) -> bool:
        """True if there is neither a SOAP fault nor an HTTP error."""
        return not self.has_fault and not self.has_http_error

    @property
    def has_fault(self) -> bool:
        return self.soap_fault.present

    @property
    def soap_fault(self) -> SoapFault:
        """
        The SoapFault of this response.

        Always returns an object, also for successful responses; check
        has_fault (or ``soap_fault.present``) to know whether it applies.
        """
        if self._soap_fault is None:
            xml: bytes | None = (
                self._primary_part.body if self._primary_part is not None else None
            )
            self._soap_fault = SoapFault(self.http, xml=xml, options=self._options)
        return self._soap_fault

    @property
    def has_http_error(self) -> bool:
        return self.http_error.present

    @property
    def http_error(self) -> HttpErrorInfo:
        """
        The HttpErrorInfo of this response.

        Always returns an object; check has_http_error to know whether it applies.
        """
        if self._http_error is None:
            self._http_error = HttpErrorInfo(self.http)
        return self._http_error

    def validate(self) -> 'SoapResponse':
        """
        Raise the error this response represents, if any.

        A SOAP fault takes precedence over an HTTP error, so a fault returned
        with HTTP 500 raises SoapFaultError.

        Returns:
            The response itself, for chaining.

        Raises:
            SoapFaultError: The body carries a SOAP fault.
            HttpError: The status code is not 2xx.
        """
        if self.has_fault:
            logger.error('SOAP fault in response: %s', self.soap_fault)
            raise SoapFaultError(self.soap_fault)

        if self.has_http_error:
            logger.error('HTTP error in response: HTTP %r', self.http.status_code)
            raise HttpError(self.http_error)

        return self

    # ========================================================================
    # Multipart
    # ========================================================================

    @property
    def is_multipart(self) -> bool:
        return is_multipart(self.http.content_type)

    @property
    def boundary(self) -> str | None:
        """The boundary of a multipart response, None otherwise."""
        return extract_boundary(self.http.content_type)

    def _decode_multipart(self) -> None:
        """
        Split a multipart response into parts.

        The first part is assumed to be the SOAP envelope; nothing checks
        its content type. Every other part is an attachment.
        """
        if not self.is_multipart:
            return

        content_type: str = self.http.content_type or ''
        self.parts = split_multipart(self.http.body, content_type)
        self._primary_part = self.parts[0]
        self.attachments = self.parts[1:]

        primary_type: str | None = self._primary_part.content_type
        if primary_type and 'xml' not in primary_type:
            logger.debug(
                'First MIME part has content type %r, using it as the SOAP body anyway',
                primary_type,
            )

        logger.debug(
            'Multipart response decoded: %d parts, %d attachments',
            len(self.parts),
            len(self.attachments),
        )

    def attachment(self, content_id: str) -> MimePart | None:
        """
        Find an attachment by Content-ID.

        Args:
            content_id: The Content-ID, with or without angle brackets
                        (a 'cid:' prefix as used in href attributes is accepted).

        Returns:
            The matching attachment, or None.
        """
        wanted: str = content_id.strip().removeprefix('cid:').strip('<>')
        for part in self.attachments:
            if part.content_id == wanted:
                return part
        return None

    # ========================================================================
    # XML and parsed body
    # ========================================================================

    @property
    def raw(self) -> bytes:
        """The untouched transport body."""
        return self.http.body

    @property
    def primary_xml(self) -> str:
        """
        The SOAP document: the first MIME part, or the whole body.

        Decoded with the declared charset, falling back to the encoding of
        the XML declaration, so the text matches the original document.
        """
        if self._primary_part is not None:
            return decode_xml(
                self._primary_part.body,
                content_type_param(self._primary_part.content_type, 'charset'),
            )
        return decode_xml(
            self.http.body, content_type_param(self.http.content_type, 'charset')
        )

    def to_xml(self) -> str:
        """The SOAP response XML, without normalization."""
        return self.primary_xml

    def parsed_tree(self) -> dict[str, Any]:
        """
        The SOAP document as nested dictionaries.

        Parsed once; later calls return the same object.

        Raises:
            etree.XMLSyntaxError: If the SOAP document is not well-formed XML.
        """
        if self._hash is None:
            document: bytes = (
                self._primary_part.body
                if self._primary_part is not None
                else self.http.body
            )
            try:
                self._hash = parse_xml(document, self._options)
            except etree.XMLSyntaxError as e:
                logger.error('Failed to parse SOAP response XML: %s', e)
                raise
        return self._hash

    @property
    def hash(self) -> dict[str, Any]:
        """Alias of parsed_tree()."""
        return self.parsed_tree()

    def _envelope(self) -> dict[str, Any]:
        try:
            envelope: Any = _lookup(self.parsed_tree(), 'envelope')
        except KeyError as e:
            raise ValueError('No SOAP Envelope element found in response') from e
        return envelope if isinstance(envelope, dict) else {}

    @property
    def header(self) -> dict[str, Any]:
        """The SOAP Header as a dict, empty if the envelope has none."""
        try:
            header: Any = _lookup(self._envelope(), 'header')
        except KeyError:
            return {}
        return header if header is not None else {}

    @property
    def body(self) -> dict[str, Any]:
        """
        The SOAP Body as a dict.

        Raises:
            ValueError: If the document has no SOAP Envelope or Body.
        """
        try:
            body: Any = _lookup(self._envelope(), 'body')
        except KeyError as e:
            raise ValueError('No SOAP Body element found in response') from e
        return body if body is not None else {}

    def to_dict(self) -> dict[str, Any]:
        """Alias of body."""
        return self.body

    def __getitem__(self, key: str) -> Any:
        return self.body[key]

    def to_array(self, *path: str) -> list[Any]:
        """
        Return the value at a path of body keys, always as a list.

        A key that occurs once in the XML becomes a dict or scalar, a key
        that repeats becomes a list. This accessor hides the difference.

        Args:
            *path: Keys to follow from the body.

        Returns:
            [] if any key is missing (or maps to None); the list without
            None entries if the value is a list; otherwise a one-element list.

        Example:
            >>> response.to_array('get_users_response', 'user')
            [{'name': 'ann'}]
        """
        result: Any = self.body
        for key in path:
            if not isinstance(result, dict) or result.get(key) is None:
                return []
            result = result[key]

        match result:
            case list():
                return [item for item in result if item is not None]
            case None:
                return []
            case _:
                return [result]

    def __repr__(self) -> str:
        return (
            f'SoapResponse('
            f'status_code={self.http.status_code}, '
            f'multipart={self.is_multipart}, '
            f'success={self.success}'
            f')'
        )
