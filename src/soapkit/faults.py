# soapkit/faults.py
"""
SOAP fault and HTTP error detection.

SoapFault and HttpErrorInfo are always available on a SoapResponse, whether
or not anything went wrong; ``present`` tells whether they apply. Both keep
the TransportResponse for diagnostics.
"""

import logging
from typing import Any

from lxml import etree

from soapkit.transport import TransportResponse
from soapkit.utils import (
    ResponseSection,
    convert_tag,
    element_to_value,
    find_soap_fault,
    local_name,
    parse_soap_response,
    soap_version,
)

logger: logging.Logger = logging.getLogger(__name__)

SUCCESS_STATUS_RANGE: range = range(200, 300)


def _child(element: etree._Element, name: str) -> etree._Element | None:
    for child in element:
        if local_name(child) == name:
            return child
    return None


def _child_text(element: etree._Element | None, *path: str) -> str | None:
    for name in path:
        if element is None:
            return None
        element = _child(element, name)

    if element is None or element.text is None:
        return None
    return element.text.strip() or None


class SoapFault:
    """
    SOAP Fault carried by a response body.

    Handles SOAP 1.1 (faultcode, faultstring, faultactor, detail) and
    SOAP 1.2 (Code/Value, Reason/Text, Role, Detail) faults.

    Attributes:
        http: The TransportResponse the fault was read from.
        present: Whether the body contains a Fault under the SOAP Body.
        version: '1.1' or '1.2' when known, else None.
    """

    def __init__(
        self,
        http: TransportResponse,
        xml: str | bytes | None = None,
        options: ResponseSection | None = None,
    ) -> None:
        """
        Locate a fault in the response.

        Args:
            http: The transport response.
            xml: The SOAP document to inspect. Defaults to the raw body;
                 multipart responses pass their primary part instead.
            options: Conversion options for detail and to_dict().
        """
        self.http: TransportResponse = http
        self._options: ResponseSection = options or ResponseSection()
        self._element: etree._Element | None = None
        self.version: str | None = None

        document: str | bytes = xml if xml is not None else http.body
        try:
            root: etree._Element = parse_soap_response(document)
        except etree.XMLSyntaxError as e:
            # Plain-text error pages are common on 4xx/5xx; they are not faults
            logger.debug('Response body is not well-formed XML, no SOAP fault: %s', e)
            return

        self._element = find_soap_fault(root)
        if self._element is not None:
            self.version = soap_version(root)
            if self.version is None:
                # Unqualified envelopes: SOAP 1.2 faults are recognisable by <Code>
                self.version = '1.2' if _child(self._element, 'Code') is not None else '1.1'
            logger.debug('SOAP %s fault found in response', self.version)

    @property
    def present(self) -> bool:
        return self._element is not None

    @property
    def code(self) -> str | None:
        """faultcode (1.1) or Code/Value (1.2)."""
        if self._element is None:
            return None
        if self.version == '1.2':
            return _child_text(self._element, 'Code', 'Value')
        return _child_text(self._element, 'faultcode')

    @property
    def subcodes(self) -> list[str]:
        """The chain of Code/Subcode/Value entries of a SOAP 1.2 fault."""
        result: list[str] = []
        if self._element is None or self.version != '1.2':
            return result

        node: etree._Element | None = _child(self._element, 'Code')
        while node is not None and (node := _child(node, 'Subcode')) is not None:
            value: str | None = _child_text(node, 'Value')
            if value:
                result.append(value)
        return result

    @property
    def message(self) -> str | None:
        """faultstring (1.1) or the first Reason/Text (1.2)."""
        if self._element is None:
            return None
        if self.version == '1.2':
            return _child_text(self._element, 'Reason', 'Text')
        return _child_text(self._element, 'faultstring')

    @property
    def actor(self) -> str | None:
        """faultactor (1.1) or Role (1.2)."""
        if self._element is None:
            return None
        if self.version == '1.2':
            return _child_text(self._element, 'Role')
        return _child_text(self._element, 'faultactor')

    @property
    def detail(self) -> Any:
        """The fault detail converted to dicts, None when absent."""
        if self._element is None:
            return None
        name: str = 'Detail' if self.version == '1.2' else 'detail'
        detail_element: etree._Element | None = _child(self._element, name)
        if detail_element is None:
            return None
        return element_to_value(detail_element, self._options)

    def to_dict(self) -> dict[str, Any]:
        """The whole Fault element as a dict, e.g. ``{'fault': {...}}``."""
        if self._element is None:
            return {}
        return {
            convert_tag(self._element, self._options): element_to_value(
                self._element, self._options
            )
        }

    def __str__(self) -> str:
        if not self.present:
            return ''
        message: str = self.message or ''
        if self.code is None:
            return message
        return f'({self.code}) {message}'.rstrip()

    def __repr__(self) -> str:
        if not self.present:
            return 'SoapFault(present=False)'
        return (
            f'SoapFault(version={self.version!r}, '
            f'code={self.code!r}, message={self.message!r})'
        )


class HttpErrorInfo:
    """
    HTTP-level failure of a response.

    Attributes:
        http: The TransportResponse.
        present: Whether the status code is outside 200-299.
    """

    def __init__(self, http: TransportResponse) -> None:
        self.http: TransportResponse = http
        self.present: bool = http.status_code not in SUCCESS_STATUS_RANGE
        if self.present:
            logger.debug('HTTP error status %r in response', http.status_code)

    @property
    def status_code(self) -> int:
        return self.http.status_code

    @property
    def body(self) -> str:
        return self.http.text

    def to_dict(self) -> dict[str, Any]:
        return {'code': self.status_code, 'body': self.body}

    def __str__(self) -> str:
        if not self.present:
            return ''
        message: str = f'HTTP error ({self.status_code})'
        if self.body:
            message += f': {self.body}'
        return message

    def __repr__(self) -> str:
        return f'HttpErrorInfo(status_code={self.status_code}, present={self.present})'
