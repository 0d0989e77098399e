# soapkit/utils/xml_parser.py
"""
XML parsing utilities for SOAP responses.

Provides helper functions for parsing SOAP XML responses with proper
namespace handling for both SOAP 1.1 and SOAP 1.2 envelopes.
"""

import codecs
import logging
import re

from lxml import etree

logger: logging.Logger = logging.getLogger(__name__)

SOAP_11_NS: str = 'http://schemas.xmlsoap.org/soap/envelope/'
SOAP_12_NS: str = 'http://www.w3.org/2003/05/soap-envelope'

# Envelope namespace -> SOAP version
SOAP_VERSIONS: dict[str, str] = {
    SOAP_11_NS: '1.1',
    SOAP_12_NS: '1.2',
}

DEFAULT_XML_ENCODING: str = 'utf-8'

_DECLARED_ENCODING: re.Pattern[bytes] = re.compile(
    rb'<\?xml[^>]*?\sencoding\s*=\s*["\']([A-Za-z][\w.\-]*)["\']'
)


def declared_encoding(document: bytes) -> str | None:
    """
    Return the encoding an XML document declares for itself.

    A UTF-16 byte order mark wins; otherwise the ``encoding`` pseudo-attribute
    of the XML declaration is used.

    Example:
        >>> declared_encoding(b'<?xml version="1.0" encoding="ISO-8859-1"?><r/>')
        'ISO-8859-1'
    """
    if document.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return 'utf-16'

    match: re.Match[bytes] | None = _DECLARED_ENCODING.match(
        document.removeprefix(codecs.BOM_UTF8)
    )
    if match is None:
        return None
    return match.group(1).decode('ascii')


def decode_xml(document: bytes, charset: str | None = None) -> str:
    """
    Decode an XML document to text without altering its content.

    The transport charset is used when given, then the encoding declared by
    the document, then UTF-8. Undecodable bytes are replaced.

    Args:
        document: The raw XML bytes.
        charset: The charset parameter of the Content-Type header, if any.

    Returns:
        The document text.
    """
    encoding: str = charset or declared_encoding(document) or DEFAULT_XML_ENCODING
    try:
        return document.decode(encoding, errors='replace')
    except LookupError:
        logger.debug('Unknown XML encoding %r, decoding as UTF-8', encoding)
        return document.decode(DEFAULT_XML_ENCODING, errors='replace')


def parse_soap_response(xml: str | bytes) -> etree._Element:
    """
    Parse a SOAP XML response into an lxml Element.

    Args:
        xml: The raw XML response. Strings are encoded as UTF-8 first, since
             lxml refuses unicode input carrying an encoding declaration.

    Returns:
        The root element of the parsed XML tree.

    Raises:
        etree.XMLSyntaxError: If the XML is malformed or empty.
    """
    if isinstance(xml, str):
        xml = xml.encode('utf-8')

    parser: etree.XMLParser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
    )
    return etree.fromstring(xml, parser=parser)


def local_name(element: etree._Element) -> str | None:
    """
    Return the tag of an element without its namespace.

    Comments and processing instructions have no name and return None.
    """
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def _is_envelope_element(element: etree._Element, name: str) -> bool:
    # Unqualified envelope elements are tolerated as well
    if local_name(element) != name:
        return False
    namespace: str | None = etree.QName(element).namespace
    return namespace is None or namespace in SOAP_VERSIONS


def _find_envelope_child(root: etree._Element, name: str) -> etree._Element | None:
    for child in root:
        if _is_envelope_element(child, name):
            return child
    return None


def soap_version(root: etree._Element) -> str | None:
    """
    Return the SOAP version ('1.1' or '1.2') declared by the envelope namespace.

    Returns:
        The version string, or None if the root is not a namespaced envelope.
    """
    if local_name(root) != 'Envelope':
        return None
    return SOAP_VERSIONS.get(etree.QName(root).namespace or '')


def find_soap_fault(root: etree._Element) -> etree._Element | None:
    """
    Locate a Fault element directly under the SOAP Body.

    Only the first child position matters to SOAP, but servers in the wild
    put whitespace, comments or other elements before it, so every direct
    child of Body is inspected.

    Args:
        root: The root element of the SOAP envelope.

    Returns:
        The Fault element, or None if the response carries no fault.
    """
    body: etree._Element | None = _find_envelope_child(root, 'Body')
    if body is None:
        return None

    for child in body:
        if _is_envelope_element(child, 'Fault'):
            return child

    return None
