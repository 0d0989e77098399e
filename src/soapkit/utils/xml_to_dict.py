# soapkit/utils/xml_to_dict.py
"""
Conversion of lxml elements into nested Python dictionaries.

This module turns a SOAP envelope into plain dicts, lists and scalars so
that callers can navigate a response with ``body['some_response']['return']``
instead of XPath. It follows a few conventions worth knowing:

- A child element that occurs once becomes a scalar (leaf) or a dict.
- A child element that repeats becomes a list, in document order.
- Leaf text is stripped; empty leaves and ``xsi:nil`` elements become None.

Because cardinality decides between "dict" and "list", the same field can
change shape from one response to the next. SoapResponse.to_array() exists
to smooth that over.
"""

import logging
import re
from typing import Any

from lxml import etree

from .config_loader import ResponseSection
from .xml_parser import parse_soap_response

logger: logging.Logger = logging.getLogger(__name__)

XSI_NS: str = 'http://www.w3.org/2001/XMLSchema-instance'

TEXT_KEY: str = '#text'
ATTRIBUTE_PREFIX: str = '@'

_ACRONYM_BOUNDARY: re.Pattern[str] = re.compile(r'([A-Z]+)([A-Z][a-z])')
_WORD_BOUNDARY: re.Pattern[str] = re.compile(r'([a-z\d])([A-Z])')

_BOOLEANS: dict[str, bool] = {'true': True, 'false': False}


def is_nil(element: etree._Element | None) -> bool:
    """
    Check if an XML element has xsi:nil='1' or xsi:nil='true' attribute.

    Many SOAP responses use the xsi:nil attribute to explicitly indicate a null value,
    rather than simply omitting the tag.

    Args:
        element: The XML element to check. Can be None.

    Returns:
        True if the element is None or has xsi:nil set to '1' or 'true'.
        False otherwise.
    """
    if element is None:
        return True

    nil_attr: str | None = element.get(f'{{{XSI_NS}}}nil')
    return nil_attr in {'1', 'true'}


def snake_case(name: str) -> str:
    """
    Convert a camelCase or PascalCase XML name to snake_case.

    Example:
        >>> snake_case('authenticateResponse')
        'authenticate_response'
        >>> snake_case('MM7Version')
        'mm7_version'
        >>> snake_case('HTTPHeader')
        'http_header'
    """
    name = _ACRONYM_BOUNDARY.sub(r'\1_\2', name)
    name = _WORD_BOUNDARY.sub(r'\1_\2', name)
    return name.replace('-', '_').lower()


def convert_tag(element: etree._Element, options: ResponseSection) -> str:
    """
    Build the dictionary key for an element according to the options.

    Args:
        element: The element whose tag is converted.
        options: Conversion options (namespace stripping, tag case).

    Returns:
        The key, e.g. 'authenticate_response' or 'ns1:authenticate_response'.
    """
    name: str = etree.QName(element).localname
    if options.convert_tags_to == 'snake_case':
        name = snake_case(name)

    if not options.strip_namespaces and element.prefix:
        return f'{element.prefix}:{name}'
    return name


def _typecast(text: str, options: ResponseSection) -> Any:
    if options.advanced_typecasting and text in _BOOLEANS:
        return _BOOLEANS[text]
    return text


def _attributes(element: etree._Element, options: ResponseSection) -> dict[str, Any]:
    attributes: dict[str, Any] = {}
    for raw_name, value in element.attrib.items():
        qname: etree.QName = etree.QName(raw_name)
        # xsi:type, xsi:nil and friends describe the schema, not the data
        if qname.namespace == XSI_NS:
            continue
        name: str = qname.localname
        if options.convert_tags_to == 'snake_case':
            name = snake_case(name)
        attributes[f'{ATTRIBUTE_PREFIX}{name}'] = value
    return attributes


def element_to_value(
    element: etree._Element, options: ResponseSection | None = None
) -> Any:
    """
    Convert a single element into a scalar, None or dict.

    Args:
        element: The element to convert.
        options: Conversion options. Defaults to ResponseSection().

    Returns:
        None for nil or empty leaves, the (typecast) text for other leaves,
        and a dict for elements with child elements or kept attributes.
    """
    if options is None:
        options = ResponseSection()

    if is_nil(element):
        return None

    attributes: dict[str, Any] = (
        _attributes(element, options) if options.keep_attributes else {}
    )
    children: list[etree._Element] = [
        child for child in element if isinstance(child.tag, str)
    ]

    if not children:
        text: str = (element.text or '').strip()
        value: Any = _typecast(text, options) if text else None
        if not attributes:
            return value
        if value is not None:
            attributes[TEXT_KEY] = value
        return attributes

    result: dict[str, Any] = attributes
    for child in children:
        key: str = convert_tag(child, options)
        child_value: Any = element_to_value(child, options)

        if key not in result:
            result[key] = child_value
            continue

        # Repeated element: promote to a list, keeping document order.
        # element_to_value never returns a list, so a list here is one we built.
        existing: Any = result[key]
        if isinstance(existing, list):
            existing.append(child_value)
        else:
            result[key] = [existing, child_value]

    return result


def parse_xml(
    xml: str | bytes, options: ResponseSection | None = None
) -> dict[str, Any]:
    """
    Parse an XML document into a nested dictionary keyed by the root element.

    Args:
        xml: The XML document.
        options: Conversion options. Defaults to ResponseSection().

    Returns:
        A one-key dict, e.g. ``{'envelope': {'header': ..., 'body': ...}}``.

    Raises:
        etree.XMLSyntaxError: If the XML is malformed.

    Example:
        >>> parse_xml('<Envelope><Body><getResult>1</getResult></Body></Envelope>')
        {'envelope': {'body': {'get_result': '1'}}}
    """
    if options is None:
        options = ResponseSection()

    root: etree._Element = parse_soap_response(xml)
    logger.debug('Converting XML document rooted at %r to dict', root.tag)
    return {convert_tag(root, options): element_to_value(root, options)}
