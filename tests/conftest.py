"""Pytest configuration and shared fixtures for soapkit tests."""

import base64
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
import yaml
from requests import Response

from soapkit import SoapKitConfig, TransportResponse
from soapkit.utils import reset_settings

MULTIPART_BOUNDARY: str = '--==_mimepart_4d416ae62fd32_201a8043814c4724'

MULTIPART_CONTENT_TYPE: str = (
    f'multipart/related; boundary="{MULTIPART_BOUNDARY}"; '
    'charset=UTF-8; type="text/xml"'
)

MULTIPART_SOAP_PART: str = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">'
    '<soapenv:Header><ns1:TransactionID xmlns:ns1="http://example.com/mm7">'
    '2011012713535811111111111</ns1:TransactionID></soapenv:Header>'
    '<soapenv:Body><SubmitReq xmlns="http://example.com/mm7">'
    '<MM7Version>5.3.0</MM7Version><Subject>Test MMS</Subject>'
    '<Content href="cid:attachment_1" allowAdaptations="true"/>'
    '</SubmitReq></soapenv:Body></soapenv:Envelope>'
)

ATTACHMENT_TEXT: bytes = b'Hello World!'


@pytest.fixture(autouse=True)
def _reset_process_settings() -> Iterator[None]:
    """Every test starts and ends with the default process-wide settings."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def soap_response_xml() -> str:
    """A successful SOAP 1.1 response."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
    <soap:Body>
        <ns2:authenticateResponse xmlns:ns2="http://v1_0.ws.auth.order.example.com/">
            <return>
                <authenticationValue>
                    <token>a68d1d6379b62ff339a0e0c69ed4d9cf</token>
                    <tokenHash>AAAJxA;cIedoT;mY10ExZwG6JuKgp2OYKxow==</tokenHash>
                    <client>radclient</client>
                </authenticationValue>
                <success>true</success>
            </return>
        </ns2:authenticateResponse>
    </soap:Body>
</soap:Envelope>"""


@pytest.fixture
def soap_header_xml() -> str:
    """A SOAP response carrying a Header."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
    <soap:Header>
        <SessionNumber>ABCD1234</SessionNumber>
    </soap:Header>
    <soap:Body>
        <loginResponse>
            <return>true</return>
        </loginResponse>
    </soap:Body>
</soap:Envelope>"""


@pytest.fixture
def soap_list_xml() -> str:
    """A SOAP response with repeated, namespaced and nil elements."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"
               xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
    <soap:Body>
        <ns1:multiNamespacedEntryResponse xmlns:ns1="http://example.com/list">
            <ns1:history>
                <ns1:case><ns1:id>1</ns1:id></ns1:case>
                <ns1:case><ns1:id>2</ns1:id></ns1:case>
            </ns1:history>
            <ns1:single><ns1:id>3</ns1:id></ns1:single>
            <ns1:value>a</ns1:value>
            <ns1:value xsi:nil="true"/>
            <ns1:value>b</ns1:value>
        </ns1:multiNamespacedEntryResponse>
    </soap:Body>
</soap:Envelope>"""


@pytest.fixture
def soap_fault_xml() -> str:
    """A SOAP 1.1 fault response."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
    <soap:Body>
        <soap:Fault>
            <faultcode>soap:Server</faultcode>
            <faultstring>Fault occurred while processing.</faultstring>
            <faultactor>http://example.com/service</faultactor>
            <detail>
                <errorCode>E42</errorCode>
            </detail>
        </soap:Fault>
    </soap:Body>
</soap:Envelope>"""


@pytest.fixture
def soap12_fault_xml() -> str:
    """A SOAP 1.2 fault response."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<env:Envelope xmlns:env="http://www.w3.org/2003/05/soap-envelope"
              xmlns:m="http://www.example.org/timeouts">
    <env:Body>
        <env:Fault>
            <env:Code>
                <env:Value>env:Sender</env:Value>
                <env:Subcode>
                    <env:Value>m:MessageTimeout</env:Value>
                </env:Subcode>
            </env:Code>
            <env:Reason>
                <env:Text xml:lang="en">Sender Timeout</env:Text>
            </env:Reason>
            <env:Role>http://example.org/role</env:Role>
            <env:Detail>
                <m:MaxTime>P5M</m:MaxTime>
            </env:Detail>
        </env:Fault>
    </env:Body>
</env:Envelope>"""


def _part(headers: dict[str, str], content: str) -> str:
    header_block: str = ''.join(f'{name}: {value}\r\n' for name, value in headers.items())
    return f'{header_block}\r\n{content}\r\n'


def build_multipart(boundary: str, parts: list[str]) -> bytes:
    """Frame already-rendered parts with a boundary."""
    body: str = '\r\n'
    for part in parts:
        body += f'--{boundary}\r\n{part}'
    body += f'--{boundary}--\r\n'
    return body.encode('utf-8')


@pytest.fixture
def multipart_body() -> bytes:
    """A two-part multipart/related body: SOAP envelope plus a base64 attachment."""
    soap_part: str = _part(
        {
            'Content-Type': 'text/xml; charset=UTF-8',
            'Content-Transfer-Encoding': '7bit',
            'Content-ID': '<soap_part>',
        },
        MULTIPART_SOAP_PART,
    )
    attachment_part: str = _part(
        {
            'Content-Type': 'text/plain; charset=UTF-8',
            'Content-Transfer-Encoding': 'base64',
            'Content-ID': '<attachment_1>',
            'Content-Disposition': 'attachment; filename="hello.txt"',
        },
        base64.b64encode(ATTACHMENT_TEXT).decode('ascii'),
    )
    return build_multipart(MULTIPART_BOUNDARY, [soap_part, attachment_part])


@pytest.fixture
def multipart_content_type() -> str:
    """Content-Type of multipart_body, with a quoted boundary among other parameters."""
    return MULTIPART_CONTENT_TYPE


@pytest.fixture
def multipart_soap_part() -> str:
    """The SOAP envelope carried as the first part of multipart_body."""
    return MULTIPART_SOAP_PART


@pytest.fixture
def attachment_text() -> bytes:
    """The decoded content of the multipart_body attachment."""
    return ATTACHMENT_TEXT


@pytest.fixture
def make_multipart() -> Callable[[str, list[tuple[dict[str, str], str]]], bytes]:
    """Factory framing (headers, content) pairs into a multipart body."""

    def _make(boundary: str, parts: list[tuple[dict[str, str], str]]) -> bytes:
        return build_multipart(
            boundary, [_part(headers, content) for headers, content in parts]
        )

    return _make


@pytest.fixture
def nested_multipart_body() -> bytes:
    """A multipart/mixed body whose second part is itself multipart/alternative."""
    inner_boundary: str = 'inner-boundary'
    inner: bytes = build_multipart(
        inner_boundary,
        [
            _part({'Content-Type': 'text/plain'}, 'plain version'),
            _part({'Content-Type': 'text/html'}, '<p>html version</p>'),
        ],
    )
    soap_part: str = _part({'Content-Type': 'text/xml'}, MULTIPART_SOAP_PART)
    nested_part: str = _part(
        {'Content-Type': f'multipart/alternative; boundary="{inner_boundary}"'},
        inner.decode('utf-8').strip('\r\n'),
    )
    return build_multipart('outer-boundary', [soap_part, nested_part])


@pytest.fixture
def make_transport() -> Callable[..., TransportResponse]:
    """Factory for TransportResponse values with SOAP-friendly defaults."""

    def _make(
        body: str | bytes = '',
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        return TransportResponse(
            status_code=status_code,
            headers=headers if headers is not None else {'Content-Type': 'text/xml'},
            body=body,
        )

    return _make


@pytest.fixture
def mock_requests_response(soap_response_xml: str) -> Mock:
    """Create a mock requests.Response object."""
    response = Mock(spec=Response)
    response.status_code = 200
    response.content = soap_response_xml.encode('utf-8')
    response.headers = {'Content-Type': 'text/xml; charset=utf-8'}
    return response


@pytest.fixture
def sample_config() -> SoapKitConfig:
    """Create a sample SoapKitConfig for testing."""
    config_dict: dict[str, Any] = {
        'response': {
            'raise_errors': False,
            'strip_namespaces': True,
            'convert_tags_to': 'snake_case',
            'advanced_typecasting': True,
            'keep_attributes': False,
        },
        'logging': {
            'console_level': 'INFO',
            'file_level': 'DEBUG',
            'file_path': 'test_soapkit.log',
        },
    }
    return SoapKitConfig.model_validate(config_dict)


@pytest.fixture
def temp_config_file(tmp_path: Path, sample_config: SoapKitConfig) -> Path:
    """Create a temporary config file for testing."""
    config_path: Path = tmp_path / 'config.yaml'

    config_dict: dict[str, Any] = sample_config.model_dump(mode='json')

    config_path.write_text(
        yaml.safe_dump(
            config_dict,
            sort_keys=False,
        )
    )

    return config_path
