# soapkit/exceptions.py
"""
Exceptions raised by soapkit.

All of them derive from SoapError, so callers that do not care about the
kind of failure can catch a single class.
"""

from typing import TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from soapkit.faults import HttpErrorInfo, SoapFault
    from soapkit.transport import TransportResponse


class SoapError(Exception):
    """Base class for every error raised by soapkit."""


class SoapFaultError(SoapError):
    """
    The response body carries a SOAP Fault.

    Raised while constructing a SoapResponse (or from validate()) when the
    raise-on-error policy is active. Takes precedence over HttpError.

    Attributes:
        fault: The parsed SoapFault with code, message and detail.
        http: The TransportResponse the fault was read from.
    """

    def __init__(self, fault: 'SoapFault') -> None:
        super().__init__(str(fault))
        self.fault: SoapFault = fault
        self.http: TransportResponse = fault.http


class HttpError(SoapError, requests.exceptions.HTTPError):
    """
    The HTTP status code is outside the 2xx range.

    Also a ``requests.exceptions.HTTPError``, so code written against
    ``response.raise_for_status()`` keeps working. ``response`` is the
    originating requests.Response when the TransportResponse was adapted
    from one, None otherwise.

    Attributes:
        error: The HttpErrorInfo describing the failure.
        status_code: The HTTP status code.
        body: The response body text.
        http: The TransportResponse.
    """

    def __init__(self, error: 'HttpErrorInfo') -> None:
        super().__init__(str(error), response=error.http.origin)
        self.error: HttpErrorInfo = error
        self.http: TransportResponse = error.http
        self.status_code: int = error.status_code
        self.body: str = error.body


class MalformedMultipartError(SoapError, ValueError):
    """
    Content-Type declares a multipart body that cannot be decoded.

    Raised when the boundary parameter is missing or when the body holds no
    part delimited by the declared boundary.
    """
