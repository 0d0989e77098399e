# soapkit/__init__.py

from .exceptions import HttpError, MalformedMultipartError, SoapError, SoapFaultError
from .faults import HttpErrorInfo, SoapFault
from .multipart import MimePart
from .response import SoapResponse
from .transport import TransportResponse
from .utils import SoapKitConfig, configure, get_settings, load_config, setup_logger

__version__: str = '0.1.0'

__all__: list[str] = [
    # exceptions.py
    'HttpError',
    # faults.py
    'HttpErrorInfo',
    'MalformedMultipartError',
    # multipart.py
    'MimePart',
    'SoapError',
    'SoapFault',
    'SoapFaultError',
    # utils
    'SoapKitConfig',
    # response.py
    'SoapResponse',
    # transport.py
    'TransportResponse',
    'configure',
    'get_settings',
    'load_config',
    'setup_logger',
]
