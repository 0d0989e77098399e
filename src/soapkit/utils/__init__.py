# soapkit/utils/__init__.py

from .config_loader import (
    LoggingSection,
    ResponseSection,
    SoapKitConfig,
    configure,
    get_settings,
    load_config,
    reset_settings,
)
from .logger import setup_logger
from .xml_parser import (
    decode_xml,
    declared_encoding,
    find_soap_fault,
    local_name,
    parse_soap_response,
    soap_version,
)
from .xml_to_dict import convert_tag, element_to_value, is_nil, parse_xml, snake_case

__all__: list[str] = [
    # config_loader.py
    'LoggingSection',
    'ResponseSection',
    'SoapKitConfig',
    'configure',
    # xml_to_dict.py
    'convert_tag',
    'element_to_value',
    # xml_parser.py
    'decode_xml',
    'declared_encoding',
    'find_soap_fault',
    'get_settings',
    'is_nil',
    'load_config',
    'local_name',
    'parse_soap_response',
    'parse_xml',
    'reset_settings',
    # logger.py
    'setup_logger',
    'snake_case',
    'soap_version',
]
