"""
Core module for shared-secret registration

Contains:
- errors: ConfigurationError, CapabilityError variants, RequestFailed
- capabilities: the pre-signing capability check
"""

from .capabilities import CapabilityReport, check_capabilities, probe_capabilities
from .errors import (
    CapabilityError,
    ConfigurationError,
    InsecureContextError,
    RegistrarError,
    RequestFailed,
    SigningUnavailableError,
    TextDecoderUnavailableError,
    TextEncoderUnavailableError,
)

__all__ = [
    "CapabilityError",
    "CapabilityReport",
    "ConfigurationError",
    "InsecureContextError",
    "RegistrarError",
    "RequestFailed",
    "SigningUnavailableError",
    "TextDecoderUnavailableError",
    "TextEncoderUnavailableError",
    "check_capabilities",
    "probe_capabilities",
]
