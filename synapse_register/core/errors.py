"""
Error types for shared-secret registration.

Three kinds of failure reach the caller:
- ConfigurationError: homeserver URL or shared secret missing/invalid
- CapabilityError: the runtime cannot sign the request (one subclass per capability)
- RequestFailed: the homeserver answered with a non-200 status or a malformed body
"""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from synapse_register.matrix.admin_client import RawResponse


class RegistrarError(Exception):
    """Base class for all registration errors"""
    pass


class ConfigurationError(RegistrarError):
    """Raised when configuration is missing or invalid"""
    pass


class CapabilityError(RegistrarError):
    """Raised when the runtime lacks something required to sign a registration"""

    capability = "unknown"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or f"Capability '{self.capability}' is not available in this context.")


class InsecureContextError(CapabilityError):
    """Homeserver origin is not a secure context (https or loopback)"""
    capability = "secure-context"


class TextEncoderUnavailableError(CapabilityError):
    capability = "text-encoder"


class TextDecoderUnavailableError(CapabilityError):
    capability = "text-decoder"


class SigningUnavailableError(CapabilityError):
    """HMAC-SHA1 cannot be computed"""
    capability = "hmac-sha1"


class RequestFailed(RegistrarError):
    """Raised when the homeserver returns a non-200 status or an unusable body

    The raw response is attached so the caller can parse the server's
    structured error body.
    """

    def __init__(self, message: str, response: "RawResponse"):
        super().__init__(message)
        self.response = response

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def has_body(self) -> bool:
        return bool(self.response.body)
