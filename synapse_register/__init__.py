"""
Synapse shared-secret registration client.

Registers Matrix accounts through /_synapse/admin/v1/register using the
homeserver's registration_shared_secret.
"""

from synapse_register.config import RegistrarConfig
from synapse_register.core.errors import (
    CapabilityError,
    ConfigurationError,
    RegistrarError,
    RequestFailed,
)
from synapse_register.matrix.admin_client import SynapseAdminClient
from synapse_register.ui.form import RegistrationForm

__version__ = "0.1.0"

__all__ = [
    "CapabilityError",
    "ConfigurationError",
    "RegistrarConfig",
    "RegistrarError",
    "RegistrationForm",
    "RequestFailed",
    "SynapseAdminClient",
]
