from synapse_register.matrix.admin_client import REGISTER_PATH, RawResponse, RegistrationRequest, SynapseAdminClient
from synapse_register.matrix.mac import admin_literal, build_mac_message, compute_registration_mac

__all__ = [
    "REGISTER_PATH",
    "RawResponse",
    "RegistrationRequest",
    "SynapseAdminClient",
    "admin_literal",
    "build_mac_message",
    "compute_registration_mac",
]
