"""
MAC computation for Synapse shared-secret registration.

Synapse verifies HMAC-SHA1 over ``nonce\\0username\\0password\\0admin|notadmin``
keyed with ``registration_shared_secret``. Any change to field order, the NUL
separator or the admin tokens makes the server reject the request.
"""
import hashlib
import hmac

ADMIN = "admin"
NOT_ADMIN = "notadmin"


def admin_literal(admin: bool) -> str:
    return ADMIN if admin else NOT_ADMIN


def build_mac_message(nonce: str, username: str, password: str, admin: bool) -> bytes:
    """Return the UTF-8 encoded canonical registration string"""
    return "\0".join([nonce, username, password, admin_literal(admin)]).encode("utf-8")


def compute_registration_mac(shared_secret: str, nonce: str, username: str, password: str, admin: bool) -> str:
    """
    Compute the registration MAC.

    Args:
        shared_secret: Synapse registration_shared_secret, used as raw key bytes
        nonce: Nonce from GET /_synapse/admin/v1/register
        username: Localpart of the account to register
        password: Password for the new account
        admin: Whether the account is a server admin

    Returns:
        Lowercase hex HMAC-SHA1 digest
    """
    return hmac.new(
        shared_secret.encode("utf-8"),
        build_mac_message(nonce, username, password, admin),
        hashlib.sha1,
    ).hexdigest()
