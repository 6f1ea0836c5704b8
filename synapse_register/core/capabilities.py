#!/usr/bin/env python3
"""
Capability checks run before any registration MAC is computed.

Each missing capability raises its own error so a caller can tell which one
is absent:
- secure context (https origin, loopback host, or explicitly allowed)
- UTF-8 text encoding
- UTF-8 text decoding
- HMAC-SHA1 signing
"""
import codecs
import hashlib
import hmac
import ipaddress
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from synapse_register.core.errors import (
    InsecureContextError,
    SigningUnavailableError,
    TextDecoderUnavailableError,
    TextEncoderUnavailableError,
)

logger = logging.getLogger("synapse_register.capabilities")

LOOPBACK_HOSTS = {"localhost"}


@dataclass
class CapabilityReport:
    """Result of probing every capability without raising"""
    secure_context: bool
    text_encoder: bool
    text_decoder: bool
    hmac_sha1: bool

    @property
    def ok(self) -> bool:
        return self.secure_context and self.text_encoder and self.text_decoder and self.hmac_sha1


def _is_loopback(host: Optional[str]) -> bool:
    if not host:
        return False
    host = host.lower()
    if host in LOOPBACK_HOSTS or host.endswith(".localhost"):
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def is_secure_origin(homeserver_url: str, allow_insecure_origin: bool = False) -> bool:
    """Whether requests to this origin count as a secure context

    Mirrors the browser rule: https anywhere, plain http only on loopback.
    """
    if allow_insecure_origin:
        return True
    parsed = urlparse(homeserver_url)
    if parsed.scheme == "https":
        return True
    return parsed.scheme == "http" and _is_loopback(parsed.hostname)


def has_text_encoder() -> bool:
    try:
        codecs.getencoder("utf-8")("probe")
        return True
    except LookupError:
        return False


def has_text_decoder() -> bool:
    try:
        codecs.getdecoder("utf-8")(b"probe")
        return True
    except LookupError:
        return False


def has_hmac_sha1() -> bool:
    if "sha1" not in hashlib.algorithms_available:
        return False
    try:
        # FIPS builds list sha1 but may refuse to use it for keyed hashing
        hmac.new(b"probe", b"probe", "sha1").hexdigest()
        return True
    except ValueError:
        return False


def probe_capabilities(homeserver_url: str, allow_insecure_origin: bool = False) -> CapabilityReport:
    return CapabilityReport(
        secure_context=is_secure_origin(homeserver_url, allow_insecure_origin),
        text_encoder=has_text_encoder(),
        text_decoder=has_text_decoder(),
        hmac_sha1=has_hmac_sha1(),
    )


def check_capabilities(homeserver_url: str, allow_insecure_origin: bool = False) -> None:
    """
    Raise on the first missing capability.

    Args:
        homeserver_url: Origin the registration will be sent to
        allow_insecure_origin: Accept plain http on non-loopback hosts

    Raises:
        InsecureContextError: Origin is plain http on a non-loopback host
        TextEncoderUnavailableError: UTF-8 encoding is unavailable
        TextDecoderUnavailableError: UTF-8 decoding is unavailable
        SigningUnavailableError: HMAC-SHA1 cannot be computed
    """
    if not is_secure_origin(homeserver_url, allow_insecure_origin):
        logger.error(f"Refusing to register over insecure origin: {homeserver_url}")
        raise InsecureContextError("Cannot run outside of secure contexts.")
    if not has_text_encoder():
        raise TextEncoderUnavailableError("UTF-8 text encoding is not supported in this context.")
    if not has_text_decoder():
        raise TextDecoderUnavailableError("UTF-8 text decoding is not supported in this context.")
    if not has_hmac_sha1():
        raise SigningUnavailableError("HMAC-SHA1 signing is not supported in this context.")
    if allow_insecure_origin and not is_secure_origin(homeserver_url):
        logger.warning(f"Registering over insecure origin {homeserver_url} (explicitly allowed)")
