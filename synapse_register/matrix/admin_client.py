#!/usr/bin/env python3
"""
Synapse Admin Client - shared-secret user registration

Wraps the two calls of the Synapse admin registration API:
    GET  /_synapse/admin/v1/register  -> {"nonce": "..."}
    POST /_synapse/admin/v1/register  -> registration result

Every registration fetches a fresh nonce; nonces are never cached.
"""
import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlparse

import aiohttp

from synapse_register.config import RegistrarConfig
from synapse_register.core.capabilities import check_capabilities
from synapse_register.core.errors import ConfigurationError, RequestFailed
from synapse_register.matrix.mac import compute_registration_mac

logger = logging.getLogger("synapse_register.admin_client")

REGISTER_PATH = "/_synapse/admin/v1/register"


@dataclass
class RawResponse:
    """Status, headers and body of an HTTP response, read before the connection is released"""
    status: int
    body: bytes = b""
    reason: Optional[str] = None
    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    async def capture(cls, response: aiohttp.ClientResponse) -> "RawResponse":
        return cls(
            status=response.status,
            body=await response.read(),
            reason=response.reason,
            url=str(response.url),
            headers=dict(response.headers),
        )

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse the body as JSON

        Raises:
            ValueError: Body is empty or not valid JSON
        """
        return json.loads(self.body)


@dataclass
class RegistrationRequest:
    """JSON body of POST /_synapse/admin/v1/register"""
    nonce: str
    username: str
    displayname: str
    password: str
    admin: bool
    mac: str

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


class SynapseAdminClient:
    """Registers accounts on a Synapse homeserver using the registration shared secret"""

    def __init__(
        self,
        config: Optional[RegistrarConfig] = None,
        *,
        homeserver_url: Optional[str] = None,
        registration_shared_secret: Optional[str] = None,
        verify_tls: bool = True,
        allow_insecure_origin: bool = False,
        request_timeout: Optional[float] = None,
    ):
        """Initialize the client

        Args:
            config: Complete configuration; when given, the keyword arguments are ignored
            homeserver_url: Homeserver origin, e.g. https://matrix.example.org
            registration_shared_secret: Synapse registration_shared_secret
            verify_tls: Verify the homeserver's TLS certificate
            allow_insecure_origin: Accept plain http on non-loopback hosts
            request_timeout: Total timeout per request in seconds
        """
        if config is None:
            config = RegistrarConfig(
                homeserver_url=homeserver_url or "",
                registration_shared_secret=registration_shared_secret or "",
                verify_tls=verify_tls,
                allow_insecure_origin=allow_insecure_origin,
                request_timeout=request_timeout,
            )
        self.config = config

        if not config.verify_tls:
            logger.warning("TLS certificate verification is disabled")

    @property
    def homeserver_url(self) -> str:
        return self.config.homeserver_url

    @property
    def registration_shared_secret(self) -> str:
        return self.config.registration_shared_secret

    def _registration_url(self) -> str:
        parsed = urlparse(self.homeserver_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"Invalid homeserver URL: {self.homeserver_url}")
        return urljoin(self.homeserver_url, REGISTER_PATH)

    def _session(self) -> aiohttp.ClientSession:
        if self.config.request_timeout is not None:
            return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.config.request_timeout))
        return aiohttp.ClientSession()

    async def get_registration_nonce(self) -> str:
        """Fetch a one-time registration nonce

        Returns:
            The nonce issued by the homeserver

        Raises:
            ConfigurationError: Homeserver URL missing or invalid
            RequestFailed: Homeserver answered with a non-200 status or a malformed body
        """
        if not self.homeserver_url:
            raise ConfigurationError("Homeserver URL not set.")

        url = self._registration_url()
        logger.debug(f"Requesting registration nonce from {url}")

        async with self._session() as session:
            async with session.get(url, ssl=self.config.verify_tls) as response:
                raw = await RawResponse.capture(response)

        if raw.status != 200:
            logger.error(f"Could not get registration nonce: {raw.status} - {raw.text()}")
            raise RequestFailed("Could not get registration nonce.", raw)

        try:
            data = raw.json()
        except ValueError:
            data = None
        if not isinstance(data, dict) or not isinstance(data.get("nonce"), str):
            logger.error(f"Homeserver returned an invalid registration nonce: {raw.text()}")
            raise RequestFailed("Homeserver response did not include a registration nonce.", raw)
        return data["nonce"]

    async def register_account(self, username: str, displayname: str, password: str, admin: bool) -> Dict[str, Any]:
        """Register a new account

        Args:
            username: Localpart of the new user
            displayname: Display name for the new user
            password: Password for the new user
            admin: Whether the new user is a server admin

        Returns:
            Parsed JSON body of the homeserver's response, unmodified

        Raises:
            ConfigurationError: Homeserver URL or shared secret missing or invalid
            CapabilityError: A capability required for signing is missing
            RequestFailed: Homeserver answered with a non-200 status or a malformed body
        """
        if not self.homeserver_url:
            raise ConfigurationError("Homeserver URL not set.")
        if not self.registration_shared_secret:
            raise ConfigurationError("Registration secret not set.")

        url = self._registration_url()
        check_capabilities(self.homeserver_url, self.config.allow_insecure_origin)

        nonce = await self.get_registration_nonce()
        request = RegistrationRequest(
            nonce=nonce,
            username=username,
            displayname=displayname,
            password=password,
            admin=admin,
            mac=compute_registration_mac(self.registration_shared_secret, nonce, username, password, admin),
        )

        logger.info(f"Registering Matrix user {username} (admin={admin})")

        async with self._session() as session:
            async with session.post(url, json=request.to_json(), ssl=self.config.verify_tls) as response:
                raw = await RawResponse.capture(response)

        if raw.status != 200:
            logger.error(f"Failed to register user {username}: {raw.status} - {raw.text()}")
            raise RequestFailed("Failed to register user.", raw)

        try:
            result = raw.json()
        except ValueError:
            logger.error(f"Homeserver returned a non-JSON registration response: {raw.text()}")
            raise RequestFailed("Homeserver returned an invalid registration response.", raw)

        logger.info(f"Registered Matrix user {username}")
        return result
