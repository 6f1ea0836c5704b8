#!/usr/bin/env python3
"""
Registration form controller

Holds references to the form's widgets and drives a single registration per
submit(). Widgets are plain objects so any front-end (terminal, web template,
test) can bind to them.

State machine:
    IDLE -> SUBMITTING (inputs locked) -> IDLE (inputs unlocked)
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Set

from synapse_register.core.errors import RequestFailed
from synapse_register.matrix.admin_client import SynapseAdminClient

logger = logging.getLogger("synapse_register.form")

BUSY_CLASS = "fade"
SUCCESS_CLASS = "green"
FAILURE_CLASS = "red"


class FormState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class TextInput:
    value: str = ""
    disabled: bool = False
    classes: Set[str] = field(default_factory=set)


@dataclass
class CheckboxInput:
    checked: bool = False
    disabled: bool = False
    classes: Set[str] = field(default_factory=set)


@dataclass
class OutputRegion:
    text: str = ""
    classes: Set[str] = field(default_factory=set)


class RegistrationForm:
    """Collects form values, registers the account and renders the result"""

    def __init__(
        self,
        homeserver: TextInput,
        secret: TextInput,
        username: TextInput,
        displayname: TextInput,
        password: TextInput,
        is_admin: CheckboxInput,
        output: OutputRegion,
        client_factory: Callable[..., Any] = SynapseAdminClient,
        client_options: Optional[dict] = None,
    ):
        """
        Args:
            homeserver, secret, username, displayname, password: Text inputs
            is_admin: Admin checkbox
            output: Region the result or error is rendered into
            client_factory: Builds the API client from homeserver_url and
                registration_shared_secret keyword arguments
            client_options: Extra keyword arguments for client_factory
                (verify_tls, allow_insecure_origin, request_timeout)
        """
        self.homeserver = homeserver
        self.secret = secret
        self.username = username
        self.displayname = displayname
        self.password = password
        self.is_admin = is_admin
        self.output = output
        self.client_factory = client_factory
        self.client_options = client_options or {}

        self.state = FormState.IDLE
        self.last_outcome: Optional[Outcome] = None

    @property
    def inputs(self):
        return [self.homeserver, self.secret, self.username, self.displayname, self.password, self.is_admin]

    def _lock(self):
        self.state = FormState.SUBMITTING
        for widget in self.inputs:
            widget.disabled = True
            widget.classes.add(BUSY_CLASS)

    def _unlock(self):
        for widget in self.inputs:
            widget.disabled = False
            widget.classes.discard(BUSY_CLASS)
        self.output.classes.discard(BUSY_CLASS)
        self.state = FormState.IDLE

    def _render(self, payload: Any):
        self.output.text = json.dumps(payload, indent=2)

    def _render_error(self, error: Exception):
        if isinstance(error, RequestFailed) and error.has_body:
            try:
                self._render(error.response.json())
                return
            except ValueError:
                pass
        self.output.text = str(error)

    async def submit(self) -> bool:
        """Register the account described by the form

        Returns:
            True on success, False on failure or when a submission is already running
        """
        if self.state is FormState.SUBMITTING:
            logger.warning("Registration already in progress, ignoring submit")
            return False

        self.output.classes.discard(FAILURE_CLASS)
        self.output.classes.discard(SUCCESS_CLASS)
        self._lock()

        try:
            client = self.client_factory(
                homeserver_url=self.homeserver.value,
                registration_shared_secret=self.secret.value,
                **self.client_options,
            )
            result = await client.register_account(
                self.username.value,
                self.displayname.value,
                self.password.value,
                self.is_admin.checked,
            )

            self.output.classes.add(SUCCESS_CLASS)
            self._render(result)
            self.last_outcome = Outcome.SUCCESS
            return True

        except Exception as e:
            logger.error(f"Registration failed: {e}")
            self.output.classes.add(FAILURE_CLASS)
            self._render_error(e)
            self.last_outcome = Outcome.FAILURE
            return False

        finally:
            self._unlock()
