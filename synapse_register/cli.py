#!/usr/bin/env python3
"""
synapse-register: register a Matrix user on a Synapse homeserver

The shared secret and password are read from SYNAPSE_REGISTRATION_SHARED_SECRET
and SYNAPSE_REGISTRATION_PASSWORD, or prompted for when unset.

Usage:
    synapse-register --homeserver https://matrix.example.org --username alice --admin
"""
import argparse
import asyncio
import dataclasses
import os
import sys
from getpass import getpass
from typing import List, Optional

from synapse_register.config import RegistrarConfig, setup_logging
from synapse_register.core.errors import ConfigurationError
from synapse_register.ui.form import CheckboxInput, OutputRegion, RegistrationForm, TextInput


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="synapse-register",
        description="Register a user on a Synapse homeserver with the registration shared secret",
    )
    parser.add_argument("--homeserver", help="Homeserver URL (default: $SYNAPSE_HOMESERVER_URL)")
    parser.add_argument("--username", required=True, help="Localpart of the new user")
    parser.add_argument("--displayname", default="", help="Display name of the new user")
    parser.add_argument("--admin", action="store_true", help="Make the new user a server admin")
    parser.add_argument("--insecure", action="store_true", help="Allow plain http to a non-loopback homeserver")
    parser.add_argument("--no-verify-tls", action="store_true", help="Don't verify the homeserver's TLS certificate")
    parser.add_argument("--log-level", help="Log level (default: $LOG_LEVEL or INFO)")
    return parser


def build_form(args: argparse.Namespace, config: RegistrarConfig) -> RegistrationForm:
    secret = config.registration_shared_secret or getpass("Registration shared secret: ")
    password = os.getenv("SYNAPSE_REGISTRATION_PASSWORD") or getpass(f"Password for {args.username}: ")

    return RegistrationForm(
        homeserver=TextInput(value=args.homeserver or config.homeserver_url),
        secret=TextInput(value=secret),
        username=TextInput(value=args.username),
        displayname=TextInput(value=args.displayname),
        password=TextInput(value=password),
        is_admin=CheckboxInput(checked=args.admin),
        output=OutputRegion(),
        client_options={
            "verify_tls": config.verify_tls and not args.no_verify_tls,
            "allow_insecure_origin": config.allow_insecure_origin or args.insecure,
            "request_timeout": config.request_timeout,
        },
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = RegistrarConfig.from_env()
        if args.log_level:
            config = dataclasses.replace(config, log_level=args.log_level)
        setup_logging(config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if not (args.homeserver or config.homeserver_url):
        print("Error: Homeserver URL not set. Use --homeserver or SYNAPSE_HOMESERVER_URL.", file=sys.stderr)
        return 2

    try:
        form = build_form(args, config)
    except (KeyboardInterrupt, EOFError):
        print("\nAborted.", file=sys.stderr)
        return 2

    success = asyncio.run(form.submit())

    print(form.output.text, file=sys.stdout if success else sys.stderr)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
