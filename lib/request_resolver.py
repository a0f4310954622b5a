"""Collect and validate the provisioning request.

Collection merges whatever source supplied the fields (argparse namespace,
interactive prompts, a programmatic ``RequestInput``) and fills in a random
secret. Validation is a separate pure step over the collected values.
"""

from __future__ import annotations

import argparse
import base64
import logging
import random
import secrets
import string
from typing import Callable, Optional

from lib.config import ProvisioningRequest, RequestInput
from lib.errors import InvalidInputError
from lib.validators import validate_domain, validate_email

logger = logging.getLogger("tunnel_setup.request")

Prompt = Callable[[str], str]

SECRET_BYTES = 24
FALLBACK_SECRET_LENGTH = 32

DOMAIN_PROMPT = "Enter your domain (e.g., example.com): "
EMAIL_PROMPT = "Enter your email for Let's Encrypt: "


def generate_secret() -> str:
    """Return a random shared secret.

    Uses 24 bytes from the OS CSPRNG, base64 encoded (32 characters). When the
    platform has no such source, falls back to 32 alphanumeric characters
    from the ``random`` module.
    """
    try:
        return base64.b64encode(secrets.token_bytes(SECRET_BYTES)).decode("ascii")
    except NotImplementedError:
        logger.warning("No strong randomness source available, using a weaker generator for the password")
        alphabet = string.ascii_letters + string.digits
        rng = random.Random()
        return ''.join(rng.choice(alphabet) for _ in range(FALLBACK_SECRET_LENGTH))


def _ask(prompt: Prompt, question: str) -> str:
    try:
        return prompt(question).strip()
    except EOFError:
        # No terminal attached; validation reports the missing value
        return ""


def input_from_args(args: argparse.Namespace) -> RequestInput:
    return RequestInput(
        domain=getattr(args, "domain", None),
        email=getattr(args, "email", None),
        password=getattr(args, "password", None),
        skip_firewall=bool(getattr(args, "skip_firewall", False)),
        skip_sysctl=bool(getattr(args, "skip_sysctl", False)),
    )


def collect_request(collected: RequestInput, prompt: Optional[Prompt] = None) -> RequestInput:
    """Fill missing fields: prompt for domain and email, generate a password.

    May block on terminal input.
    """
    ask = prompt or input

    domain = collected.domain
    if not domain:
        domain = _ask(ask, DOMAIN_PROMPT)

    email = collected.email
    if not email:
        email = _ask(ask, EMAIL_PROMPT)

    password = collected.password or generate_secret()

    return RequestInput(
        domain=domain,
        email=email,
        password=password,
        skip_firewall=collected.skip_firewall,
        skip_sysctl=collected.skip_sysctl,
    )


def validate_request(collected: RequestInput) -> ProvisioningRequest:
    """Turn collected values into an immutable request.

    Raises:
        InvalidInputError: the domain does not match the hostname grammar or
            no password is present
    """
    domain = collected.domain or ""
    if not validate_domain(domain):
        raise InvalidInputError(f"Invalid domain format: {domain}")

    if not collected.password:
        raise InvalidInputError("Password must not be empty")

    email = collected.email or ""
    if not validate_email(email):
        logger.warning(f"Email looks simple, but proceeding: {email}")

    return ProvisioningRequest(
        domain=domain,
        contact_email=email,
        shared_secret=collected.password,
        skip_firewall=collected.skip_firewall,
        skip_sysctl_tuning=collected.skip_sysctl,
    )


def resolve_request(collected: RequestInput, prompt: Optional[Prompt] = None) -> ProvisioningRequest:
    return validate_request(collect_request(collected, prompt))
