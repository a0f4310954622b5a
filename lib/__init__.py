"""tunnel_tools - Provision an nginx-fronted Hysteria endpoint on Debian/Ubuntu."""

from __future__ import annotations

from .config import HostPaths, ProvisioningRequest, RequestInput
from .validators import validate_domain, validate_email
from .command_utils import run

__all__ = [
    "HostPaths",
    "ProvisioningRequest",
    "RequestInput",
    "validate_domain",
    "validate_email",
    "run",
]
