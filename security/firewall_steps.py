"""UFW rules for SSH, web and tunnel traffic."""

from __future__ import annotations

import logging

from lib.config import FIREWALL_RULES, HostPaths, ProvisioningRequest
from lib.host_tools import HostTools
from lib.logging_utils import log_subprocess_result

logger = logging.getLogger("tunnel_setup.security")


def configure_firewall(request: ProvisioningRequest, paths: HostPaths, tools: HostTools) -> None:
    """Allow required ports and enable ufw if needed. Never fatal."""
    logger.info("Configuring UFW firewall...")

    for rule, purpose in FIREWALL_RULES:
        log_subprocess_result(logger, f"Allowing {rule} ({purpose})", tools.firewall.allow(rule))

    if tools.firewall.is_active():
        logger.info("  ✓ Firewall already active")
        return

    result = tools.firewall.enable()
    if result.returncode != 0:
        log_subprocess_result(logger, "Enabling firewall", result)
        logger.warning("Firewall could not be enabled, continuing without it")
        return

    logger.info("  ✓ Firewall enabled")
