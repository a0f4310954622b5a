"""Final service check and client configuration report."""

from __future__ import annotations

import logging
from typing import List

from lib.config import HostPaths, ProvisioningRequest, ServiceState, TUNNEL_SERVICE, WEB_SERVICE
from lib.display import print_client_config, print_log_hint, print_service_states, render_client_config
from lib.host_tools import HostTools

logger = logging.getLogger("tunnel_setup.verify")


def query_service_states(tools: HostTools) -> List[ServiceState]:
    return [
        ServiceState(name=name, active=tools.services.state(name) == "active")
        for name in (WEB_SERVICE, TUNNEL_SERVICE)
    ]


def verify_installation(request: ProvisioningRequest, paths: HostPaths, tools: HostTools) -> str:
    """Report service states and print the client snippet, which is returned.

    Read-only; an inactive service is reported, not raised.
    """
    logger.info("Installation Complete! Verifying services...")

    states = query_service_states(tools)
    print_service_states(states)
    for state in states:
        if not state.active:
            logger.warning(f"{state.name} is not active, check: systemctl status {state.name}")

    snippet = render_client_config(request)
    print_client_config(snippet)
    print_log_hint()
    return snippet
