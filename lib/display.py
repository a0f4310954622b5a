#!/usr/bin/env python3

"""Display utilities for the final provisioning report."""

import json
from typing import List

from lib.config import (
    CLIENT_ALPN,
    CLIENT_NAME_PREFIX,
    CLIENT_PORT,
    CLIENT_TYPE,
    ProvisioningRequest,
    ServiceState,
    TUNNEL_SERVICE,
)


def render_client_config(request: ProvisioningRequest) -> str:
    """Render the proxies block a compatible client can consume directly."""
    alpn = ", ".join(CLIENT_ALPN)
    return f"""proxies:
  - name: "{CLIENT_NAME_PREFIX}-{request.domain}"
    type: {CLIENT_TYPE}
    server: {request.domain}
    port: {CLIENT_PORT}
    password: {json.dumps(request.shared_secret)}
    skip-cert-verify: false
    alpn: [{alpn}]
"""


def print_service_states(states: List[ServiceState]) -> None:
    print("-" * 48)
    for state in states:
        print(f" {state.name} Status: {'active' if state.active else 'inactive'}")
    print("-" * 48)


def print_client_config(snippet: str) -> None:
    print()
    print("========== Client Config Snippet ==========")
    print(snippet, end="")


def print_log_hint() -> None:
    print()
    print(f"Logs: journalctl -u {TUNNEL_SERVICE} -f")
