"""Security hardening steps."""

from __future__ import annotations

from .firewall_steps import configure_firewall
from .sysctl_steps import generate_sysctl_config, tune_sysctl

__all__ = [
    'configure_firewall',
    'generate_sysctl_config',
    'tune_sysctl',
]
