"""Tunnel service steps."""

from __future__ import annotations

from .tunnel_steps import (
    build_tunnel_config,
    configure_tunnel,
    generate_tunnel_config,
    install_tunnel,
)

__all__ = [
    'build_tunnel_config',
    'configure_tunnel',
    'generate_tunnel_config',
    'install_tunnel',
]
