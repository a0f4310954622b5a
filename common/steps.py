"""Common setup steps."""

from __future__ import annotations

from .environment_steps import check_environment, check_os, require_root
from .package_steps import install_dependencies
from .verify_steps import query_service_states, verify_installation

__all__ = [
    'check_environment',
    'check_os',
    'require_root',
    'install_dependencies',
    'query_service_states',
    'verify_installation',
]
