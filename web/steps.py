"""Web server setup steps."""

from __future__ import annotations

from .site_steps import (
    configure_site,
    generate_landing_page,
    generate_site_config,
    validate_and_reload,
)

from .ssl_steps import issue_certificate, require_certificate

__all__ = [
    'configure_site',
    'generate_landing_page',
    'generate_site_config',
    'validate_and_reload',
    'issue_certificate',
    'require_certificate',
]
