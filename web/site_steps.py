"""Masquerade website and nginx virtual host."""

from __future__ import annotations

import logging
import os
import shutil
from typing import Optional

from lib.config import HostPaths, ProvisioningRequest, SiteDefinition, WEB_SERVICE
from lib.errors import ServiceRestartError, SiteConfigInvalidError
from lib.host_tools import HostTools
from lib.logging_utils import describe_failure
from lib.system_utils import local_now

logger = logging.getLogger("tunnel_setup.web")

BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H%M%S"


def generate_landing_page(domain: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Welcome to {domain}</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; background-color: #f0f2f5; color: #1c1e21; display: flex; justify-content: center; align-items: center; height: 100vh; margin: 0; }}
        .container {{ text-align: center; padding: 2rem; background: white; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }}
        h1 {{ margin-bottom: 0.5rem; }}
        p {{ color: #606770; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{domain}</h1>
        <p>Site is under construction.</p>
    </div>
</body>
</html>
"""


def generate_site_config(domain: str, webroot: str) -> str:
    """HTTP-only server block; certbot adds the TLS listener later."""
    return f"""server {{
    listen 80;
    server_name {domain};

    root {webroot};
    index index.html;

    location / {{
        try_files $uri $uri/ =404;
    }}
}}
"""


def backup_path_for(site_file: str, timestamp: str) -> str:
    """Timestamped backup name, numbered if one already exists for that second."""
    candidate = f"{site_file}.{timestamp}.bak"
    counter = 1
    while os.path.exists(candidate):
        candidate = f"{site_file}.{timestamp}.{counter}.bak"
        counter += 1
    return candidate


def backup_existing_site(site_file: str, timezone: Optional[str] = None) -> Optional[str]:
    if not os.path.exists(site_file):
        return None

    timestamp = local_now(timezone).strftime(BACKUP_TIMESTAMP_FORMAT)
    backup_file = backup_path_for(site_file, timestamp)
    shutil.copy2(site_file, backup_file)
    logger.warning(f"Existing nginx config found. Backed up to {backup_file}")
    return backup_file


def write_landing_page(domain: str, webroot: str) -> None:
    os.makedirs(webroot, exist_ok=True)
    with open(os.path.join(webroot, "index.html"), "w") as f:
        f.write(generate_landing_page(domain))


def enable_site(site_file: str, paths: HostPaths, domain: str) -> None:
    """Point sites-enabled at the new definition and drop the default site."""
    os.makedirs(paths.sites_enabled, exist_ok=True)
    link = paths.enabled_site_link(domain)
    if os.path.islink(link) or os.path.exists(link):
        os.remove(link)
    os.symlink(site_file, link)

    default_link = paths.default_site_link
    if os.path.islink(default_link) or os.path.exists(default_link):
        os.remove(default_link)


def validate_and_reload(tools: HostTools) -> None:
    """Run ``nginx -t`` and reload only if the configuration is accepted."""
    result = tools.web.test_config()
    if result.returncode != 0:
        raise SiteConfigInvalidError(
            f"nginx configuration test failed, reload skipped: {describe_failure(result)}"
        )

    result = tools.services.reload(WEB_SERVICE)
    if result.returncode != 0:
        raise ServiceRestartError(f"Could not reload {WEB_SERVICE}: {describe_failure(result)}")


def configure_site(request: ProvisioningRequest, paths: HostPaths, tools: HostTools) -> SiteDefinition:
    domain = request.domain
    logger.info(f"Configuring nginx site for {domain}...")

    webroot = paths.webroot(domain)
    write_landing_page(domain, webroot)
    tools.web.assign_web_owner(webroot)

    site_file = paths.virtual_host_file(domain)
    os.makedirs(paths.sites_available, exist_ok=True)
    backup_file = backup_existing_site(site_file)

    with open(site_file, "w") as f:
        f.write(generate_site_config(domain, webroot))

    enable_site(site_file, paths, domain)
    validate_and_reload(tools)

    logger.info(f"  ✓ Site {domain} served from {webroot}")
    return SiteDefinition(webroot=webroot, virtual_host_file=site_file, backup_file=backup_file)
