"""Hysteria tunnel service installation and configuration."""

from __future__ import annotations

import json
import logging
import os

from lib.config import (
    CertificateBundle,
    HostPaths,
    ProvisioningRequest,
    TUNNEL_LISTEN_ADDRESS,
    TUNNEL_SERVICE,
    TunnelConfig,
)
from lib.errors import ServiceRestartError, TunnelInstallError
from lib.host_tools import HostTools
from lib.logging_utils import describe_failure
from web.ssl_steps import require_certificate

logger = logging.getLogger("tunnel_setup.tunnel")


def install_tunnel(request: ProvisioningRequest, paths: HostPaths, tools: HostTools) -> None:
    """Fetch and run the upstream installer; always the latest release."""
    logger.info("Installing Hysteria...")
    result = tools.tunnel.install()
    if result.returncode != 0:
        raise TunnelInstallError(f"Hysteria installer failed: {describe_failure(result)}")
    logger.info("  ✓ Hysteria installed")


def build_tunnel_config(request: ProvisioningRequest, bundle: CertificateBundle) -> TunnelConfig:
    return TunnelConfig(
        listen_address=TUNNEL_LISTEN_ADDRESS,
        cert=bundle,
        secret=request.shared_secret,
        masquerade_target_url=f"https://{request.domain}/",
    )


def generate_tunnel_config(config: TunnelConfig) -> str:
    """Render config.yaml. UDP/443 belongs to the tunnel, nginx keeps TCP/443."""
    return f"""listen: {config.listen_address}

tls:
  cert: {config.cert.cert_path}
  key: {config.cert.key_path}

auth:
  type: password
  password: {json.dumps(config.secret)}

masquerade:
  type: proxy
  proxy:
    url: {config.masquerade_target_url}
    rewriteHost: true
"""


def configure_tunnel(request: ProvisioningRequest, paths: HostPaths, tools: HostTools) -> TunnelConfig:
    logger.info("Configuring Hysteria...")

    bundle = CertificateBundle.for_domain(request.domain, paths)
    require_certificate(bundle)

    config = build_tunnel_config(request, bundle)
    os.makedirs(paths.tunnel_config_dir, exist_ok=True)
    with open(paths.tunnel_config_file, "w") as f:
        f.write(generate_tunnel_config(config))
    os.chmod(paths.tunnel_config_file, 0o600)

    result = tools.services.enable_now(TUNNEL_SERVICE)
    if result.returncode != 0:
        raise ServiceRestartError(f"Could not enable {TUNNEL_SERVICE}: {describe_failure(result)}")

    result = tools.services.restart(TUNNEL_SERVICE)
    if result.returncode != 0:
        raise ServiceRestartError(f"Could not restart {TUNNEL_SERVICE}: {describe_failure(result)}")

    logger.info(f"  ✓ {TUNNEL_SERVICE} configured and restarted")
    return config
