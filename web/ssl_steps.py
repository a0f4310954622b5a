"""Let's Encrypt certificate issuance through certbot's nginx plugin."""

from __future__ import annotations

import logging

from lib.config import CertificateBundle, HostPaths, ProvisioningRequest
from lib.errors import CertificateIssuanceError, CertificateMissingError
from lib.host_tools import HostTools
from web.site_steps import validate_and_reload

logger = logging.getLogger("tunnel_setup.web")


def require_certificate(bundle: CertificateBundle) -> None:
    missing = bundle.missing_files()
    if missing:
        raise CertificateMissingError(f"Certificate material not found: {', '.join(missing)}")


def issue_certificate(request: ProvisioningRequest, paths: HostPaths, tools: HostTools) -> CertificateBundle:
    """Issue a certificate for the site, single attempt.

    certbot rewrites the virtual host to redirect to HTTPS, so the nginx
    configuration is validated and reloaded again afterwards.
    """
    logger.info("Issuing SSL certificate via Certbot...")

    result = tools.certificates.issue(request.domain, request.contact_email)
    if result.returncode != 0:
        public_ip = tools.system.public_ip()
        raise CertificateIssuanceError(
            "Certbot failed. Check your DNS and firewall settings. "
            f"Ensure {request.domain} points to this host's IP: {public_ip}"
        )

    bundle = CertificateBundle.for_domain(request.domain, paths)
    require_certificate(bundle)

    validate_and_reload(tools)

    logger.info(f"  ✓ Certificate issued: {bundle.cert_path}")
    return bundle
