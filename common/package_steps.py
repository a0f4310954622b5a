"""Host package installation."""

from __future__ import annotations

import logging

from lib.config import HostPaths, ProvisioningRequest, REQUIRED_PACKAGES, WEB_SERVICE
from lib.errors import DependencyInstallError, ServiceRestartError
from lib.host_tools import HostTools
from lib.logging_utils import describe_failure

logger = logging.getLogger("tunnel_setup.packages")


def install_dependencies(request: ProvisioningRequest, paths: HostPaths, tools: HostTools) -> None:
    logger.info("Updating system and installing dependencies...")

    result = tools.packages.update()
    if result.returncode != 0:
        raise DependencyInstallError(f"apt-get update failed: {describe_failure(result)}")

    result = tools.packages.install(REQUIRED_PACKAGES)
    if result.returncode != 0:
        raise DependencyInstallError(
            f"Installing {' '.join(REQUIRED_PACKAGES)} failed: {describe_failure(result)}"
        )

    result = tools.services.enable_now(WEB_SERVICE)
    if result.returncode != 0:
        raise ServiceRestartError(f"Could not enable {WEB_SERVICE}: {describe_failure(result)}")

    logger.info(f"  ✓ Dependencies installed, {WEB_SERVICE} running")
