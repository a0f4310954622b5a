"""Kernel buffer tuning for UDP transport."""

from __future__ import annotations

import logging
import os

from lib.config import HostPaths, ProvisioningRequest, SYSCTL_TUNABLES
from lib.host_tools import HostTools
from lib.logging_utils import log_subprocess_result

logger = logging.getLogger("tunnel_setup.security")


def generate_sysctl_config() -> str:
    return "".join(f"{key}={value}\n" for key, value in SYSCTL_TUNABLES)


def tune_sysctl(request: ProvisioningRequest, paths: HostPaths, tools: HostTools) -> None:
    """Write fixed UDP buffer limits and reapply every sysctl file.

    A failed reload leaves the file in place for the next boot.
    """
    logger.info("Applying UDP buffer tuning...")

    os.makedirs(paths.sysctl_dir, exist_ok=True)
    with open(paths.sysctl_file, "w") as f:
        f.write(generate_sysctl_config())

    result = tools.kernel.reload_all()
    log_subprocess_result(logger, "Reloading kernel parameters", result)
