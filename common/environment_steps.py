"""Pre-flight checks run before anything on the host is changed."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from lib.config import HostPaths, SUPPORTED_DISTRIBUTIONS
from lib.errors import AbortedByUserError, EnvironmentDetectionError, InsufficientPrivilegeError
from lib.host_tools import HostTools

logger = logging.getLogger("tunnel_setup.environment")

CONFIRM_PROMPT = "Press ENTER to continue anyway, or Ctrl+C to abort..."


def require_root(tools: HostTools) -> None:
    if not tools.system.is_root():
        raise InsufficientPrivilegeError(
            "Please run as root: sudo python3 setup_tunnel_server.py ..."
        )


def check_os(paths: HostPaths, tools: HostTools, prompt: Optional[Callable[[str], str]] = None) -> str:
    """Return the distribution ID, asking for confirmation if it is unsupported."""
    try:
        os_id = tools.system.os_id(paths.os_release)
    except OSError as e:
        raise EnvironmentDetectionError(
            f"Cannot detect OS. {paths.os_release} not readable: {e.strerror or e}"
        ) from e

    if os_id in SUPPORTED_DISTRIBUTIONS:
        logger.info(f"  ✓ OS: {os_id}")
        return os_id

    logger.warning(
        f"This script is optimized for Debian/Ubuntu. Your OS ({os_id or 'unknown'}) might not be supported."
    )
    ask = prompt or input
    try:
        ask(CONFIRM_PROMPT)
    except (EOFError, KeyboardInterrupt) as e:
        raise AbortedByUserError("Aborted on unsupported OS") from e
    return os_id


def check_environment(paths: HostPaths, tools: HostTools, prompt: Optional[Callable[[str], str]] = None) -> str:
    require_root(tools)
    return check_os(paths, tools, prompt)
