"""Shell command execution for provisioning steps."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from typing import Optional


logger = logging.getLogger("tunnel_setup.command")


def run(cmd: str, check: bool = True, cwd: Optional[str] = None, capture_output: bool = False, text: bool = True) -> subprocess.CompletedProcess[str]:
    """Run a shell command and return the completed process.

    Blocks until the command exits; no timeout is applied. A non-zero exit is
    never raised here: with ``check`` captured stderr is logged at debug level
    and the caller decides what the failure means.
    """
    logger.info(f"  Running: {cmd[:80]}..." if len(cmd) > 80 else f"  Running: {cmd}")
    sys.stdout.flush()

    result = subprocess.run(cmd, shell=True, capture_output=capture_output, text=text, cwd=cwd)
    if check and result.returncode != 0:
        if getattr(result, 'stderr', None):
            logger.debug(f"  Command stderr: {result.stderr[:200]}")
    return result


def has_command(name: str) -> bool:
    return shutil.which(name) is not None
