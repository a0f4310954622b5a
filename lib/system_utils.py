#!/usr/bin/env python3

import os
import subprocess
from datetime import datetime
from typing import Dict, Optional

import pytz

from lib.command_utils import has_command, run
from lib.validators import validate_ip_address


def is_root() -> bool:
    return os.geteuid() == 0


def read_os_release(path: str = "/etc/os-release") -> Dict[str, str]:
    """Parse an os-release file into a dict of unquoted values.

    Raises OSError if the file cannot be read. Bytes that are not UTF-8 are
    replaced; the keys that matter are ASCII.
    """
    values: Dict[str, str] = {}
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key] = value.strip().strip('"').strip("'")
    return values


def get_local_timezone() -> str:
    if os.path.exists("/etc/timezone"):
        try:
            with open("/etc/timezone", "r") as f:
                tz = f.read().strip()
                if tz:
                    return tz
        except OSError:
            pass

    try:
        result = subprocess.run(
            ["timedatectl", "show", "-p", "Timezone", "--value"],
            capture_output=True, text=True, timeout=5
        )
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass

    if os.path.islink("/etc/localtime"):
        try:
            target = os.readlink("/etc/localtime")
            if "zoneinfo/" in target:
                tz = target.split("zoneinfo/", 1)[1]
                return tz
        except OSError:
            pass

    return "UTC"


def local_now(timezone: Optional[str] = None) -> datetime:
    """Current time in the host timezone, UTC if the zone is unknown to pytz."""
    try:
        tz = pytz.timezone(timezone or get_local_timezone())
    except pytz.UnknownTimeZoneError:
        tz = pytz.UTC
    return datetime.now(tz)


def get_public_ip(url: str) -> str:
    """Return the host's externally observed IPv4 address, or 'unknown'."""
    if not has_command("curl"):
        return "unknown"
    result = run(f"curl -4 -s --connect-timeout 10 {url}", check=False, capture_output=True)
    address = (result.stdout or "").strip()
    if result.returncode != 0 or not validate_ip_address(address):
        return "unknown"
    return address
