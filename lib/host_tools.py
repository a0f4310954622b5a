"""Narrow wrappers around the external tools the provisioning steps drive.

Each class exposes only what the steps need and returns the
``CompletedProcess`` of the underlying command; deciding whether a non-zero
exit is fatal is left to the step. Tests substitute in-memory fakes with the
same methods through :class:`HostTools`.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Iterable

from lib.config import (
    PUBLIC_IP_URL,
    TUNNEL_INSTALLER_URL,
    WEB_GROUP,
    WEB_USER,
)
from lib.command_utils import run
from lib.system_utils import get_public_ip, is_root, read_os_release

Runner = Callable[..., subprocess.CompletedProcess]


class AptPackageManager:
    def __init__(self, runner: Runner = run):
        self.run = runner

    def update(self) -> subprocess.CompletedProcess:
        os.environ["DEBIAN_FRONTEND"] = "noninteractive"
        return self.run("apt-get update -y")

    def install(self, packages: Iterable[str]) -> subprocess.CompletedProcess:
        os.environ["DEBIAN_FRONTEND"] = "noninteractive"
        names = " ".join(shlex.quote(p) for p in packages)
        return self.run(f"apt-get install -y {names}")


class SystemdServiceController:
    def __init__(self, runner: Runner = run):
        self.run = runner

    def enable_now(self, service: str) -> subprocess.CompletedProcess:
        return self.run(f"systemctl enable --now {shlex.quote(service)}")

    def restart(self, service: str) -> subprocess.CompletedProcess:
        return self.run(f"systemctl restart {shlex.quote(service)}")

    def reload(self, service: str) -> subprocess.CompletedProcess:
        return self.run(f"systemctl reload {shlex.quote(service)}")

    def state(self, service: str) -> str:
        """Return the ``systemctl is-active`` word (active, inactive, failed ...)."""
        result = self.run(f"systemctl is-active {shlex.quote(service)}",
                          check=False, capture_output=True)
        return (result.stdout or "").strip() or "unknown"


class NginxServer:
    def __init__(self, runner: Runner = run):
        self.run = runner

    def test_config(self) -> subprocess.CompletedProcess:
        return self.run("nginx -t", check=False, capture_output=True)

    def assign_web_owner(self, path: str) -> subprocess.CompletedProcess:
        return self.run(f"chown -R {WEB_USER}:{WEB_GROUP} {shlex.quote(path)}", check=False)


class CertbotClient:
    def __init__(self, runner: Runner = run):
        self.run = runner

    def issue(self, domain: str, email: str) -> subprocess.CompletedProcess:
        """Request a certificate through the nginx plugin with HTTPS redirect."""
        cmd_parts = [
            "certbot --nginx",
            f"-d {shlex.quote(domain)}",
            f"-m {shlex.quote(email)}",
            "--agree-tos",
            "--redirect",
            "--non-interactive",
            "--no-eff-email",
        ]
        return self.run(" ".join(cmd_parts), check=False)


class HysteriaBootstrap:
    def __init__(self, runner: Runner = run, url: str = TUNNEL_INSTALLER_URL):
        self.run = runner
        self.url = url

    def install(self) -> subprocess.CompletedProcess:
        # The upstream script expects to be fed through process substitution
        script = f"HYSTERIA_USER=root bash <(curl -fsSL {shlex.quote(self.url)})"
        return self.run(f"bash -c {shlex.quote(script)}", check=False)


class UfwFirewall:
    def __init__(self, runner: Runner = run):
        self.run = runner

    def allow(self, rule: str) -> subprocess.CompletedProcess:
        return self.run(f"ufw allow {shlex.quote(rule)}", check=False, capture_output=True)

    def is_active(self) -> bool:
        result = self.run("ufw status", check=False, capture_output=True)
        output = (result.stdout or "").lower()
        return "status: active" in output

    def enable(self) -> subprocess.CompletedProcess:
        return self.run("ufw --force enable", check=False, capture_output=True)


class SysctlTuner:
    def __init__(self, runner: Runner = run):
        self.run = runner

    def reload_all(self) -> subprocess.CompletedProcess:
        return self.run("sysctl --system", check=False, capture_output=True)


class SystemProbe:
    def __init__(self, public_ip_url: str = PUBLIC_IP_URL):
        self.public_ip_url = public_ip_url

    def is_root(self) -> bool:
        return is_root()

    def os_id(self, os_release_path: str) -> str:
        """Lower-cased ``ID`` from os-release; raises OSError if unreadable."""
        return read_os_release(os_release_path).get("ID", "").lower()

    def public_ip(self) -> str:
        return get_public_ip(self.public_ip_url)


@dataclass
class HostTools:
    """Every external capability a provisioning run needs."""
    packages: AptPackageManager = field(default_factory=AptPackageManager)
    services: SystemdServiceController = field(default_factory=SystemdServiceController)
    web: NginxServer = field(default_factory=NginxServer)
    certificates: CertbotClient = field(default_factory=CertbotClient)
    tunnel: HysteriaBootstrap = field(default_factory=HysteriaBootstrap)
    firewall: UfwFirewall = field(default_factory=UfwFirewall)
    kernel: SysctlTuner = field(default_factory=SysctlTuner)
    system: SystemProbe = field(default_factory=SystemProbe)
