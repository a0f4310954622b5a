"""In-memory stand-ins for the host capabilities used by provisioning steps.

Every fake appends ``(capability, action, *args)`` to a shared ``calls`` list
so tests can assert on order and absence of side effects.
"""

from __future__ import annotations

import os
import subprocess
from typing import Optional

from lib.config import CertificateBundle, HostPaths
from lib.host_tools import HostTools
from lib.system_utils import read_os_release


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["fake"], returncode=returncode, stdout=stdout, stderr=stderr)


class _Recorder:
    name = "fake"

    def __init__(self, calls: list):
        self.calls = calls

    def _record(self, action: str, *args) -> None:
        self.calls.append((self.name, action) + args)


class FakePackageManager(_Recorder):
    name = "packages"

    def __init__(self, calls: list, update_rc: int = 0, install_rc: int = 0):
        super().__init__(calls)
        self.update_rc = update_rc
        self.install_rc = install_rc

    def update(self):
        self._record("update")
        return completed(self.update_rc, stderr="E: update failed" if self.update_rc else "")

    def install(self, packages):
        self._record("install", tuple(packages))
        return completed(self.install_rc, stderr="E: Unable to locate package" if self.install_rc else "")


class FakeServiceController(_Recorder):
    name = "services"

    def __init__(self, calls: list):
        super().__init__(calls)
        self.failures: dict = {}
        self.states: dict = {}

    def _result(self, action: str, service: str):
        self._record(action, service)
        return completed(self.failures.get((action, service), 0), stderr=f"{action} {service} failed")

    def enable_now(self, service):
        return self._result("enable_now", service)

    def restart(self, service):
        return self._result("restart", service)

    def reload(self, service):
        return self._result("reload", service)

    def state(self, service):
        self._record("state", service)
        return self.states.get(service, "active")


class FakeNginx(_Recorder):
    name = "web"

    def __init__(self, calls: list, test_rc: int = 0):
        super().__init__(calls)
        self.test_rc = test_rc

    def test_config(self):
        self._record("test_config")
        return completed(self.test_rc, stderr="nginx: [emerg] unexpected \"}\"" if self.test_rc else "")

    def assign_web_owner(self, path):
        self._record("assign_web_owner", path)
        return completed()


class FakeCertbot(_Recorder):
    """Writes the certificate pair where certbot would, unless told not to."""
    name = "certificates"

    def __init__(self, calls: list, paths: HostPaths, returncode: int = 0, write_files: bool = True):
        super().__init__(calls)
        self.paths = paths
        self.returncode = returncode
        self.write_files = write_files

    def issue(self, domain, email):
        self._record("issue", domain, email)
        if self.returncode == 0 and self.write_files:
            bundle = CertificateBundle.for_domain(domain, self.paths)
            os.makedirs(os.path.dirname(bundle.cert_path), exist_ok=True)
            for path in (bundle.cert_path, bundle.key_path):
                with open(path, "w") as f:
                    f.write("-----BEGIN FAKE-----\n")
        return completed(self.returncode)


class FakeTunnelBootstrap(_Recorder):
    name = "tunnel"

    def __init__(self, calls: list, returncode: int = 0):
        super().__init__(calls)
        self.returncode = returncode

    def install(self):
        self._record("install")
        return completed(self.returncode, stderr="curl: (6) Could not resolve host" if self.returncode else "")


class FakeFirewall(_Recorder):
    name = "firewall"

    def __init__(self, calls: list, active: bool = False, allow_rc: int = 0, enable_rc: int = 0):
        super().__init__(calls)
        self.active = active
        self.allow_rc = allow_rc
        self.enable_rc = enable_rc
        self.rules: list = []

    def allow(self, rule):
        self._record("allow", rule)
        if self.allow_rc == 0 and rule not in self.rules:
            self.rules.append(rule)
        return completed(self.allow_rc)

    def is_active(self):
        self._record("is_active")
        return self.active

    def enable(self):
        self._record("enable")
        if self.enable_rc == 0:
            self.active = True
        return completed(self.enable_rc, stderr="ERROR: problem running iptables" if self.enable_rc else "")


class FakeKernel(_Recorder):
    name = "kernel"

    def __init__(self, calls: list, returncode: int = 0):
        super().__init__(calls)
        self.returncode = returncode

    def reload_all(self):
        self._record("reload_all")
        return completed(self.returncode, stderr="sysctl: permission denied" if self.returncode else "")


class FakeSystemProbe(_Recorder):
    name = "system"

    def __init__(self, calls: list, root: bool = True, public_ip: str = "203.0.113.7"):
        super().__init__(calls)
        self.root = root
        self.ip = public_ip

    def is_root(self):
        self._record("is_root")
        return self.root

    def os_id(self, os_release_path):
        self._record("os_id", os_release_path)
        return read_os_release(os_release_path).get("ID", "").lower()

    def public_ip(self):
        self._record("public_ip")
        return self.ip


def write_os_release(paths: HostPaths, os_id: Optional[str] = "ubuntu") -> None:
    os.makedirs(os.path.dirname(paths.os_release), exist_ok=True)
    with open(paths.os_release, "w") as f:
        f.write('NAME="Test Linux"\n')
        f.write(f'ID={os_id}\n')


def make_tools(paths: HostPaths, calls: Optional[list] = None) -> HostTools:
    calls = [] if calls is None else calls
    return HostTools(
        packages=FakePackageManager(calls),
        services=FakeServiceController(calls),
        web=FakeNginx(calls),
        certificates=FakeCertbot(calls, paths),
        tunnel=FakeTunnelBootstrap(calls),
        firewall=FakeFirewall(calls),
        kernel=FakeKernel(calls),
        system=FakeSystemProbe(calls),
    )
