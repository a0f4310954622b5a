"""Fixed-order provisioning run with fail-fast abort.

The run is a linear state sequence::

    INIT -> GUARDED -> RESOLVED -> PACKAGES_READY -> SITE_READY -> CERT_ISSUED
         -> TUNNEL_INSTALLED -> TUNNEL_CONFIGURED -> TUNED -> FIREWALLED -> VERIFIED

Every transition is one step function. A step that raises a
``ProvisioningError`` (or fails on the filesystem) yields a failed
``StepResult``; the run stops there in ``ABORTED`` with nothing undone.
``TUNED`` and ``FIREWALLED`` are skipped when the request asks for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from lib.config import HostPaths, ProvisioningRequest, RequestInput
from lib.errors import ProvisioningError
from lib.host_tools import HostTools
from lib.progress import step_header
from lib.request_resolver import Prompt, resolve_request

from common.steps import check_environment, install_dependencies, verify_installation
from web.steps import configure_site, issue_certificate
from tunnel.steps import install_tunnel, configure_tunnel
from security.steps import tune_sysctl, configure_firewall

logger = logging.getLogger("tunnel_setup")


class ProvisioningState(Enum):
    INIT = "init"
    GUARDED = "guarded"
    RESOLVED = "resolved"
    PACKAGES_READY = "packages_ready"
    SITE_READY = "site_ready"
    CERT_ISSUED = "cert_issued"
    TUNNEL_INSTALLED = "tunnel_installed"
    TUNNEL_CONFIGURED = "tunnel_configured"
    TUNED = "tuned"
    FIREWALLED = "firewalled"
    VERIFIED = "verified"
    ABORTED = "aborted"


ProvisioningStep = Callable[[ProvisioningRequest, HostPaths, HostTools], Any]

PROVISIONING_STEPS: list[tuple[str, ProvisioningState, ProvisioningStep]] = [
    ("Installing dependencies", ProvisioningState.PACKAGES_READY, install_dependencies),
    ("Configuring nginx site", ProvisioningState.SITE_READY, configure_site),
    ("Issuing TLS certificate", ProvisioningState.CERT_ISSUED, issue_certificate),
    ("Installing Hysteria", ProvisioningState.TUNNEL_INSTALLED, install_tunnel),
    ("Configuring Hysteria", ProvisioningState.TUNNEL_CONFIGURED, configure_tunnel),
    ("Tuning kernel parameters", ProvisioningState.TUNED, tune_sysctl),
    ("Configuring firewall", ProvisioningState.FIREWALLED, configure_firewall),
    ("Verifying installation", ProvisioningState.VERIFIED, verify_installation),
]

PREFLIGHT_STEP_COUNT = 2


@dataclass
class StepResult:
    name: str
    target: ProvisioningState
    ok: bool
    skipped: bool = False
    value: Any = None
    error: Optional[Exception] = None


@dataclass
class RunResult:
    state: ProvisioningState = ProvisioningState.INIT
    history: list[ProvisioningState] = field(default_factory=lambda: [ProvisioningState.INIT])
    steps: list[StepResult] = field(default_factory=list)
    request: Optional[ProvisioningRequest] = None
    failed_step: Optional[str] = None
    error: Optional[Exception] = None
    client_config: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is ProvisioningState.VERIFIED

    def artifact(self, target: ProvisioningState) -> Any:
        """Value returned by the step that reached ``target``, if any."""
        for step in self.steps:
            if step.target is target and step.ok and not step.skipped:
                return step.value
        return None


def is_skipped(target: ProvisioningState, request: ProvisioningRequest) -> bool:
    if target is ProvisioningState.TUNED:
        return request.skip_sysctl_tuning
    if target is ProvisioningState.FIREWALLED:
        return request.skip_firewall
    return False


SKIP_MESSAGES = {
    ProvisioningState.TUNED: "Skipping sysctl tuning.",
    ProvisioningState.FIREWALLED: "Skipping UFW setup.",
}


class Orchestrator:
    """Owns the step order; the only place that sequences the run."""

    def __init__(
        self,
        tools: Optional[HostTools] = None,
        paths: Optional[HostPaths] = None,
        prompt: Optional[Prompt] = None
    ):
        self.tools = tools or HostTools()
        self.paths = paths or HostPaths()
        self.prompt = prompt
        self.total_steps = PREFLIGHT_STEP_COUNT + len(PROVISIONING_STEPS)

    def _attempt(self, result: RunResult, index: int, name: str,
                 target: ProvisioningState, func: Callable[[], Any]) -> StepResult:
        logger.info(step_header(index, self.total_steps, name))
        try:
            value = func()
        except (ProvisioningError, OSError) as e:
            step = StepResult(name=name, target=target, ok=False, error=e)
            result.steps.append(step)
            result.state = ProvisioningState.ABORTED
            result.history.append(ProvisioningState.ABORTED)
            result.failed_step = name
            result.error = e
            logger.error(f"{name} failed: {e}")
            return step

        step = StepResult(name=name, target=target, ok=True, value=value)
        result.steps.append(step)
        result.state = target
        result.history.append(target)
        return step

    def run(self, collected: RequestInput) -> RunResult:
        result = RunResult()

        step = self._attempt(result, 1, "Checking environment", ProvisioningState.GUARDED,
                             lambda: check_environment(self.paths, self.tools, self.prompt))
        if not step.ok:
            return result

        step = self._attempt(result, 2, "Resolving request", ProvisioningState.RESOLVED,
                             lambda: resolve_request(collected, self.prompt))
        if not step.ok:
            return result
        request: ProvisioningRequest = step.value
        result.request = request

        for index, (name, target, func) in enumerate(PROVISIONING_STEPS, PREFLIGHT_STEP_COUNT + 1):
            if is_skipped(target, request):
                logger.info(step_header(index, self.total_steps, name))
                logger.warning(SKIP_MESSAGES[target])
                result.steps.append(StepResult(name=name, target=target, ok=True, skipped=True))
                continue

            step = self._attempt(result, index, name, target,
                                 lambda func=func: func(request, self.paths, self.tools))
            if not step.ok:
                return result

        result.client_config = result.artifact(ProvisioningState.VERIFIED)
        return result
