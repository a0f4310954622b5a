"""Fatal provisioning errors.

Every exception here aborts the whole run. Steps raise them; the orchestrator
turns them into a failed step result and stops.
"""

from __future__ import annotations


class ProvisioningError(Exception):
    """Base class for all unrecoverable provisioning failures."""


class InvalidInputError(ProvisioningError):
    """The provisioning request failed validation (bad domain format)."""


class InsufficientPrivilegeError(ProvisioningError, PermissionError):
    """The process is not running with super-user privilege."""


class EnvironmentDetectionError(ProvisioningError):
    """The OS identity could not be read."""


class AbortedByUserError(ProvisioningError):
    """The operator declined to continue on an unsupported OS."""


class DependencyInstallError(ProvisioningError):
    """The package manager returned a non-zero exit code."""


class SiteConfigInvalidError(ProvisioningError):
    """nginx rejected the generated configuration."""


class CertificateIssuanceError(ProvisioningError):
    """certbot failed to issue a certificate."""


class TunnelInstallError(ProvisioningError):
    """The tunnel bootstrap installer failed."""


class CertificateMissingError(ProvisioningError):
    """Certificate or private key is absent where it is expected."""


class ServiceRestartError(ProvisioningError):
    """A systemd unit could not be enabled, restarted or reloaded."""
