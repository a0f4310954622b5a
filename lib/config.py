#!/usr/bin/env python3

import os
from dataclasses import dataclass, field
from typing import Optional, List


REQUIRED_PACKAGES = [
    "curl",
    "ca-certificates",
    "gnupg",
    "lsb-release",
    "nginx",
    "certbot",
    "python3-certbot-nginx",
    "ufw",
]

SUPPORTED_DISTRIBUTIONS = ["ubuntu", "debian"]

WEB_SERVICE = "nginx"
WEB_USER = "www-data"
WEB_GROUP = "www-data"
TUNNEL_SERVICE = "hysteria-server.service"
TUNNEL_INSTALLER_URL = "https://get.hy2.sh/"
TUNNEL_LISTEN_ADDRESS = ":443"

CLIENT_TYPE = "hysteria2"
CLIENT_NAME_PREFIX = "hy2"
CLIENT_PORT = 443
CLIENT_ALPN = ["h3"]

SYSCTL_FILE_NAME = "99-hysteria.conf"
SYSCTL_TUNABLES = [
    ("net.core.rmem_max", 16777216),
    ("net.core.wmem_max", 16777216),
]

FIREWALL_RULES = [
    ("22/tcp", "SSH"),
    ("80/tcp", "HTTP"),
    ("443/tcp", "HTTPS"),
    ("443/udp", "tunnel (QUIC)"),
]

PUBLIC_IP_URL = "https://ifconfig.me"


@dataclass
class HostPaths:
    """Host filesystem locations touched during provisioning."""
    web_root_base: str = "/var/www"
    sites_available: str = "/etc/nginx/sites-available"
    sites_enabled: str = "/etc/nginx/sites-enabled"
    letsencrypt_live: str = "/etc/letsencrypt/live"
    tunnel_config_dir: str = "/etc/hysteria"
    sysctl_dir: str = "/etc/sysctl.d"
    os_release: str = "/etc/os-release"

    @classmethod
    def under(cls, root: str) -> 'HostPaths':
        """Return the default layout re-rooted below another directory."""
        defaults = cls()
        return cls(**{
            name: os.path.join(root, value.lstrip("/"))
            for name, value in vars(defaults).items()
        })

    def webroot(self, domain: str) -> str:
        return os.path.join(self.web_root_base, domain)

    def virtual_host_file(self, domain: str) -> str:
        return os.path.join(self.sites_available, domain)

    def enabled_site_link(self, domain: str) -> str:
        return os.path.join(self.sites_enabled, domain)

    @property
    def default_site_link(self) -> str:
        return os.path.join(self.sites_enabled, "default")

    @property
    def tunnel_config_file(self) -> str:
        return os.path.join(self.tunnel_config_dir, "config.yaml")

    @property
    def sysctl_file(self) -> str:
        return os.path.join(self.sysctl_dir, SYSCTL_FILE_NAME)


@dataclass(frozen=True)
class ProvisioningRequest:
    domain: str
    contact_email: str
    shared_secret: str = field(repr=False)
    skip_firewall: bool = False
    skip_sysctl_tuning: bool = False


@dataclass
class RequestInput:
    """Request fields as collected, before validation."""
    domain: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    skip_firewall: bool = False
    skip_sysctl: bool = False


@dataclass(frozen=True)
class SiteDefinition:
    webroot: str
    virtual_host_file: str
    backup_file: Optional[str] = None


@dataclass(frozen=True)
class CertificateBundle:
    cert_path: str
    key_path: str

    @classmethod
    def for_domain(cls, domain: str, paths: HostPaths) -> 'CertificateBundle':
        live_dir = os.path.join(paths.letsencrypt_live, domain)
        return cls(
            cert_path=os.path.join(live_dir, "fullchain.pem"),
            key_path=os.path.join(live_dir, "privkey.pem"),
        )

    def missing_files(self) -> List[str]:
        return [p for p in (self.cert_path, self.key_path) if not os.path.isfile(p)]


@dataclass(frozen=True)
class TunnelConfig:
    listen_address: str
    cert: CertificateBundle
    secret: str = field(repr=False)
    masquerade_target_url: str = ""


@dataclass(frozen=True)
class ServiceState:
    name: str
    active: bool
