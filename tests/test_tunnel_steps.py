"""Tests for tunnel/tunnel_steps.py: installer and server configuration."""

from __future__ import annotations

import os
import stat
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fakes import make_tools
from lib.config import CertificateBundle, HostPaths, ProvisioningRequest
from lib.errors import CertificateMissingError, ServiceRestartError, TunnelInstallError
from tunnel.steps import build_tunnel_config, configure_tunnel, generate_tunnel_config, install_tunnel


REQUEST = ProvisioningRequest(domain="proxy.example.com", contact_email="admin@example.com",
                              shared_secret='pa"ss: #word')


class TunnelTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.paths = HostPaths.under(self._tmp.name)
        self.calls = []
        self.tools = make_tools(self.paths, self.calls)

    def tearDown(self):
        self._tmp.cleanup()

    def issue(self):
        self.tools.certificates.issue(REQUEST.domain, REQUEST.contact_email)
        del self.calls[:]


class TestInstallTunnel(TunnelTestCase):
    def test_success(self):
        install_tunnel(REQUEST, self.paths, self.tools)
        self.assertEqual(self.calls, [("tunnel", "install")])

    def test_failure(self):
        self.tools.tunnel.returncode = 1
        with self.assertRaises(TunnelInstallError) as ctx:
            install_tunnel(REQUEST, self.paths, self.tools)
        self.assertIn("Could not resolve host", str(ctx.exception))


class TestGenerateTunnelConfig(unittest.TestCase):
    def test_renders_all_sections(self):
        bundle = CertificateBundle.for_domain("proxy.example.com", HostPaths())
        text = generate_tunnel_config(build_tunnel_config(REQUEST, bundle))

        self.assertTrue(text.startswith("listen: :443\n"))
        self.assertIn("  cert: /etc/letsencrypt/live/proxy.example.com/fullchain.pem\n", text)
        self.assertIn("  key: /etc/letsencrypt/live/proxy.example.com/privkey.pem\n", text)
        self.assertIn("  type: password\n", text)
        self.assertIn('  password: "pa\\"ss: #word"\n', text)
        self.assertIn("    url: https://proxy.example.com/\n", text)
        self.assertIn("    rewriteHost: true\n", text)


class TestConfigureTunnel(TunnelTestCase):
    def test_writes_private_config_and_restarts(self):
        self.issue()
        config = configure_tunnel(REQUEST, self.paths, self.tools)

        self.assertEqual(config.secret, REQUEST.shared_secret)
        self.assertEqual(config.cert, CertificateBundle.for_domain(REQUEST.domain, self.paths))
        with open(self.paths.tunnel_config_file) as f:
            self.assertIn(config.cert.cert_path, f.read())
        mode = stat.S_IMODE(os.stat(self.paths.tunnel_config_file).st_mode)
        self.assertEqual(mode, 0o600)
        self.assertEqual(self.calls, [
            ("services", "enable_now", "hysteria-server.service"),
            ("services", "restart", "hysteria-server.service"),
        ])

    def test_missing_certificate_writes_nothing(self):
        with self.assertRaises(CertificateMissingError):
            configure_tunnel(REQUEST, self.paths, self.tools)
        self.assertFalse(os.path.exists(self.paths.tunnel_config_dir))
        self.assertEqual(self.calls, [])

    def test_missing_certificate_keeps_existing_config(self):
        os.makedirs(self.paths.tunnel_config_dir)
        with open(self.paths.tunnel_config_file, "w") as f:
            f.write("listen: :8443\n")

        with self.assertRaises(CertificateMissingError):
            configure_tunnel(REQUEST, self.paths, self.tools)
        with open(self.paths.tunnel_config_file) as f:
            self.assertEqual(f.read(), "listen: :8443\n")

    def test_restart_failure(self):
        self.issue()
        self.tools.services.failures[("restart", "hysteria-server.service")] = 1
        with self.assertRaises(ServiceRestartError):
            configure_tunnel(REQUEST, self.paths, self.tools)


if __name__ == '__main__':
    unittest.main()
