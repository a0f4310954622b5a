"""Tests for web/site_steps.py: landing page, virtual host, backups and reload."""

from __future__ import annotations

import os
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fakes import make_tools
from lib.config import HostPaths, ProvisioningRequest
from lib.errors import ServiceRestartError, SiteConfigInvalidError
from web.site_steps import backup_path_for, generate_landing_page, generate_site_config
from web.steps import configure_site


REQUEST = ProvisioningRequest(domain="proxy.example.com", contact_email="admin@example.com",
                              shared_secret="pw")


class TestTemplates(unittest.TestCase):
    def test_landing_page_mentions_domain(self):
        html = generate_landing_page("proxy.example.com")
        self.assertIn("<title>Welcome to proxy.example.com</title>", html)
        self.assertIn("<h1>proxy.example.com</h1>", html)

    def test_site_config(self):
        conf = generate_site_config("proxy.example.com", "/var/www/proxy.example.com")
        self.assertIn("listen 80;", conf)
        self.assertIn("server_name proxy.example.com;", conf)
        self.assertIn("root /var/www/proxy.example.com;", conf)
        self.assertIn("try_files $uri $uri/ =404;", conf)
        self.assertNotIn("443", conf)


class TestBackupPathFor(unittest.TestCase):
    def test_numbers_collisions(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            site = os.path.join(tmpdir, "site")
            first = backup_path_for(site, "2024-01-01_120000")
            self.assertEqual(first, f"{site}.2024-01-01_120000.bak")
            open(first, "w").close()
            self.assertEqual(backup_path_for(site, "2024-01-01_120000"), f"{site}.2024-01-01_120000.1.bak")


class TestConfigureSite(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.paths = HostPaths.under(self._tmp.name)
        self.calls = []
        self.tools = make_tools(self.paths, self.calls)

    def tearDown(self):
        self._tmp.cleanup()

    def test_writes_site_and_enables_it(self):
        os.makedirs(self.paths.sites_enabled)
        os.symlink("/nonexistent/default", self.paths.default_site_link)

        site = configure_site(REQUEST, self.paths, self.tools)

        self.assertEqual(site.webroot, self.paths.webroot("proxy.example.com"))
        self.assertIsNone(site.backup_file)
        self.assertTrue(os.path.isfile(os.path.join(site.webroot, "index.html")))
        with open(site.virtual_host_file) as f:
            self.assertIn("server_name proxy.example.com;", f.read())

        link = self.paths.enabled_site_link("proxy.example.com")
        self.assertEqual(os.readlink(link), site.virtual_host_file)
        self.assertFalse(os.path.lexists(self.paths.default_site_link))

        self.assertEqual(self.calls, [
            ("web", "assign_web_owner", site.webroot),
            ("web", "test_config"),
            ("services", "reload", "nginx"),
        ])

    def test_rerun_backs_up_previous_definition(self):
        configure_site(REQUEST, self.paths, self.tools)
        site_file = self.paths.virtual_host_file("proxy.example.com")
        with open(site_file, "a") as f:
            f.write("# hand edit\n")
        with open(site_file) as f:
            previous = f.read()

        with self.assertLogs("tunnel_setup.web", level="WARNING"):
            site = configure_site(REQUEST, self.paths, self.tools)

        backups = [n for n in os.listdir(self.paths.sites_available) if n.endswith(".bak")]
        self.assertEqual(len(backups), 1)
        self.assertEqual(site.backup_file, os.path.join(self.paths.sites_available, backups[0]))
        with open(site.backup_file) as f:
            self.assertEqual(f.read(), previous)
        with open(site_file) as f:
            self.assertNotIn("# hand edit", f.read())

    @patch("web.site_steps.local_now")
    def test_backup_name_uses_local_time(self, mock_now):
        mock_now.return_value.strftime.return_value = "2024-05-06_070809"
        configure_site(REQUEST, self.paths, self.tools)
        site = configure_site(REQUEST, self.paths, self.tools)
        self.assertTrue(site.backup_file.endswith("proxy.example.com.2024-05-06_070809.bak"))

    def test_rejected_config_is_not_reloaded(self):
        self.tools.web.test_rc = 1
        with self.assertRaises(SiteConfigInvalidError) as ctx:
            configure_site(REQUEST, self.paths, self.tools)
        self.assertIn("[emerg]", str(ctx.exception))
        self.assertNotIn(("services", "reload", "nginx"), self.calls)

    def test_reload_failure(self):
        self.tools.services.failures[("reload", "nginx")] = 1
        with self.assertRaises(ServiceRestartError):
            configure_site(REQUEST, self.paths, self.tools)


if __name__ == '__main__':
    unittest.main()
