"""
Unit tests for the systemd, OpenRC and SysV init managers
"""

import os
import tempfile
import unittest
from pathlib import Path

from svcctl.errors import CommandTimeoutError, ServiceError
from svcctl.service.base import ServiceConfig, StatusKind, is_safe_name
from svcctl.service.handler import ServiceHandler
from svcctl.service.openrc import OpenRCManager
from svcctl.service.systemd import SystemdManager
from svcctl.service.sysvinit import SysVInitManager
from tests.helpers import FakeExecutor, exited


class TestSystemdManager(unittest.TestCase):
    """Test SystemdManager"""

    def setUp(self):
        self.executor = FakeExecutor()
        self.manager = SystemdManager(executor=self.executor, privileged=True)
        self.docker = ServiceConfig.for_manager("systemd", "docker.service")

    def test_build_command(self):
        self.assertEqual(
            self.manager.build_command("start", self.docker),
            ["systemctl", "start", "docker.service"],
        )

    def test_build_command_elevates_when_unprivileged(self):
        """Non-root callers get the elevation tool prefixed"""
        manager = SystemdManager(executor=self.executor, privileged=False)
        self.assertEqual(
            manager.build_command("restart", self.docker),
            ["sudo", "systemctl", "restart", "docker.service"],
        )
        manager = SystemdManager(executor=self.executor, privileged=False, elevate_with="doas")
        self.assertEqual(manager.base_command(), ["doas", "systemctl"])

    def test_parse_active(self):
        running = "* docker.service - Docker\n     Active: active (running) since Tue\n"
        dead = "* docker.service - Docker\n     Active: inactive (dead)\n"
        missing = "Unit nope.service could not be found.\n"
        self.assertTrue(self.manager.parse_status(running, self.docker, StatusKind.ACTIVE))
        self.assertFalse(self.manager.parse_status(dead, self.docker, StatusKind.ACTIVE))
        self.assertFalse(self.manager.parse_status(missing, self.docker, StatusKind.ACTIVE))
        self.assertFalse(self.manager.parse_status("", self.docker, StatusKind.ACTIVE))

    def test_parse_enabled(self):
        """Only a bare "enabled" counts as enabled"""
        self.assertTrue(self.manager.parse_status("enabled\n", self.docker, StatusKind.ENABLED))
        self.assertFalse(self.manager.parse_status("disabled\n", self.docker, StatusKind.ENABLED))
        self.assertFalse(self.manager.parse_status("enabled-runtime\n", self.docker, StatusKind.ENABLED))
        self.assertFalse(self.manager.parse_status("masked\n", self.docker, StatusKind.ENABLED))

    def test_exists(self):
        self.executor.responses = {
            ("systemctl", "list-unit-files", "docker.service"): "docker.service enabled enabled\n",
            ("systemctl", "list-unit-files", "nope.service"): exited(
                ["systemctl", "list-unit-files", "nope.service"], "0 unit files listed."
            ),
        }
        self.assertTrue(self.manager.service_exists(self.docker))
        self.assertFalse(
            self.manager.service_exists(ServiceConfig.for_manager("systemd", "nope.service"))
        )

    def test_exists_without_name(self):
        """A config with no name for this manager never probes"""
        self.assertFalse(self.manager.service_exists(ServiceConfig.for_manager("openrc", "docker")))
        self.assertEqual(self.executor.calls, [])

    def test_find_services_keeps_listing_order(self):
        self.executor.responses = {
            ("systemctl", "list-unit-files", "--type=service", "--no-legend"): (
                "nginx-debug.service disabled enabled\n"
                "ssh.service enabled enabled\n"
                "nginx.service enabled enabled\n"
            ),
        }
        self.assertEqual(
            self.manager.find_services("nginx"),
            ["nginx-debug.service", "nginx.service"],
        )


class TestOpenRCManager(unittest.TestCase):
    """Test OpenRCManager"""

    def setUp(self):
        self.executor = FakeExecutor({
            ("rc-service", "-l"): "sshd\nnginx\nnginx-debug\n",
        })
        self.manager = OpenRCManager(executor=self.executor, privileged=True)
        self.sshd = ServiceConfig.for_manager("openrc", "sshd")

    def test_build_command(self):
        self.assertEqual(self.manager.build_command("start", self.sshd), ["rc-service", "sshd", "start"])
        self.assertEqual(self.manager.build_command("is-active", self.sshd), ["rc-service", "sshd", "status"])
        self.assertEqual(self.manager.build_command("is-enabled", self.sshd), ["rc-update", "check", "sshd"])

    def test_parse_status(self):
        self.assertTrue(self.manager.parse_status(" * status: started\n", self.sshd, StatusKind.ACTIVE))
        self.assertFalse(self.manager.parse_status(" * status: stopped\n", self.sshd, StatusKind.ACTIVE))
        self.assertTrue(self.manager.parse_status(" sshd | default\n", self.sshd, StatusKind.ENABLED))
        self.assertFalse(self.manager.parse_status("", self.sshd, StatusKind.ENABLED))

    def test_exists_matches_whole_lines(self):
        """A prefix of an installed script is not itself installed"""
        self.assertTrue(self.manager.service_exists(ServiceConfig.for_manager("openrc", "nginx")))
        self.assertFalse(self.manager.service_exists(ServiceConfig.for_manager("openrc", "ngin")))

    def test_find_services(self):
        self.assertEqual(self.manager.find_services("nginx"), ["nginx", "nginx-debug"])


class TestSysVInitManager(unittest.TestCase):
    """Test SysVInitManager"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.init_dir = Path(self.tmp.name)
        for name in ("ssh", "nginx", "cron"):
            (self.init_dir / name).write_text("#!/bin/sh\n")
        self.executor = FakeExecutor()
        self.manager = SysVInitManager(executor=self.executor, privileged=True, init_dir=self.init_dir)
        self.ssh = ServiceConfig.for_manager("sysvinit", "ssh")

    def test_build_command(self):
        self.assertEqual(self.manager.build_command("restart", self.ssh), ["service", "ssh", "restart"])

    def test_synthesized_probes(self):
        """is-enabled and is-active become shell snippets"""
        enabled = self.manager.build_command("is-enabled", self.ssh)
        self.assertEqual(enabled[:2], ["sh", "-c"])
        self.assertIn("/etc/rc*.d/S*ssh", enabled[2])
        active = self.manager.build_command("is-active", self.ssh)
        self.assertIn("service ssh status", active[2])

    def test_probe_names_are_quoted(self):
        config = ServiceConfig.for_manager("sysvinit", "x; rm -rf /")
        argv = self.manager.build_command("is-active", config)
        self.assertIn("'x; rm -rf /'", argv[2])

    def test_parse_status(self):
        self.assertTrue(self.manager.parse_status("[ ok ] sshd is running.", self.ssh, StatusKind.ACTIVE))
        self.assertTrue(self.manager.parse_status("active\n", self.ssh, StatusKind.ACTIVE))
        self.assertFalse(self.manager.parse_status("sshd is not running", self.ssh, StatusKind.ACTIVE))
        self.assertFalse(self.manager.parse_status("inactive\n", self.ssh, StatusKind.ACTIVE))
        self.assertTrue(self.manager.parse_status("enabled\n", self.ssh, StatusKind.ENABLED))
        self.assertFalse(self.manager.parse_status("disabled\n", self.ssh, StatusKind.ENABLED))

    def test_unknown_service_is_false(self):
        """Not-found output is a clean False for both probes"""
        output = "nope: unrecognized service\n"
        self.assertFalse(self.manager.parse_status(output, self.ssh, StatusKind.ACTIVE))
        self.assertFalse(self.manager.parse_status(output, self.ssh, StatusKind.ENABLED))

    def test_exists_and_find(self):
        self.assertTrue(self.manager.service_exists(self.ssh))
        self.assertFalse(self.manager.service_exists(ServiceConfig.for_manager("sysvinit", "docker")))
        self.assertEqual(self.manager.find_services("n"), ["cron", "nginx"])

    def test_path_like_names_do_not_exist(self):
        (self.init_dir / "sub").mkdir()
        (self.init_dir / "sub" / "x").write_text("")
        for name in ("sub/x", "..", ".", "../" + self.init_dir.name + "/ssh"):
            config = ServiceConfig.for_manager("sysvinit", name)
            self.assertFalse(self.manager.service_exists(config), name)

    def test_unit_path(self):
        self.assertEqual(self.manager.find_unit_path("cron"), self.init_dir / "cron")
        os.remove(self.init_dir / "cron")
        self.assertIsNone(self.manager.find_unit_path("cron"))


class TestSafeNames(unittest.TestCase):
    def test_is_safe_name(self):
        self.assertTrue(is_safe_name("docker.service"))
        self.assertTrue(is_safe_name("clamd@scan.service"))
        self.assertTrue(is_safe_name("a..b"))
        for name in ("", ".", "..", "../secret", "/etc/passwd", "a/b"):
            self.assertFalse(is_safe_name(name), name)

    def test_service_path_rejects_traversal(self):
        manager = SystemdManager(executor=FakeExecutor(), privileged=True)
        handler = ServiceHandler(ServiceConfig.for_manager("systemd", "../../etc/shadow"), manager)
        with self.assertRaises(ServiceError):
            handler.service_path()


class TestProbeErrors(unittest.TestCase):
    """Test how probes treat non-zero exits and timeouts"""

    def setUp(self):
        self.executor = FakeExecutor()
        self.manager = SystemdManager(executor=self.executor, privileged=True)
        self.handler = ServiceHandler(ServiceConfig.for_manager("systemd", "cron.service"), self.manager)

    def test_nonzero_exit_is_parsed(self):
        """systemctl status exits 3 for inactive units; that is a state, not an error"""
        argv = ("systemctl", "status", "cron.service")
        self.executor.responses[argv] = exited(argv, "Active: inactive (dead)\n", 3)

        status = self.handler.is_active()
        self.assertFalse(status.is_active)
        self.assertIn("inactive", status.output)

    def test_timeout_propagates(self):
        argv = ("systemctl", "is-enabled", "cron.service")
        self.executor.responses[argv] = CommandTimeoutError("systemctl is-enabled cron.service", 5)

        with self.assertRaises(CommandTimeoutError):
            self.handler.is_enabled()


if __name__ == "__main__":
    unittest.main()
