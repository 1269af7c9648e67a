"""
Unit tests for the svcctl command line
"""

import io
import json
import logging
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from svcctl.cli.main import create_parser, main
from svcctl.service.registry import ManagerRegistry
from tests.helpers import FakeExecutor, FakeHost, StubSystemd


class TestCli(unittest.TestCase):
    """Run main() against a simulated systemd host"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        root = Path(self.tmp.name)
        self.alias_file = root / "svcaliases.json"
        self.config_file = root / "config.json"
        self.config_file.write_text(json.dumps({
            "aliases": {"file": str(self.alias_file)},
            "logging": {"file": str(root / "svcctl.log"), "level": "WARNING"},
        }))

        self.host = FakeHost({
            "docker.service": {"active": False, "enabled": True},
            "fail2ban.service": {"active": True, "enabled": False},
        })
        self.executor = FakeExecutor(handler=self.host)
        registry = ManagerRegistry(priority=["systemd"])
        registry.register(StubSystemd(self.executor))

        for target, value in (
            ("svcctl.core.context.CommandExecutor", self.executor),
            ("svcctl.service.registry.ManagerRegistry.with_defaults", registry),
        ):
            patcher = patch(target, return_value=value)
            patcher.start()
            self.addCleanup(patcher.stop)
        self.addCleanup(self._reset_logging)

    def _reset_logging(self):
        logger = logging.getLogger("svcctl")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(["--config", str(self.config_file), *argv])
        return code, out.getvalue(), err.getvalue()

    def test_name(self):
        code, out, _ = self.run_cli("name", "fail2ban")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "fail2ban.service")

    def test_name_not_found(self):
        code, _, err = self.run_cli("name", "nonexistent-xyz")
        self.assertEqual(code, 1)
        self.assertIn("nonexistent-xyz", err)

    def test_start_and_status_json(self):
        code, out, _ = self.run_cli("start", "docker")
        self.assertEqual(code, 0)
        self.assertIn("start : docker.service completed", out)

        code, out, _ = self.run_cli("status", "docker", "--json")
        self.assertEqual(code, 0)
        status = json.loads(out)
        self.assertEqual(status["name"], "docker.service")
        self.assertTrue(status["is_active"])
        self.assertTrue(status["is_enabled"])
        self.assertTrue(status["is_exists"])

    def test_status_text(self):
        code, out, _ = self.run_cli("status", "fail2ban")
        self.assertEqual(code, 0)
        self.assertIn("[+] running: active", out)
        self.assertIn("[-] at boot: disabled", out)

    def test_action(self):
        code, _, _ = self.run_cli("action", "reload", "fail2ban")
        self.assertEqual(code, 0)
        self.assertIn(("systemctl", "reload", "fail2ban.service"), self.executor.calls)

    def test_aliases_are_persisted_on_exit(self):
        self.run_cli("name", "docker")
        code, out, _ = self.run_cli("aliases", "--json")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), {"docker": ["docker.service"]})

    def test_safe_restart_missing_config(self):
        code, _, err = self.run_cli(
            "safe-restart", "fail2ban", "--config", str(Path(self.tmp.name) / "jail.local")
        )
        self.assertEqual(code, 1)
        self.assertIn("config file missing", err)
        self.assertEqual(self.executor.count("systemctl", "restart"), 0)

    def test_log_missing_file(self):
        code, _, err = self.run_cli("log", str(Path(self.tmp.name) / "nope.log"))
        self.assertEqual(code, 1)
        self.assertIn("nope.log", err)

    def test_interrupt(self):
        with patch("svcctl.api.get_service_name", side_effect=KeyboardInterrupt):
            code, _, _ = self.run_cli("name", "docker")
        self.assertEqual(code, 130)

    def test_no_command_prints_help(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main([]), 0)
        self.assertIn("svcctl", out.getvalue())

    def test_parser_commands(self):
        parser = create_parser()
        args = parser.parse_args(["log", "/var/log/syslog", "-n", "+1"])
        self.assertEqual(args.lines, "+1")
        args = parser.parse_args(["safe-restart", "nginx", "--config", "a.conf", "--config", "b.conf"])
        self.assertEqual(args.config_paths, ["a.conf", "b.conf"])


if __name__ == "__main__":
    unittest.main()
