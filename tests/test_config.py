"""
Unit tests for configuration loading and the fluent builder
"""

import json
import tempfile
import unittest
from pathlib import Path

from svcctl.core.config import Config, load_config


class TestConfig(unittest.TestCase):
    """Test Config"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / "config.json"

    def test_defaults(self):
        data = Config(self.path).data
        self.assertEqual(data.timeouts.control, 10.0)
        self.assertEqual(data.timeouts.probe, 5.0)
        self.assertEqual(data.timeouts.candidate_window, 1.0)
        self.assertEqual(data.cache.existence_ttl, 30.0)
        self.assertEqual(data.cache.discovery_ttl, 300.0)
        self.assertEqual(data.aliases.flush_delay, 20.0)
        self.assertEqual(data.aliases.file.name, "svcaliases.json")
        self.assertEqual(data.managers.priority, ["systemd", "openrc", "sysvinit"])
        self.assertEqual(data.managers.max_retries, 5)
        self.assertEqual(data.self_tests["nginx"], ["nginx", "-t"])
        self.assertFalse(data.watch_unit_dirs)

    def test_save_and_load(self):
        alias_file = Path(self.tmp.name) / "aliases.json"
        (
            Config(self.path)
            .alias_file(str(alias_file))
            .alias("web", "nginx.service", "httpd.service")
            .timeouts(probe=2)
            .cache_ttl(existence=10)
            .manager_priority("openrc", "sysvinit")
            .retries(3, initial_backoff=0.5)
            .elevate_with("")
            .self_test("haproxy", "haproxy", "-c", "-f", "/etc/haproxy/haproxy.cfg")
            .watch_unit_dirs(True)
            .log_level("debug")
            .save()
        )

        data = load_config(self.path).data
        self.assertEqual(data.aliases.file, alias_file.resolve())
        self.assertEqual(data.aliases.extra, {"web": ["nginx.service", "httpd.service"]})
        self.assertEqual(data.timeouts.probe, 2.0)
        self.assertEqual(data.timeouts.control, 10.0)
        self.assertEqual(data.cache.existence_ttl, 10.0)
        self.assertEqual(data.managers.priority, ["openrc", "sysvinit"])
        self.assertEqual(data.managers.max_retries, 3)
        self.assertEqual(data.managers.elevate_with, "")
        self.assertEqual(data.self_tests["haproxy"][0], "haproxy")
        self.assertTrue(data.watch_unit_dirs)
        self.assertEqual(data.logging.level, "DEBUG")

    def test_partial_file(self):
        self.path.write_text(json.dumps({"cache": {"discovery_ttl": 60}}))
        data = Config(self.path).data
        self.assertEqual(data.cache.discovery_ttl, 60.0)
        self.assertEqual(data.cache.existence_ttl, 30.0)

    def test_malformed_file_uses_defaults(self):
        self.path.write_text("{broken")
        self.assertEqual(Config(self.path).data.timeouts.default, 30.0)

    def test_builder_is_single_use(self):
        config = Config(self.path, load=False)
        config.build()
        with self.assertRaises(RuntimeError):
            config.timeouts(probe=1)


if __name__ == "__main__":
    unittest.main()
