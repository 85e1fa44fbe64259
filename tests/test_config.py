"""Tests for configuration loading."""

import json
import os
import shutil
import tempfile
import unittest

from qreph.config import ServeConfig, config_path, load_config
from qreph.exceptions import ConfigError


class LoadConfigTest(unittest.TestCase):
    """Tests for load_config."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "config.json")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _write(self, data):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(data if isinstance(data, str) else json.dumps(data))

    def test_defaults(self):
        config = load_config(environ={}, path=self.path)
        self.assertEqual(config, ServeConfig())
        self.assertEqual(config.bind_host, "")
        self.assertEqual(config.port, 0)
        self.assertEqual(config.shutdown_timeout, 5.0)
        self.assertEqual(config.token_bytes, 32)
        self.assertIsNone(config.advertise_host)
        self.assertTrue(config.show_qr)

    def test_layering(self):
        self._write({"port": 8000, "shutdown_timeout": 1, "show_qr": False})
        environ = {"QREPH_PORT": "9000", "QREPH_ADVERTISE_HOST": "10.0.0.2"}
        config = load_config({"port": 9100, "bind_host": None}, environ=environ, path=self.path)
        self.assertEqual(config.port, 9100)
        self.assertEqual(config.advertise_host, "10.0.0.2")
        self.assertEqual(config.shutdown_timeout, 1.0)
        self.assertFalse(config.show_qr)

    def test_env_values_are_coerced(self):
        environ = {
            "QREPH_SHUTDOWN_TIMEOUT": "2.5",
            "QREPH_TOKEN_BYTES": "64",
            "QREPH_QR": "false",
            "QREPH_BIND_HOST": " ",
        }
        config = load_config(environ=environ, path=self.path)
        self.assertEqual(config.shutdown_timeout, 2.5)
        self.assertEqual(config.token_bytes, 64)
        self.assertFalse(config.show_qr)
        self.assertEqual(config.bind_host, "")

    def test_out_of_range_values_raise(self):
        for overrides in ({"shutdown_timeout": -1}, {"token_bytes": 8}, {"port": 70000}):
            with self.assertRaises(ConfigError):
                load_config(overrides, environ={}, path=self.path)

    def test_unknown_file_keys_raise(self):
        self._write({"prot": 8000})
        with self.assertRaises(ConfigError):
            load_config(environ={}, path=self.path)

    def test_unreadable_file_is_ignored(self):
        self._write("{not json")
        with self.assertLogs("qreph.config", level="WARNING"):
            config = load_config(environ={}, path=self.path)
        self.assertEqual(config, ServeConfig())

    def test_config_path_from_env(self):
        self.assertEqual(config_path({"QREPH_CONFIG": self.path}), self.path)
        self.assertTrue(config_path({}).endswith(os.path.join(".config", "qreph", "config.json")))


if __name__ == "__main__":
    unittest.main()
