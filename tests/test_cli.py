"""Tests for the qreph command line."""

import os
import tempfile
import unittest
from unittest.mock import patch

from typer.testing import CliRunner

from qreph.cli.main import USAGE, app
from qreph.exceptions import BindError
from qreph.lifecycle import LifecycleState


class CliTest(unittest.TestCase):
    """Tests for the CLI entry point."""

    def setUp(self):
        self.runner = CliRunner()
        self.env = {
            "QREPH_CONFIG": os.path.join(tempfile.gettempdir(), "qreph-missing.json"),
            "QREPH_PORT": "",
            "QREPH_SHUTDOWN_TIMEOUT": "",
            "QREPH_QR": "",
        }
        patcher = patch("qreph.cli.main.share", return_value=LifecycleState.DELIVERED_SHUTDOWN)
        self.share = patcher.start()
        self.addCleanup(patcher.stop)

    def _invoke(self, args, **kwargs):
        return self.runner.invoke(app, args, env=self.env, **kwargs)

    def test_reads_piped_stdin(self):
        result = self._invoke([], input="line one\nline two\n")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.share.call_args[0][0], b"line one\nline two\n")

    @patch("qreph.cli.main.stdin_is_piped", return_value=False)
    def test_joins_arguments(self, _):
        result = self._invoke(["the", "wifi", "password"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.share.call_args[0][0], b"the wifi password")

    @patch("qreph.cli.main.stdin_is_piped", return_value=False)
    def test_double_dash_keeps_dashed_text(self, _):
        result = self._invoke(["--", "-v", "is", "the", "flag"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.share.call_args[0][0], b"-v is the flag")

    @patch("qreph.cli.main.stdin_is_piped", return_value=False)
    def test_usage_without_input(self, _):
        result = self._invoke([])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(USAGE, result.output)
        self.share.assert_not_called()

    @patch("qreph.cli.main.stdin_is_piped", return_value=False)
    def test_options_reach_config(self, _):
        result = self._invoke(
            ["--timeout", "1.5", "--no-qr", "--advertise-host", "10.1.1.1", "hi"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        config = self.share.call_args[0][1]
        self.assertEqual(config.shutdown_timeout, 1.5)
        self.assertFalse(config.show_qr)
        self.assertEqual(config.advertise_host, "10.1.1.1")

    @patch("qreph.cli.main.stdin_is_piped", return_value=False)
    def test_invalid_config_exits_nonzero(self, _):
        result = self._invoke(["--timeout", "-1", "hi"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("invalid configuration", result.output)
        self.share.assert_not_called()

    def test_fatal_error_exits_nonzero(self):
        self.share.side_effect = BindError("failed to create listener on *:80")
        result = self._invoke([], input="hello")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error: failed to create listener", result.output)

    def test_interrupted_session_exits_zero(self):
        self.share.return_value = LifecycleState.INTERRUPTED_SHUTDOWN
        result = self._invoke([], input="hello")
        self.assertEqual(result.exit_code, 0, result.output)


class CliEmptyPayloadTest(unittest.TestCase):
    """Runs the real session path for input that must be rejected."""

    def test_empty_stdin_exits_nonzero(self):
        runner = CliRunner()
        env = {"QREPH_CONFIG": os.path.join(tempfile.gettempdir(), "qreph-missing.json")}
        result = runner.invoke(app, [], input="", env=env)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("no content provided", result.output)


if __name__ == "__main__":
    unittest.main()
