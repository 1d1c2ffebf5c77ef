"""
Unittest suite for configuration loading.

Settings are resolved from an explicit mapping instead of the process
environment so these tests are independent of the machine they run on.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from cvmatch import config
from cvmatch.config import DEFAULT_MODEL, load_settings
from cvmatch.errors import ConfigurationError


class TestLoadSettings(unittest.TestCase):
    """Test cases for :func:`cvmatch.config.load_settings`."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        config.reset_settings()

    def tearDown(self) -> None:
        self.temp_dir.cleanup()
        config.reset_settings()

    def _write_yaml(self, body: str) -> str:
        path = Path(self.temp_dir.name) / "cvmatch.yaml"
        path.write_text(body, encoding="utf-8")
        return str(path)

    def test_missing_api_key_fails(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_settings(env={})

    def test_blank_api_key_fails(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_settings(env={"GEMINI_API_KEY": "   "})

    def test_defaults(self) -> None:
        settings = load_settings(env={"GEMINI_API_KEY": "abc"})
        self.assertEqual(settings.api_key, "abc")
        self.assertEqual(settings.model, DEFAULT_MODEL)
        self.assertEqual(settings.gate_seconds, 15)
        self.assertEqual(settings.max_upload_mb, 5)
        self.assertEqual(settings.log_level, "INFO")

    def test_google_api_key_fallback(self) -> None:
        settings = load_settings(env={"GOOGLE_API_KEY": "from-google"})
        self.assertEqual(settings.api_key, "from-google")

    def test_environment_overrides_yaml(self) -> None:
        path = self._write_yaml("model: gemini-from-yaml\ngate_seconds: 5\nlog_level: debug\n")
        env = {"GEMINI_API_KEY": "abc", "GEMINI_MODEL": "gemini-from-env"}
        settings = load_settings(config_path=path, env=env)
        self.assertEqual(settings.model, "gemini-from-env")
        self.assertEqual(settings.gate_seconds, 5)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_config_path_from_environment(self) -> None:
        path = self._write_yaml("max_upload_mb: 2.5\n")
        settings = load_settings(env={"GEMINI_API_KEY": "abc", "CVMATCH_CONFIG": path})
        self.assertEqual(settings.max_upload_mb, 2.5)

    def test_missing_config_file(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_settings(config_path="/nonexistent/cvmatch.yaml", env={"GEMINI_API_KEY": "abc"})

    def test_invalid_gate_seconds(self) -> None:
        for value in ("zero", "0", "-3"):
            with self.subTest(value=value):
                with self.assertRaises(ConfigurationError):
                    load_settings(env={"GEMINI_API_KEY": "abc", "CVMATCH_GATE_SECONDS": value})

    def test_repr_hides_api_key(self) -> None:
        settings = load_settings(env={"GEMINI_API_KEY": "super-secret"})
        self.assertNotIn("super-secret", repr(settings))

    def test_get_settings_caches(self) -> None:
        env = {"GEMINI_API_KEY": "cached-key", "GOOGLE_API_KEY": "", "CVMATCH_CONFIG": ""}
        with mock.patch.dict(os.environ, env, clear=False), mock.patch.object(config, "load_dotenv"):
            first = config.get_settings()
        self.assertIs(config.get_settings(), first)
        self.assertEqual(first.api_key, "cached-key")


if __name__ == "__main__":
    unittest.main()
