"""
Tests for configuration validation.
"""

import os
import shutil
import tempfile
import unittest

from pydantic import ValidationError

from chaos_mirror.config_models import MirrorConfig, load_and_validate_config


class TestMirrorConfig(unittest.TestCase):

    def test_defaults(self):
        config = MirrorConfig()
        self.assertEqual(config.index_url, "https://chaos-data.projectdiscovery.io/index.json")
        self.assertEqual(config.default_platform, "selfhosted")
        self.assertTrue(config.skip_unchanged)
        self.assertEqual(config.http.timeout_s, 60)
        self.assertEqual(str(config.last_run_path).replace("\\", "/"), "data/last_run.txt")

    def test_invalid_index_url(self):
        with self.assertRaises(ValidationError) as cm:
            MirrorConfig(index_url="ftp://example.com/index.json")
        self.assertIn("index_url must be a valid HTTP/HTTPS URL", str(cm.exception))

    def test_invalid_default_platform(self):
        with self.assertRaises(ValidationError):
            MirrorConfig(default_platform="self hosted")

    def test_delay_bounds(self):
        with self.assertRaises(ValidationError):
            MirrorConfig(delay_ms=-1)


class TestConfigLoading(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _write(self, text: str) -> str:
        path = os.path.join(self.tmp_dir, "mirror.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_load_valid_file(self):
        path = self._write(
            "output_root: /srv/mirror\n"
            "skip_unchanged: false\n"
            "http:\n"
            "  timeout_s: 15\n"
        )
        config = load_and_validate_config(path)
        self.assertEqual(config.output_root, "/srv/mirror")
        self.assertFalse(config.skip_unchanged)
        self.assertEqual(config.http.timeout_s, 15)

    def test_empty_file_uses_defaults(self):
        config = load_and_validate_config(self._write(""))
        self.assertEqual(config, MirrorConfig())

    def test_validation_errors_are_listed_by_field(self):
        path = self._write("http:\n  timeout_s: 0\n")
        with self.assertRaisesRegex(ValueError, r"http\.timeout_s"):
            load_and_validate_config(path)

    def test_malformed_yaml(self):
        path = self._write("output_root: [unclosed\n")
        with self.assertRaisesRegex(ValueError, "Invalid YAML"):
            load_and_validate_config(path)

    def test_missing_required_file(self):
        with self.assertRaises(FileNotFoundError):
            load_and_validate_config(os.path.join(self.tmp_dir, "absent.yaml"))

    def test_missing_optional_file_yields_defaults(self):
        config = load_and_validate_config(os.path.join(self.tmp_dir, "absent.yaml"), required=False)
        self.assertEqual(config, MirrorConfig())


if __name__ == "__main__":
    unittest.main()
