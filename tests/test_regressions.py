"""
Regression tests for line-ending and same-day rerun behavior.
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from chaos_mirror.core.delta import DeltaEngine
from chaos_mirror.core.engine import SyncEngine
from chaos_mirror.core.models import Program
from chaos_mirror.state.snapshot_store import SnapshotStore


class StaticSupplier:
    def __init__(self, files: dict):
        self.files = files

    def populate(self, program, staging_dir):
        for rel, content in self.files.items():
            (staging_dir / rel).write_bytes(content)


class TestTrailingNewlineIsNotAChange(unittest.TestCase):
    """A record that only gained or lost its trailing newline is not new."""

    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp())
        for name in ("staging", "snapshot"):
            (self.tmp_dir / name).mkdir()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_unterminated_snapshot_terminated_staging(self):
        (self.tmp_dir / "snapshot" / "f.txt").write_bytes(b"a\nb")
        (self.tmp_dir / "staging" / "f.txt").write_bytes(b"a\nb\n")

        result = DeltaEngine().compute_delta(
            self.tmp_dir / "staging", self.tmp_dir / "snapshot", self.tmp_dir / "delta"
        )

        self.assertTrue(result.is_empty)
        self.assertFalse((self.tmp_dir / "delta").exists())


class TestSameDayRerun(unittest.TestCase):
    """A second run on the same day must not clobber the first run's delta."""

    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.store = SnapshotStore(self.tmp_dir)
        self.program = Program(name="acme", platform="hackerone", url="https://example.com/acme.zip")

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_both_deltas_survive(self):
        SyncEngine(self.store, StaticSupplier({"f.txt": b"a\n"})).run([self.program], label="2024-05-01")
        SyncEngine(self.store, StaticSupplier({"f.txt": b"a\nb\n"})).run([self.program], label="2024-05-01")

        updates = self.tmp_dir / "hackerone" / "Updates_2024-05-01"
        self.assertEqual((updates / "acme" / "f.txt").read_bytes(), b"a\n")
        self.assertEqual((updates / "acme_2" / "f.txt").read_bytes(), b"b\n")


if __name__ == "__main__":
    unittest.main()
