from __future__ import annotations

import os
import shutil
from pathlib import Path

from chaos_mirror.core.errors import SnapshotCommitError
from chaos_mirror.core.models import Program
from chaos_mirror.utils.logging import get_logger

STAGING_DIRNAME = ".staging"

log = get_logger("chaos_mirror.snapshot")


def commit(staging_dir: Path, snapshot_dir: Path) -> None:
    """
    Replace `snapshot_dir` with `staging_dir`.

    Both paths must be on the same filesystem. With no existing snapshot this
    is one atomic rename. Otherwise the old snapshot is first renamed aside;
    between that rename and the promotion of the staged tree no snapshot
    exists at the canonical path. A failed promotion restores the old snapshot.
    """
    staging_dir, snapshot_dir = Path(staging_dir), Path(snapshot_dir)
    if not staging_dir.is_dir():
        raise SnapshotCommitError(f"Staging directory does not exist: {staging_dir}")

    snapshot_dir.parent.mkdir(parents=True, exist_ok=True)

    if not snapshot_dir.exists():
        try:
            os.replace(staging_dir, snapshot_dir)
        except OSError as e:
            raise SnapshotCommitError(f"Cannot promote {staging_dir} to {snapshot_dir}: {e}") from e
        return

    retired = staging_dir.with_name(staging_dir.name + ".retired")
    if retired.exists():
        shutil.rmtree(retired)

    try:
        os.replace(snapshot_dir, retired)
    except OSError as e:
        raise SnapshotCommitError(f"Cannot retire snapshot {snapshot_dir}: {e}") from e

    try:
        os.replace(staging_dir, snapshot_dir)
    except OSError as e:
        os.replace(retired, snapshot_dir)
        raise SnapshotCommitError(f"Cannot promote {staging_dir} to {snapshot_dir}: {e}") from e

    shutil.rmtree(retired, ignore_errors=True)


class SnapshotStore:
    """
    On-disk layout of snapshots, deltas and staging areas under one root.

        <root>/<platform>/Domains/<program>/...          snapshot
        <root>/<platform>/Updates_<date>/<program>/...   delta
        <root>/.staging/<platform>/<program>/...         staging
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def snapshot_path(self, program: Program) -> Path:
        return self.root / program.safe_platform / "Domains" / program.safe_name

    def delta_path(self, program: Program, run_date: str) -> Path:
        """
        Fresh delta location for this run. A non-empty delta left by an earlier
        run on the same day is kept and the next free `<name>_<n>` is used.
        """
        base = self.root / program.safe_platform / f"Updates_{run_date}"
        candidate = base / program.safe_name
        n = 2
        while candidate.exists() and any(candidate.iterdir()):
            candidate = base / f"{program.safe_name}_{n}"
            n += 1
        return candidate

    def staging_path(self, program: Program) -> Path:
        """Create an empty staging directory for the program, clearing leftovers of a crashed run."""
        path = self.root / STAGING_DIRNAME / program.safe_platform / program.safe_name
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True)
        return path

    def has_snapshot(self, program: Program) -> bool:
        return self.snapshot_path(program).is_dir()

    def commit(self, program: Program, staging_dir: Path) -> Path:
        snapshot = self.snapshot_path(program)
        commit(staging_dir, snapshot)
        log.info("Snapshot committed: %s", snapshot)
        return snapshot

    def discard(self, staging_dir: Path) -> None:
        """Remove a staging directory that will not be committed."""
        shutil.rmtree(staging_dir, ignore_errors=True)
