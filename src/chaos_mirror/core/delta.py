from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Sequence

from chaos_mirror.core.errors import DeltaTargetError
from chaos_mirror.core.models import DeltaResult
from chaos_mirror.core.records import count_records, iter_record_files, read_records, write_records
from chaos_mirror.utils.logging import get_logger


def new_records(staged: Sequence[str], previous: Sequence[str]) -> List[str]:
    """Records of `staged` absent from `previous`, in staged order. Staged duplicates are kept."""
    seen = set(previous)
    return [r for r in staged if r not in seen]


class DeltaEngine:
    """
    Compares a staged dataset against the stored snapshot of the same program
    and materializes only the new records under a delta directory.
    """

    def __init__(self):
        self.log = get_logger("chaos_mirror.delta")

    def compute_delta(self, staging_dir: Path, snapshot_dir: Path, delta_dir: Path) -> DeltaResult:
        """
        Write the records new in `staging_dir` relative to `snapshot_dir` into `delta_dir`.

        Args:
            staging_dir: Freshly fetched dataset. Read only.
            snapshot_dir: Previously stored dataset. May be missing, in which
                case every staged file is new. Read only.
            delta_dir: Output location, created on demand. Must be absent or empty.

        Returns:
            Number of files written to the delta and number of records in them.
        """
        staging_dir, snapshot_dir, delta_dir = Path(staging_dir), Path(snapshot_dir), Path(delta_dir)
        if delta_dir.exists() and any(delta_dir.iterdir()):
            raise DeltaTargetError(f"Delta directory is not empty: {delta_dir}")

        new_files = 0
        new_count = 0

        for rel in iter_record_files(staging_dir):
            staged_path = staging_dir / rel
            previous_path = snapshot_dir / rel
            dest_path = delta_dir / rel

            try:
                if not previous_path.is_file():
                    records = count_records(staged_path)
                    dest_path.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copyfile(staged_path, dest_path)
                    self.log.debug("New file: %s (%d records)", rel, records)
                else:
                    added = new_records(read_records(staged_path), read_records(previous_path))
                    if not added:
                        continue
                    write_records(dest_path, added)
                    records = len(added)
                    self.log.debug("Changed file: %s (+%d records)", rel, records)
            except OSError as e:
                self.log.warning("Skipping %s: %s", staged_path, e)
                # A partially written delta file must not sit next to complete ones.
                if dest_path.is_file():
                    dest_path.unlink()
                continue

            new_files += 1
            new_count += records

        return DeltaResult(new_files=new_files, new_records=new_count)
