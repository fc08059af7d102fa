from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, List

from chaos_mirror.core.models import DatasetTotals
from chaos_mirror.utils.logging import get_logger

# Record files are compared byte-for-byte per line; undecodable bytes must survive a round trip.
ENCODING = "utf-8"
ERRORS = "surrogateescape"

log = get_logger("chaos_mirror.records")


def read_records(path: Path) -> List[str]:
    """
    Read a record collection: one record per line.

    A final record without a trailing newline is kept. Carriage returns are
    part of the record text, so only identical lines compare equal.
    """
    with open(path, "r", encoding=ENCODING, errors=ERRORS, newline="") as f:
        text = f.read()

    records = text.split("\n")
    if records[-1] == "":
        records.pop()
    return records


def count_records(path: Path) -> int:
    """Count records the same way `read_records` reads them."""
    count = 0
    last = b""
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(32 * 1024), b""):
            count += chunk.count(b"\n")
            last = chunk[-1:]
    if last and last != b"\n":
        count += 1
    return count


def write_records(path: Path, records: List[str]) -> None:
    """Write records newline-terminated, including the last one."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding=ENCODING, errors=ERRORS, newline="") as f:
        for record in records:
            f.write(record + "\n")


def iter_record_files(root: Path) -> Iterator[Path]:
    """Yield paths of regular files under root, relative to root, in sorted order."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            full = Path(dirpath) / filename
            if full.is_symlink() or not full.is_file():
                continue
            yield full.relative_to(root)


def count_dataset(root: Path) -> DatasetTotals:
    """Total files and records of a dataset tree. Unreadable files count with zero records."""
    files = 0
    records = 0
    for rel in iter_record_files(root):
        files += 1
        try:
            records += count_records(root / rel)
        except OSError as e:
            log.warning("Cannot count records in %s: %s", root / rel, e)
    return DatasetTotals(files=files, records=records)
