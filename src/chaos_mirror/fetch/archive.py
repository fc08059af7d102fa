from __future__ import annotations

import io
import shutil
import zipfile
import zlib
from pathlib import Path
from typing import Protocol

import requests

from chaos_mirror.core.errors import ArchiveError, FetchError
from chaos_mirror.core.models import Program
from chaos_mirror.http.client import HttpClient
from chaos_mirror.utils.logging import get_logger


class StagingSupplier(Protocol):
    """Fills an empty staging directory with a program's current dataset."""

    def populate(self, program: Program, staging_dir: Path) -> None: ...


def extract_zip(data: bytes, out_dir: Path) -> int:
    """
    Extract a zip archive into out_dir and return the number of files written.

    Raises:
        ArchiveError: If the archive is corrupt or an entry would land outside out_dir.
    """
    out_dir = Path(out_dir)
    root = out_dir.resolve()
    written = 0
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            for info in zf.infolist():
                target = (out_dir / info.filename).resolve()
                if target != root and root not in target.parents:
                    raise ArchiveError(f"Archive entry escapes staging directory: {info.filename}")
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                written += 1
    # Encrypted entries raise RuntimeError, unknown compression methods NotImplementedError.
    except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError) as e:
        raise ArchiveError(f"Corrupt archive: {e}") from e
    return written


class ZipArchiveSupplier:
    """Downloads a program's zip archive and extracts it into the staging directory."""

    def __init__(self, client: HttpClient):
        self.client = client
        self.log = get_logger("chaos_mirror.fetch.archive")

    def populate(self, program: Program, staging_dir: Path) -> None:
        try:
            resp = self.client.get(program.url)
        except requests.RequestException as e:
            raise FetchError(f"Download failed for {program.url}: {e}") from e

        if not resp.ok:
            raise FetchError(f"Download failed for {program.url}: HTTP {resp.status_code}")

        files = extract_zip(resp.content, staging_dir)
        self.log.info("Extracted %d files for '%s' (%d bytes)", files, program.name, len(resp.content))
