from __future__ import annotations
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from chaos_mirror.core.delta import DeltaEngine
from chaos_mirror.core.errors import MirrorError
from chaos_mirror.core.models import Program, ProgramOutcome, RunCounters
from chaos_mirror.core.records import count_dataset
from chaos_mirror.fetch.archive import StagingSupplier
from chaos_mirror.http.policies import RateLimiter
from chaos_mirror.state.snapshot_store import SnapshotStore
from chaos_mirror.utils.logging import get_logger
from chaos_mirror.utils.time import run_date


class SyncEngine:
    """
    Synchronizes programs one after another: stage the fetched dataset,
    extract the delta against the stored snapshot, then promote the staged
    dataset to be the new snapshot.
    """

    def __init__(
        self,
        store: SnapshotStore,
        supplier: StagingSupplier,
        delta_engine: Optional[DeltaEngine] = None,
        limiter: Optional[RateLimiter] = None,
    ):
        """
        Args:
            store: Layout of snapshots, deltas and staging areas.
            supplier: Fills a staging directory with a program's dataset.
            delta_engine: Record-level comparison of staged and stored data.
            limiter: Delay between program downloads.
        """
        self.store = store
        self.supplier = supplier
        self.delta_engine = delta_engine or DeltaEngine()
        self.limiter = limiter or RateLimiter(0)
        self.log = get_logger("chaos_mirror.engine")

    def run(
        self,
        programs: Iterable[Program],
        since: Optional[datetime] = None,
        label: Optional[str] = None,
    ) -> RunCounters:
        """
        Synchronize every program in order and fold their counters.

        Args:
            programs: Programs to synchronize, in index order.
            since: Time of the previous run. When given, programs not updated
                after it are skipped.
            label: Date label of the delta directories; today by default.

        Returns:
            Aggregated counters of the run.
        """
        label = label or run_date()
        counters = RunCounters()
        fetched = 0

        for program in programs:
            if since is not None and not self._updated_since(program, since):
                counters = counters + RunCounters.unchanged()
                continue

            if fetched:
                self.limiter.sleep()
            fetched += 1

            try:
                outcome = self.sync_program(program, label)
            except MirrorError as e:
                self.log.error("Skipping '%s' [%s]: %s", program.name, program.safe_platform, e)
                counters = counters + RunCounters.failed(program)
                continue
            except OSError as e:
                self.log.error(
                    "Skipping '%s' [%s]: filesystem error: %s", program.name, program.safe_platform, e
                )
                counters = counters + RunCounters.failed(program)
                continue

            counters = counters + outcome.counters()

        self.log.info(
            "Run done: processed=%s updated=%s files=%s records=%s new_files=%s new_records=%s failed=%s unchanged=%s",
            counters.programs_processed,
            counters.programs_updated,
            counters.total_files,
            counters.total_records,
            counters.new_files,
            counters.new_records,
            counters.programs_failed,
            counters.programs_unchanged,
        )
        return counters

    def sync_program(self, program: Program, label: str) -> ProgramOutcome:
        """
        Synchronize one program. On error the staging area is discarded and
        the stored snapshot is left as it was.
        """
        snapshot_dir = self.store.snapshot_path(program)
        delta_dir = self.store.delta_path(program, label)
        staging_dir = self.store.staging_path(program)
        committed = False

        self.log.info("Checking for update for '%s' [%s]", program.name, program.safe_platform)
        try:
            self.supplier.populate(program, staging_dir)

            delta = self.delta_engine.compute_delta(staging_dir, snapshot_dir, delta_dir)
            if delta.is_empty:
                self._remove_delta(delta_dir)
            else:
                self.log.info(
                    "Update for '%s' [%s]: new_files=%s new_records=%s -> %s",
                    program.name,
                    program.safe_platform,
                    delta.new_files,
                    delta.new_records,
                    delta_dir,
                )

            totals = count_dataset(staging_dir)

            self.store.commit(program, staging_dir)
            committed = True
        finally:
            if not committed:
                self.store.discard(staging_dir)
                # The snapshot was not advanced, so the next run reports these records again.
                self._remove_delta(delta_dir)

        return ProgramOutcome(
            program=program,
            delta=delta,
            totals=totals,
            delta_path=None if delta.is_empty else str(delta_dir),
        )

    def _remove_delta(self, delta_dir: Path) -> None:
        shutil.rmtree(delta_dir, ignore_errors=True)
        parent = delta_dir.parent
        # The per-date directory goes too once no program left anything in it.
        if parent.is_dir() and not any(parent.iterdir()):
            parent.rmdir()

    def _updated_since(self, program: Program, since: datetime) -> bool:
        updated = program.updated_at()
        if updated is None:
            self.log.warning(
                "Invalid last_updated for '%s' [%s]: %r",
                program.name,
                program.safe_platform,
                program.last_updated,
            )
            return False
        # Naive timestamps are UTC on both sides.
        if updated.tzinfo is None:
            updated = updated.replace(tzinfo=timezone.utc)
        if since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        if updated <= since:
            self.log.info("No update for '%s' [%s]", program.name, program.safe_platform)
            return False
        return True
