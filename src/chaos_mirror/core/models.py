from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PLATFORM = "selfhosted"


def sanitize_name(name: str) -> str:
    """Make a program or platform name safe to use as a single path component."""
    return (name or "").replace(" ", "_").replace("/", "_").replace("\\", "_")


class ProgramIndexEntry(BaseModel):
    """
    One item of the published program index.

    Only the fields the mirror reads are validated; the index also carries
    counts and flags (count, change, is_new, bounty, program_url) that are
    ignored whatever their value.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    url: str = Field(..., alias="URL")
    platform: Optional[str] = ""
    last_updated: Optional[str] = None

    def to_program(self, default_platform: str = DEFAULT_PLATFORM) -> "Program":
        return Program(
            name=self.name,
            platform=self.platform or "",
            url=self.url,
            last_updated=self.last_updated,
            default_platform=default_platform,
        )


@dataclass(frozen=True)
class Program:
    """A monitored program whose dataset is mirrored independently."""

    name: str
    url: str
    platform: str = ""
    last_updated: Optional[str] = None
    default_platform: str = DEFAULT_PLATFORM

    @property
    def safe_name(self) -> str:
        return sanitize_name(self.name)

    @property
    def safe_platform(self) -> str:
        return sanitize_name(self.platform) or self.default_platform

    def updated_at(self) -> Optional[datetime]:
        """Parse `last_updated`; None when missing or not ISO-8601."""
        if not self.last_updated:
            return None
        try:
            return datetime.fromisoformat(self.last_updated.replace("Z", "+00:00"))
        except ValueError:
            return None


@dataclass(frozen=True)
class DeltaResult:
    """Counters returned by one delta computation."""

    new_files: int = 0
    new_records: int = 0

    @property
    def is_empty(self) -> bool:
        return self.new_files == 0 and self.new_records == 0


@dataclass(frozen=True)
class DatasetTotals:
    """File and record totals of a whole dataset tree."""

    files: int = 0
    records: int = 0


@dataclass(frozen=True)
class ProgramOutcome:
    """Result of synchronizing one program."""

    program: Program
    delta: DeltaResult
    totals: DatasetTotals
    delta_path: Optional[str] = None

    def counters(self) -> "RunCounters":
        return RunCounters(
            programs_processed=1,
            programs_updated=0 if self.delta.is_empty else 1,
            total_files=self.totals.files,
            total_records=self.totals.records,
            new_files=self.delta.new_files,
            new_records=self.delta.new_records,
        )


@dataclass(frozen=True)
class RunCounters:
    """Aggregate counters of one synchronization run."""

    programs_processed: int = 0
    programs_updated: int = 0
    total_files: int = 0
    total_records: int = 0
    new_files: int = 0
    new_records: int = 0
    programs_failed: int = 0
    programs_unchanged: int = 0
    failures: List[str] = field(default_factory=list, compare=False)

    def __add__(self, other: "RunCounters") -> "RunCounters":
        if not isinstance(other, RunCounters):
            return NotImplemented
        return RunCounters(
            programs_processed=self.programs_processed + other.programs_processed,
            programs_updated=self.programs_updated + other.programs_updated,
            total_files=self.total_files + other.total_files,
            total_records=self.total_records + other.total_records,
            new_files=self.new_files + other.new_files,
            new_records=self.new_records + other.new_records,
            programs_failed=self.programs_failed + other.programs_failed,
            programs_unchanged=self.programs_unchanged + other.programs_unchanged,
            failures=self.failures + other.failures,
        )

    @classmethod
    def failed(cls, program: Program) -> "RunCounters":
        return cls(programs_failed=1, failures=[f"{program.name} [{program.safe_platform}]"])

    @classmethod
    def unchanged(cls) -> "RunCounters":
        return cls(programs_unchanged=1)

    def summary_lines(self) -> List[str]:
        """Human-readable run report."""
        lines = [
            "-" * 40,
            f"Processed programs:             {self.programs_processed}",
            f"Programs with updates:          {self.programs_updated}",
            f"Second-level domains (files):   {self.total_files}",
            f"Total FQDNs (lines):            {self.total_records}",
            f"New files (updates):            {self.new_files}",
            f"New FQDNs (updates):            {self.new_records}",
        ]
        if self.programs_unchanged:
            lines.append(f"Unchanged programs (skipped):   {self.programs_unchanged}")
        if self.programs_failed:
            lines.append(f"Failed programs:                {self.programs_failed}")
        return lines
