from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from chaos_mirror.utils.logging import get_logger


class LastRunStore:
    """Persists the time of the last completed run as an ISO-8601 timestamp."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.log = get_logger("chaos_mirror.last_run")

    def load(self) -> Optional[datetime]:
        """Return the recorded time, or None if there is no usable marker."""
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8").strip()
            when = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except (OSError, ValueError) as e:
            # UnicodeDecodeError is a ValueError.
            self.log.warning("Ignoring unreadable last-run marker %s: %s", self.path, e)
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return when

    def save(self, when: datetime) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        self.path.write_text(when.isoformat(timespec="seconds"), encoding="utf-8")
