from __future__ import annotations

from datetime import date, datetime, timezone

def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc).replace(microsecond=0)

def run_date(today: date | None = None) -> str:
    """Date label used to namespace a run's delta output."""
    return (today or date.today()).isoformat()
