from chaos_mirror.state.last_run import LastRunStore
from chaos_mirror.state.snapshot_store import SnapshotStore, commit

__all__ = [
    "LastRunStore",
    "SnapshotStore",
    "commit",
]
