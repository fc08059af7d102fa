from __future__ import annotations

from dataclasses import dataclass

from chaos_mirror.config_models import MirrorConfig
from chaos_mirror.core.delta import DeltaEngine
from chaos_mirror.core.engine import SyncEngine
from chaos_mirror.fetch.archive import StagingSupplier, ZipArchiveSupplier
from chaos_mirror.fetch.index import ProgramIndexFetcher
from chaos_mirror.http.client import RequestsHttpClient
from chaos_mirror.http.policies import RateLimiter
from chaos_mirror.state.last_run import LastRunStore
from chaos_mirror.state.snapshot_store import SnapshotStore


@dataclass(frozen=True)
class BuiltComponents:
    engine: SyncEngine
    index_fetcher: ProgramIndexFetcher
    store: SnapshotStore
    last_run: LastRunStore
    client: RequestsHttpClient


class ComponentFactory:
    """
    Factory responsible for wiring dependencies.
    Keeps main.py clean and lets tests swap single collaborators.
    """

    def __init__(self, config: MirrorConfig):
        self.config = config

    def build(self) -> BuiltComponents:
        """Build all components needed for a mirror run."""
        client = self._http_client()
        store = self._store()

        engine = SyncEngine(
            store=store,
            supplier=self._supplier(client),
            delta_engine=DeltaEngine(),
            limiter=RateLimiter(self.config.delay_ms),
        )

        return BuiltComponents(
            engine=engine,
            index_fetcher=self._index_fetcher(client),
            store=store,
            last_run=LastRunStore(self.config.last_run_path),
            client=client,
        )

    # ---------- Builders (private) ----------

    def _http_client(self) -> RequestsHttpClient:
        """Create the HTTP client."""
        return RequestsHttpClient(timeout_s=self.config.http.timeout_s, user_agent=self.config.http.user_agent)

    def _store(self) -> SnapshotStore:
        return SnapshotStore(self.config.output_root)

    def _supplier(self, client: RequestsHttpClient) -> StagingSupplier:
        """Create the staging dataset supplier."""
        return ZipArchiveSupplier(client)

    def _index_fetcher(self, client: RequestsHttpClient) -> ProgramIndexFetcher:
        return ProgramIndexFetcher(
            client,
            url=self.config.index_url,
            default_platform=self.config.default_platform,
        )
