import unittest

from chaos_mirror.config_models import HttpConfig, MirrorConfig
from chaos_mirror.core.engine import SyncEngine
from chaos_mirror.core.factory import ComponentFactory
from chaos_mirror.fetch.archive import ZipArchiveSupplier


class TestComponentFactory(unittest.TestCase):

    def test_build_wires_config_into_components(self):
        config = MirrorConfig(
            index_url="https://index.example/index.json",
            output_root="/srv/mirror",
            state_dir="/srv/state",
            default_platform="other",
            delay_ms=250,
            http=HttpConfig(timeout_s=5, user_agent="test-agent"),
        )

        built = ComponentFactory(config).build()
        self.addCleanup(built.client.close)

        self.assertIsInstance(built.engine, SyncEngine)
        self.assertIsInstance(built.engine.supplier, ZipArchiveSupplier)
        self.assertIs(built.engine.store, built.store)
        self.assertEqual(str(built.store.root), "/srv/mirror")
        self.assertEqual(built.engine.limiter.delay_s, 0.25)
        self.assertEqual(built.index_fetcher.url, "https://index.example/index.json")
        self.assertEqual(built.index_fetcher.default_platform, "other")
        self.assertEqual(built.client.timeout_s, 5)
        self.assertEqual(built.client.session.headers["User-Agent"], "test-agent")
        self.assertEqual(built.last_run.path.name, "last_run.txt")

    def test_supplier_and_fetcher_share_one_client(self):
        built = ComponentFactory(MirrorConfig()).build()
        self.addCleanup(built.client.close)

        self.assertIs(built.engine.supplier.client, built.client)
        self.assertIs(built.index_fetcher.client, built.client)


if __name__ == "__main__":
    unittest.main()
