"""Tests for the catalog sync engine"""

import threading
import time
from unittest.mock import Mock

from catbreeds.api.models import CatBreed
from catbreeds.core.config import SyncSettings
from catbreeds.core.database import Database
from catbreeds.core.exceptions import CacheError, ErrorKind, NotFoundError, TransportError
from catbreeds.sync.engine import CatalogSyncEngine, CountSource


def _names(breeds):
    return [b.name for b in breeds]


class TestInitialization:
    """Full catalog sync"""

    def test_initialize_caches_every_breed(self, engine, database):
        result = engine.initialize_app_data()

        assert result.ok
        assert result.value == 4
        assert database.count_breeds() == 4

    def test_initialize_resolves_images(self, engine, database):
        engine.initialize_app_data()

        abys = database.get_breed("abys")
        assert abys.image is not None
        assert abys.image.url.endswith("0XYvRd7oD.jpg")
        assert (abys.image.width, abys.image.height) == (1204, 1445)

    def test_breed_without_reference_image_skips_lookup(self, engine, fake_remote, database):
        engine.initialize_app_data()

        looked_up = {c[1] for c in fake_remote.remote_calls("get_image")}
        assert len(looked_up) == 3
        assert database.get_breed("aege").image is None

    def test_initialize_offline_fails_without_writing(self, engine, fake_remote, database):
        fake_remote.offline = True

        result = engine.initialize_app_data()

        assert not result.ok
        assert result.kind == ErrorKind.TRANSPORT
        assert database.count_breeds() == 0


class TestEnrichment:
    """Image lookups fanned out per breed"""

    def test_failed_image_lookup_is_isolated(self, engine, fake_remote, database):
        fake_remote.failing_images.add("O3btzLlsO")

        result = engine.initialize_app_data()

        assert result.ok
        assert database.get_breed("beng").image is None
        assert database.get_breed("abys").image is not None
        assert database.get_breed("siam").image is not None

    def test_unexpected_image_error_is_isolated(self, engine, fake_remote):
        original = fake_remote.get_image

        def broken_payload(image_id):
            if image_id == "O3btzLlsO":
                raise ValueError("bad dimensions in image payload")
            return original(image_id)

        fake_remote.get_image = broken_payload

        result = engine.get_breeds(limit=4, page=0)

        assert result.ok
        images = {b.id: b.image for b in result.value}
        assert len(images) == 4
        assert images["beng"] is None
        assert images["abys"] is not None
        assert images["siam"] is not None

    def test_output_order_matches_remote_order(self, engine, fake_remote):
        original = fake_remote.get_image

        def slow_first(image_id):
            # The first breed's image finishes last
            if image_id == "ai6Jps4sx":
                time.sleep(0.05)
            return original(image_id)

        fake_remote.get_image = slow_first

        result = engine.fetch_and_merge(fake_remote.list_all)

        assert result.ok
        assert [b.id for b in result.value] == ["siam", "abys", "beng", "aege"]
        assert result.value[0].image is not None

    def test_concurrency_is_bounded(self, fake_remote, database):
        active = 0
        peak = 0
        lock = threading.Lock()
        original = fake_remote.get_image

        def tracking(image_id):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1
            return original(image_id)

        fake_remote.get_image = tracking
        fake_remote.breeds = [
            {"id": f"b{i:02d}", "name": f"Breed {i:02d}", "reference_image_id": "0XYvRd7oD"}
            for i in range(12)
        ]

        engine = CatalogSyncEngine(
            fake_remote, database,
            SyncSettings(page_size=2, assumed_total=67, max_image_workers=3)
        )
        engine.initialize_app_data()

        assert peak <= 3

    def test_max_workers_override(self, engine, fake_remote):
        threads = set()
        original = fake_remote.get_image

        def recording(image_id):
            threads.add(threading.current_thread().name)
            return original(image_id)

        fake_remote.get_image = recording

        result = engine.fetch_and_merge(fake_remote.list_all, max_workers=1)

        assert result.ok
        assert len(threads) == 1

    def test_progress_updated_once_per_breed(self, engine):
        progress = Mock()

        engine.initialize_app_data(progress=progress)

        progress.set_total.assert_called_once_with(4)
        assert progress.update.call_count == 4


class TestFavoritePreservation:
    """Local favorite flags survive remote refreshes"""

    def test_favorite_survives_page_refresh(self, engine):
        engine.initialize_app_data()
        engine.toggle_favorite("abys")

        result = engine.get_breeds(limit=4, page=0)

        flags = {b.id: b.is_favorite for b in result.value}
        assert flags["abys"] is True
        assert flags["siam"] is False

    def test_favorite_survives_full_resync(self, engine, database):
        engine.initialize_app_data()
        engine.toggle_favorite("beng")

        engine.initialize_app_data()

        assert database.get_breed("beng").is_favorite is True

    def test_favorite_survives_search_refresh(self, engine):
        engine.initialize_app_data()
        engine.toggle_favorite("siam")

        result = engine.search_breeds("sia")

        assert [b.id for b in result.value] == ["siam"]
        assert result.value[0].is_favorite is True

    def test_toggle_during_sync_is_kept(self, fake_remote, sync_settings, temp_dir):
        class TogglingDatabase(Database):
            """Flips abys to favorite right after the sync has read its row"""
            toggled = False

            def get_breed(self, breed_id):
                breed = super().get_breed(breed_id)
                if breed is not None and breed_id == "abys" and not self.toggled:
                    self.toggled = True
                    self.set_favorite(breed_id, True)
                return breed

        database = TogglingDatabase(temp_dir / "toggle.db")
        engine = CatalogSyncEngine(fake_remote, database, sync_settings)
        engine.initialize_app_data()

        engine.initialize_app_data()

        assert database.toggled
        assert database.get_breed("abys").is_favorite is True
        database.close()

    def test_new_breeds_start_as_non_favorites(self, engine, database):
        engine.get_breeds(limit=2, page=0)

        assert all(not b.is_favorite for b in database.get_all_breeds())


class TestOnlineFirstReads:
    """get_breeds and search_breeds with cache fallback"""

    def test_get_breeds_reads_back_from_cache_ordered_by_name(self, engine):
        engine.initialize_app_data()

        result = engine.get_breeds(limit=2, page=0)

        assert result.ok
        assert _names(result.value) == ["Abyssinian", "Aegean"]

    def test_get_breeds_uses_settings_page_size(self, engine, fake_remote):
        engine.get_breeds(page=1)

        assert fake_remote.remote_calls("list_page") == [("list_page", 2, 1)]

    def test_negative_page_reads_first_page(self, engine, fake_remote):
        engine.initialize_app_data()

        result = engine.get_breeds(limit=2, page=-3)

        assert fake_remote.remote_calls("list_page") == [("list_page", 2, 0)]
        assert _names(result.value) == ["Abyssinian", "Aegean"]

    def test_offline_falls_back_to_cache(self, engine, fake_remote):
        engine.initialize_app_data()
        fake_remote.offline = True

        result = engine.get_breeds(limit=2, page=1)

        assert result.ok
        assert _names(result.value) == ["Bengal", "Siamese"]

    def test_offline_with_empty_cache_returns_empty_page(self, engine, fake_remote):
        fake_remote.offline = True

        result = engine.get_breeds(limit=2, page=0)

        assert result.ok
        assert result.value == []

    def test_remote_failure_writes_nothing(self, fake_remote, sync_settings):
        database = Mock(spec=Database)
        database.get_breeds_paginated.return_value = []
        fake_remote.offline = True
        engine = CatalogSyncEngine(fake_remote, database, sync_settings)

        engine.get_breeds(limit=2, page=0)

        database.upsert_breeds.assert_not_called()

    def test_remote_error_is_primary_when_cache_also_fails(self, fake_remote, sync_settings):
        database = Mock(spec=Database)
        database.get_breeds_paginated.side_effect = CacheError("Failed to read breeds page: disk I/O error")
        fake_remote.offline = True
        engine = CatalogSyncEngine(fake_remote, database, sync_settings)

        result = engine.get_breeds(limit=2, page=0)

        assert not result.ok
        assert isinstance(result.error, TransportError)
        assert "disk I/O error" in result.error.details["suppressed_cache_error"]

    def test_search_offline_matches_cached_names_case_insensitively(self, engine, fake_remote):
        engine.initialize_app_data()
        fake_remote.offline = True

        result = engine.search_breeds("BEN")

        assert _names(result.value) == ["Bengal"]

    def test_blank_search_makes_no_remote_call(self, engine, fake_remote):
        result = engine.search_breeds("   ")

        assert result.ok
        assert result.value == []
        assert fake_remote.calls == []

    def test_search_caches_remote_results(self, engine, database):
        engine.search_breeds("abys")

        assert database.get_breed("abys") is not None
        assert database.count_breeds() == 1


class TestCounts:
    """Total count priority and cache statistics"""

    def test_initialization_count_wins_when_online(self, engine, fake_remote):
        total = engine.resolve_total_count(4, online=True)

        assert (total.value, total.source) == (4, CountSource.INITIALIZATION)
        assert fake_remote.remote_calls("list_all") == []

    def test_remote_count_when_no_initialization_count(self, engine):
        total = engine.resolve_total_count(None, online=True)

        assert (total.value, total.source) == (4, CountSource.REMOTE)

    def test_cache_count_when_offline(self, engine, fake_remote):
        engine.get_breeds(limit=2, page=0)
        fake_remote.offline = True

        total = engine.resolve_total_count(4, online=False)

        assert (total.value, total.source) == (2, CountSource.CACHE)

    def test_assumed_count_when_nothing_is_available(self, fake_remote, sync_settings):
        database = Mock(spec=Database)
        database.count_breeds.side_effect = CacheError("Failed to count breeds: locked")
        fake_remote.offline = True
        engine = CatalogSyncEngine(fake_remote, database, sync_settings)

        total = engine.resolve_total_count(None, online=False)

        assert (total.value, total.source) == (67, CountSource.ASSUMED)

    def test_total_count_falls_back_to_cache(self, engine, fake_remote):
        engine.get_breeds(limit=2, page=0)
        fake_remote.offline = True

        result = engine.get_total_breeds_count()

        assert result.value == 2

    def test_has_cached_data(self, engine):
        assert engine.has_cached_data() is False
        engine.initialize_app_data()
        assert engine.has_cached_data() is True

    def test_has_cached_data_degrades_on_cache_error(self, fake_remote, sync_settings):
        database = Mock(spec=Database)
        database.count_breeds.side_effect = CacheError("Failed to count breeds: locked")
        engine = CatalogSyncEngine(fake_remote, database, sync_settings)

        assert engine.has_cached_data() is False

    def test_last_update_time(self, engine):
        assert engine.get_last_update_time().value is None
        engine.initialize_app_data()
        assert engine.get_last_update_time().value > 0

    def test_is_online(self, engine, fake_remote):
        assert engine.is_online() is True
        fake_remote.offline = True
        assert engine.is_online() is False


class TestFavorites:
    """Favorite toggle and cache-only operations"""

    def test_toggle_flips_flag(self, engine):
        engine.initialize_app_data()

        assert engine.toggle_favorite("abys").value is True
        assert engine.toggle_favorite("abys").value is False

    def test_toggle_unknown_breed_writes_nothing(self, fake_remote, sync_settings):
        database = Mock(spec=Database)
        database.get_breed.return_value = None
        engine = CatalogSyncEngine(fake_remote, database, sync_settings)

        result = engine.toggle_favorite("nope")

        assert isinstance(result.error, NotFoundError)
        database.set_favorite.assert_not_called()

    def test_toggle_when_row_vanishes(self, fake_remote, sync_settings):
        database = Mock(spec=Database)
        database.get_breed.return_value = CatBreed(id="abys", name="Abyssinian")
        database.set_favorite.return_value = False
        engine = CatalogSyncEngine(fake_remote, database, sync_settings)

        result = engine.toggle_favorite("abys")

        assert result.kind == ErrorKind.NOT_FOUND

    def test_toggle_works_offline(self, engine, fake_remote):
        engine.initialize_app_data()
        fake_remote.offline = True

        assert engine.toggle_favorite("siam").value is True

    def test_favorites_ordered_by_name(self, engine):
        engine.initialize_app_data()
        engine.toggle_favorite("siam")
        engine.toggle_favorite("abys")

        assert _names(engine.get_favorite_breeds().value) == ["Abyssinian", "Siamese"]
        assert engine.get_favorite_breeds_count().value == 2

    def test_get_breed_by_id_not_found(self, engine):
        result = engine.get_breed_by_id("abys")

        assert result.kind == ErrorKind.NOT_FOUND
        assert "abys" in result.message

    def test_clear_cache_drops_favorites(self, engine, database):
        engine.initialize_app_data()
        engine.toggle_favorite("abys")

        assert engine.clear_cache().ok
        engine.initialize_app_data()

        assert database.get_breed("abys").is_favorite is False
        assert engine.get_favorite_breeds_count().value == 0
