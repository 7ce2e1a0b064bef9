"""Tests for the time-bounded nearby landmark cache."""

import threading
import time

from landmark_locate.nearby import NearbyLandmarkCache

from conftest import FakeLandmarks, make_record


class TestRefresh:
    def test_two_calls_within_ttl_query_once(self, here, clock):
        provider = FakeLandmarks([make_record(1, 1.0)])
        cache = NearbyLandmarkCache(provider, clock=clock)

        assert cache.refresh_if_stale(here, 10.0) is True
        clock.advance(60)
        assert cache.refresh_if_stale(here, 10.0) is False

        assert provider.nearby_calls == [10.0]
        assert cache.ids() == [1]

    def test_call_after_ttl_queries_again(self, here, clock):
        provider = FakeLandmarks([make_record(1, 1.0)])
        cache = NearbyLandmarkCache(provider, clock=clock)

        cache.refresh_if_stale(here, 10.0)
        clock.advance(121)
        assert cache.refresh_if_stale(here, 10.0) is True
        assert len(provider.nearby_calls) == 2

    def test_exactly_ttl_old_is_still_fresh(self, here, clock):
        provider = FakeLandmarks([make_record(1, 1.0)])
        cache = NearbyLandmarkCache(provider, clock=clock)
        cache.refresh_if_stale(here, 10.0)
        clock.advance(120)
        assert cache.refresh_if_stale(here, 10.0) is False

    def test_empty_result_retries_with_doubled_radius(self, here, clock):
        provider = FakeLandmarks([make_record(7, 15.0)])
        cache = NearbyLandmarkCache(provider, clock=clock)

        cache.refresh_if_stale(here, 10.0)

        assert provider.nearby_calls == [10.0, 20.0]
        assert cache.ids() == [7]

    def test_empty_after_expansion_still_stamps_timestamp(self, here, clock):
        provider = FakeLandmarks([make_record(7, 80.0)])
        cache = NearbyLandmarkCache(provider, clock=clock)

        cache.refresh_if_stale(here, 10.0)
        cache.refresh_if_stale(here, 10.0)

        assert provider.nearby_calls == [10.0, 20.0]
        assert cache.landmarks() == []
        assert cache.is_stale is False

    def test_provider_error_degrades_to_empty_cache(self, here, clock):
        provider = FakeLandmarks([make_record(1)], fail=True)
        cache = NearbyLandmarkCache(provider, clock=clock)

        assert cache.refresh_if_stale(here, 10.0) is True
        assert cache.landmarks() == []
        assert cache.is_stale is False

    def test_stale_cache_reads_empty(self, here, clock):
        cache = NearbyLandmarkCache(FakeLandmarks([make_record(1)]), clock=clock)
        cache.refresh_if_stale(here, 10.0)
        clock.advance(500)
        assert cache.landmarks() == []

    def test_invalidate_forces_refresh(self, here, clock):
        provider = FakeLandmarks([make_record(1)])
        cache = NearbyLandmarkCache(provider, clock=clock)
        cache.refresh_if_stale(here, 10.0)
        cache.invalidate()
        assert cache.is_stale
        cache.refresh_if_stale(here, 10.0)
        assert len(provider.nearby_calls) == 2


class TestConcurrency:
    def test_concurrent_refreshes_issue_single_query(self, here):
        class SlowLandmarks(FakeLandmarks):
            def get_nearby(self, latitude, longitude, radius_km):
                time.sleep(0.05)
                return super().get_nearby(latitude, longitude, radius_km)

        provider = SlowLandmarks([make_record(1, 1.0)])
        cache = NearbyLandmarkCache(provider)
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            cache.refresh_if_stale(here, 10.0)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert provider.nearby_calls == [10.0]
        assert cache.ids() == [1]
