"""
Tests for the concurrency-safe certificate cache.
"""

import asyncio
import threading

import pytest

from paygate.security.cache import CertificateCache


class TestCertificateCache:
    def test_miss_returns_none(self):
        cache = CertificateCache("platform")
        assert cache.try_get("UNKNOWN") is None
        assert "UNKNOWN" not in cache
        assert len(cache) == 0

    def test_insert_then_get(self, platform_certificate):
        cache = CertificateCache("platform")
        assert cache.try_insert_if_absent(platform_certificate.serial, platform_certificate)
        assert cache.try_get(platform_certificate.serial) is platform_certificate
        assert platform_certificate.serial in cache
        assert cache.serials() == [platform_certificate.serial]

    def test_insert_does_not_overwrite(self, platform_certificate, client_certificate):
        cache = CertificateCache("platform")
        serial = platform_certificate.serial
        assert cache.try_insert_if_absent(serial, platform_certificate)
        assert not cache.try_insert_if_absent(serial, client_certificate)
        assert cache.try_get(serial) is platform_certificate

    def test_instances_are_independent(self, platform_certificate):
        client = CertificateCache("client")
        platform = CertificateCache("platform")
        platform.try_insert_if_absent(platform_certificate.serial, platform_certificate)
        assert client.try_get(platform_certificate.serial) is None
        assert len(platform) == 1

    def test_concurrent_threads_converge(self, make_record, platform_key):
        cache = CertificateCache("platform")
        records = [make_record(platform_key, 1000 + i) for i in range(8)]
        barrier = threading.Barrier(len(records))
        outcomes = []
        lock = threading.Lock()

        def worker(record):
            barrier.wait()
            inserted = cache.try_insert_if_absent("SHARED", record)
            with lock:
                outcomes.append(inserted)

        threads = [threading.Thread(target=worker, args=(r,)) for r in records]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count(True) == 1
        winner = cache.try_get("SHARED")
        assert winner in records
        assert len(cache) == 1

        observed = []

        def reader():
            observed.append(cache.try_get("SHARED"))

        readers = [threading.Thread(target=reader) for _ in range(8)]
        for t in readers:
            t.start()
        for t in readers:
            t.join()
        assert all(r is winner for r in observed)

    @pytest.mark.asyncio
    async def test_concurrent_coroutines_converge(self, make_record, platform_key):
        cache = CertificateCache("platform")
        records = [make_record(platform_key, 2000 + i) for i in range(5)]

        async def insert(record):
            await asyncio.sleep(0)
            return cache.try_insert_if_absent("SHARED", record)

        results = await asyncio.gather(*(insert(r) for r in records))
        assert results.count(True) == 1
        assert cache.try_get("SHARED") is records[results.index(True)]
