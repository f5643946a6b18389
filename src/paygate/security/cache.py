"""
Concurrency-safe certificate store keyed by serial number.

Each client owns two independent instances:
- client certificates (identify the merchant to the gateway)
- platform certificates (identify the gateway, used to verify responses)

The only mutation is insert-if-absent. Entries are never removed or expired
here; revalidation, if ever needed, belongs to an outer policy layer.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from paygate.security.certificates import CertificateRecord

logger = logging.getLogger(__name__)


class CertificateCache:
    """
    Serial → CertificateRecord map guarded by a lock.

    Safe to share across threads and across coroutines on one event loop.
    Concurrent inserts for the same serial converge: the first one wins and
    every caller observes that record afterwards.

    Usage:
        cache = CertificateCache("platform")
        if cache.try_insert_if_absent(record.serial, record):
            ...
        record = cache.try_get(serial)   # None when unknown
    """

    def __init__(self, name: str = "certificates") -> None:
        self._name = name
        self._records: Dict[str, CertificateRecord] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def try_get(self, serial: str) -> Optional[CertificateRecord]:
        """Return the cached record for serial, or None if not found."""
        with self._lock:
            return self._records.get(serial)

    def try_insert_if_absent(self, serial: str, record: CertificateRecord) -> bool:
        """
        Insert record under serial unless one is already present.

        Returns:
            True if this call inserted, False if the serial was already cached
        """
        with self._lock:
            if serial in self._records:
                return False
            self._records[serial] = record

        logger.debug("Cached %s certificate %s", self._name, serial)
        return True

    def serials(self) -> List[str]:
        with self._lock:
            return list(self._records.keys())

    def __contains__(self, serial: object) -> bool:
        with self._lock:
            return serial in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __repr__(self) -> str:
        return f"CertificateCache(name={self._name!r}, size={len(self)})"
