# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""In-memory per-repository cache for reduced environment lists.

Key format:  "{owner}/{name}"  (case-sensitive)
TTL policy:  fixed window (default 5m) measured from fetched_at; checked lazily on read.
Persistence: none. Entries live as long as the owning engine.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from .config import DEFAULT_CACHE_TTL_S
from .types import EnvironmentSnapshot


@dataclass
class RepositoryCacheStats:
    hit: int = 0
    miss: int = 0
    expired: int = 0
    write: int = 0


@dataclass(frozen=True)
class CacheEntry:
    data: Tuple[EnvironmentSnapshot, ...]
    fetched_at: float


class RepositoryCache:
    """Owned (not module-global) store: one immutable CacheEntry per repository key.

    Only touched from the event loop, so no thread lock. A multi-threaded host
    must guard get()/put() itself.
    """

    def __init__(self, *, ttl_s: int = DEFAULT_CACHE_TTL_S, clock: Callable[[], float] = time.time):
        self.ttl_s = max(0, int(ttl_s))
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.stats = RepositoryCacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def is_fresh(self, entry: CacheEntry, *, now: Optional[float] = None) -> bool:
        t = self._clock() if now is None else float(now)
        return (t - entry.fetched_at) < self.ttl_s

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            self.stats.miss += 1
            return None
        if not self.is_fresh(entry):
            self.stats.expired += 1
            return None
        self.stats.hit += 1
        return entry

    def put(self, key: str, data: Iterable[EnvironmentSnapshot]) -> CacheEntry:
        """Store a new entry, replacing any previous one for `key` wholesale."""
        entry = CacheEntry(data=tuple(data), fetched_at=float(self._clock()))
        self._entries[key] = entry
        self.stats.write += 1
        return entry

    def clear(self) -> None:
        self._entries.clear()
