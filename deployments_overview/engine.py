# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Deployment aggregation engine: cache lookup -> TTL check -> fetch -> cache write.

Public surface is a single coroutine, `get_environments(repo)`, which never raises.
Every failure degrades to an empty list and is reported through logging only.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Union

from .cache import RepositoryCache
from .client import RemoteAPIClient
from .config import EngineConfig
from .fetch import DeploymentsFetcher
from .types import EnvironmentSnapshot, RepoIdentity

_logger = logging.getLogger(__name__)

RepoResolver = Callable[[], Optional[RepoIdentity]]


class DeploymentsEngine:
    """Owns one RepositoryCache; share an engine to share its cache.

    Example:
        async with GitHubDeploymentsClient() as client:
            engine = DeploymentsEngine(client)
            envs = await engine.get_environments("owner/repo")
    """

    def __init__(
        self,
        client: RemoteAPIClient,
        *,
        config: Optional[EngineConfig] = None,
        cache: Optional[RepositoryCache] = None,
        resolver: Optional[RepoResolver] = None,
    ):
        self.config = config or EngineConfig()
        self.cache = cache if cache is not None else RepositoryCache(ttl_s=self.config.cache_ttl_s)
        self.fetcher = DeploymentsFetcher(client, config=self.config)
        self.resolver = resolver
        # In-flight refreshes keyed by "owner/name"; concurrent misses await the same task.
        self._inflight: Dict[str, "asyncio.Task[List[EnvironmentSnapshot]]"] = {}

    async def get_environments(self, repo: Union[RepoIdentity, str]) -> List[EnvironmentSnapshot]:
        try:
            ident = repo if isinstance(repo, RepoIdentity) else RepoIdentity.parse(str(repo))
        except ValueError as e:
            _logger.warning("Skipping deployments lookup: %s", e)
            return []

        try:
            return await self._get_or_refresh(ident)
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.exception("Unexpected failure while loading deployments for %s", ident)
            return []

    async def get_current_environments(self) -> List[EnvironmentSnapshot]:
        """Resolve the repository through the injected resolver, then delegate."""
        if self.resolver is None:
            return []
        try:
            ident = self.resolver()
        except Exception:
            _logger.exception("Repository resolver failed")
            return []
        if ident is None:
            return []
        return await self.get_environments(ident)

    async def _get_or_refresh(self, ident: RepoIdentity) -> List[EnvironmentSnapshot]:
        key = ident.key
        entry = self.cache.get(key)
        if entry is not None:
            return list(entry.data)

        if not self.config.dedupe_inflight:
            return await self._refresh(ident)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(ident))
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._inflight.pop(k, None))
        # shield: one abandoned caller must not cancel the refresh for the others
        return list(await asyncio.shield(task))

    async def _refresh(self, ident: RepoIdentity) -> List[EnvironmentSnapshot]:
        _logger.debug("Refreshing deployments for %s", ident)
        environments = await self.fetcher.fetch_environments(ident)
        entry = self.cache.put(ident.key, environments)
        return list(entry.data)
