# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Deployment aggregation for GitHub repositories ("what is live where").

Layout:
- `client.py`     GitHub GraphQL + REST client (aiohttp) and the RemoteAPIClient seam
- `fetch.py`      GraphQL-first fetch with REST fallback
- `normalize.py`  wire records -> Deployment / DeploymentStatus
- `reduce.py`     latest deployment per environment
- `cache.py`      per-repository TTL cache
- `engine.py`     public entry point (never raises)
- `summary.py`    consumer helpers (primary env, commit/release matching, ages)
"""

from .cache import CacheEntry, RepositoryCache  # noqa: F401
from .client import GitHubDeploymentsClient, RemoteAPIClient  # noqa: F401
from .config import EngineConfig  # noqa: F401
from .engine import DeploymentsEngine  # noqa: F401
from .exceptions import (  # noqa: F401
    DeploymentsAPIError,
    ForbiddenError,
    NotFoundError,
    PolicyBlockedError,
    TransientFailureError,
)
from .fetch import DeploymentsFetcher, is_policy_block_message  # noqa: F401
from .normalize import normalize, SourceProtocol  # noqa: F401
from .reduce import reduce_latest_per_environment  # noqa: F401
from .types import (  # noqa: F401
    Deployment,
    DeploymentState,
    DeploymentStatus,
    EnvironmentSnapshot,
    RepoIdentity,
)

__all__ = [
    "CacheEntry",
    "Deployment",
    "DeploymentsAPIError",
    "DeploymentsEngine",
    "DeploymentsFetcher",
    "DeploymentState",
    "DeploymentStatus",
    "EngineConfig",
    "EnvironmentSnapshot",
    "ForbiddenError",
    "GitHubDeploymentsClient",
    "is_policy_block_message",
    "normalize",
    "NotFoundError",
    "PolicyBlockedError",
    "reduce_latest_per_environment",
    "RemoteAPIClient",
    "RepoIdentity",
    "RepositoryCache",
    "SourceProtocol",
    "TransientFailureError",
]
