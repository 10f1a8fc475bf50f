# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Engine configuration (defaults + environment overrides)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

_logger = logging.getLogger(__name__)

#
# Policy constants (single source of truth)
#
DEFAULT_CACHE_TTL_S: int = 300
# ^ How long a repository's reduced environment list is served from memory.
#   Example: two page loads 4 minutes apart reuse the first fetch; 6 minutes apart refetch.
DEFAULT_PER_PAGE: int = 100
# ^ Deployments requested per fetch cycle. GitHub caps a page at 100.
MAX_PER_PAGE: int = 100
DEFAULT_API_BASE_URL: str = "https://api.github.com"
DEFAULT_TIMEOUT_S: int = 10
DEFAULT_STATUS_CONCURRENCY: int = 1
# ^ REST fallback issues one statuses call per environment. 1 keeps them sequential.

ENV_PREFIX = "DEPLOYMENTS_OVERVIEW_"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not str(raw).strip():
        return int(default)
    try:
        return int(str(raw).strip())
    except ValueError:
        _logger.warning("Ignoring invalid %s%s=%r (expected an integer)", ENV_PREFIX, name, raw)
        return int(default)


@dataclass(frozen=True)
class EngineConfig:
    cache_ttl_s: int = DEFAULT_CACHE_TTL_S
    per_page: int = DEFAULT_PER_PAGE
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout_s: int = DEFAULT_TIMEOUT_S
    status_concurrency: int = DEFAULT_STATUS_CONCURRENCY
    # Collapse concurrent refreshes of the same repository into one fetch cycle.
    dedupe_inflight: bool = True

    def __post_init__(self) -> None:
        # frozen: normalize via object.__setattr__
        object.__setattr__(self, "cache_ttl_s", max(0, int(self.cache_ttl_s)))
        object.__setattr__(self, "per_page", min(MAX_PER_PAGE, max(1, int(self.per_page))))
        object.__setattr__(self, "api_base_url", str(self.api_base_url or DEFAULT_API_BASE_URL).rstrip("/"))
        object.__setattr__(self, "timeout_s", max(1, int(self.timeout_s)))
        object.__setattr__(self, "status_concurrency", max(1, int(self.status_concurrency)))

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build a config from DEPLOYMENTS_OVERVIEW_* variables (missing/invalid -> defaults)."""
        e = os.environ if env is None else env
        return cls(
            cache_ttl_s=_env_int(e, "CACHE_TTL_S", DEFAULT_CACHE_TTL_S),
            per_page=_env_int(e, "PER_PAGE", DEFAULT_PER_PAGE),
            api_base_url=str(e.get(ENV_PREFIX + "API_BASE_URL") or DEFAULT_API_BASE_URL),
            timeout_s=_env_int(e, "TIMEOUT_S", DEFAULT_TIMEOUT_S),
            status_concurrency=_env_int(e, "STATUS_CONCURRENCY", DEFAULT_STATUS_CONCURRENCY),
        )
