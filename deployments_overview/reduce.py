# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Reduce deployment history to the latest deployment per environment.

Records are usually requested newest-first, but ordering is never assumed: every
record is compared. Output order is first-insertion order of environment names.

Tie-break: a record replaces the stored one only when its created_at is strictly
later, so with identical timestamps the record seen first stays. This mirrors the
upstream date comparison and is not a guarantee callers should rely on.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .types import Deployment, EnvironmentSnapshot


class LatestDeploymentIndex:
    """Ordered environment -> latest Deployment map (single-pass reducer state)."""

    def __init__(self) -> None:
        self._by_env: Dict[str, Deployment] = {}

    def __len__(self) -> int:
        return len(self._by_env)

    def get(self, environment: str) -> Optional[Deployment]:
        return self._by_env.get(environment)

    def is_newer(self, deployment: Deployment) -> bool:
        """True when `deployment` would be inserted or would replace the stored one."""
        current = self._by_env.get(deployment.environment)
        if current is None:
            return True
        if deployment.created_at is None or current.created_at is None:
            return False
        return deployment.created_at > current.created_at

    def offer(self, deployment: Deployment) -> bool:
        if not self.is_newer(deployment):
            return False
        # dict keeps the original insertion slot on replace
        self._by_env[deployment.environment] = deployment
        return True

    def replace(self, deployment: Deployment) -> None:
        """Overwrite the slot for an environment already present (e.g. to attach a status)."""
        if deployment.environment not in self._by_env:
            raise KeyError(deployment.environment)
        self._by_env[deployment.environment] = deployment

    def deployments(self) -> List[Deployment]:
        return list(self._by_env.values())

    def snapshots(self) -> List[EnvironmentSnapshot]:
        return [EnvironmentSnapshot(name=env, deployment=dep) for env, dep in self._by_env.items()]


def reduce_latest_per_environment(deployments: Iterable[Deployment]) -> List[EnvironmentSnapshot]:
    index = LatestDeploymentIndex()
    for d in deployments:
        index.offer(d)
    return index.snapshots()
