# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Data-level helpers for consumers of the environment list (no rendering here)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from .types import DeploymentState, EnvironmentSnapshot

PRIMARY_ENVIRONMENT_NAMES = ("prod", "production", "main", "master")


def primary_environment(environments: Sequence[EnvironmentSnapshot]) -> Optional[EnvironmentSnapshot]:
    """First "production-like" environment (case-insensitive), else the first one."""
    for env in environments:
        if env.name.lower() in PRIMARY_ENVIRONMENT_NAMES:
            return env
    return environments[0] if environments else None


def environments_for_commit(environments: Iterable[EnvironmentSnapshot], head_sha: str) -> List[EnvironmentSnapshot]:
    """Environments whose deployment commit starts with `head_sha` (abbreviated SHAs are fine)."""
    prefix = str(head_sha or "").strip()
    if not prefix:
        return []
    return [e for e in environments if e.deployment is not None and e.deployment.commit_ref.startswith(prefix)]


def environments_for_release(environments: Iterable[EnvironmentSnapshot], tag: str) -> List[EnvironmentSnapshot]:
    t = str(tag or "").strip()
    if not t:
        return []
    return [e for e in environments if e.deployment is not None and e.deployment.branch_or_tag == t]


def format_sha(sha: Optional[str]) -> str:
    return sha[:7] if sha else "unknown"


def status_state(env: EnvironmentSnapshot) -> DeploymentState:
    dep = env.deployment
    if dep is None or dep.latest_status is None:
        return DeploymentState.UNKNOWN
    return dep.latest_status.state


def display_version(env: EnvironmentSnapshot) -> str:
    dep = env.deployment
    if dep is None:
        return "N/A"
    return dep.branch_or_tag or format_sha(dep.commit_ref)


def last_activity(env: EnvironmentSnapshot) -> Optional[datetime]:
    """Latest status time, falling back to the deployment creation time."""
    dep = env.deployment
    if dep is None:
        return None
    if dep.latest_status is not None and dep.latest_status.created_at is not None:
        return dep.latest_status.created_at
    return dep.created_at


def time_ago(ts: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Compact relative age: "3d ago", "2h ago", "5m ago", "just now"."""
    if ts is None:
        return ""
    ref = now or datetime.now(timezone.utc)
    seconds = int((ref - ts).total_seconds())
    days, hours, minutes = seconds // 86400, seconds // 3600, seconds // 60
    if days > 0:
        return f"{days}d ago"
    if hours > 0:
        return f"{hours}h ago"
    if minutes > 0:
        return f"{minutes}m ago"
    return "just now"
