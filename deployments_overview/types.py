# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Shared model types used by every layer of `deployments_overview`:
- `normalize.py` builds them from raw GraphQL / REST records
- `reduce.py` and `cache.py` pass them around unchanged
- `summary.py` and the CLI read them

This module MUST NOT import any other `deployments_overview` module to avoid cycles.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class DeploymentState(str, Enum):
    """Canonical lower-case deployment status states.

    UNKNOWN is our own sentinel for a missing/unparseable state; GitHub never sends it.
    """

    SUCCESS = "success"
    ERROR = "error"
    FAILURE = "failure"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    QUEUED = "queued"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "DeploymentState":
        """Map a wire token (GraphQL 'IN_PROGRESS' or REST 'in_progress') to a state."""
        s = str(raw or "").strip().lower()
        try:
            return cls(s)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class RepoIdentity:
    """Repository identity; `key` is the case-sensitive "owner/name" cache key."""

    owner: str
    name: str

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, text: str) -> "RepoIdentity":
        """Parse "owner/name". Raises ValueError on anything else."""
        s = str(text or "").strip()
        parts = s.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Invalid repository key (expected 'owner/name'): {text!r}")
        return cls(owner=parts[0], name=parts[1])

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class DeploymentStatus:
    state: DeploymentState
    created_at: Optional[datetime] = None
    environment_url: Optional[str] = None
    log_url: Optional[str] = None


@dataclass(frozen=True)
class Deployment:
    id: str
    commit_ref: str
    branch_or_tag: str
    # Join key for grouping; exact, case-sensitive.
    environment: str
    created_at: Optional[datetime]
    latest_status: Optional[DeploymentStatus] = None


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """One-per-environment view handed to consumers."""

    name: str
    deployment: Optional[Deployment] = None
