# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Normalize GitHub deployment records (GraphQL or REST) into `types.Deployment`.

GraphQL node (repository.deployments.nodes[]):
  {
    "id": "DE_kwDOABCD1234",
    "commit": {"oid": "21a03b316dc1e5031183965e5798b0d9fe2e64b3"},
    "ref": {"name": "main"},
    "environment": "production",
    "createdAt": "2026-01-24T10:30:00Z",
    "latestStatus": {
      "state": "SUCCESS",
      "createdAt": "2026-01-24T10:32:10Z",
      "environmentUrl": "https://app.example.com",
      "logUrl": "https://github.com/owner/repo/actions/runs/1"
    }
  }

REST deployment (GET /repos/{owner}/{repo}/deployments):
  {"id": 1234567, "sha": "21a03b3...", "ref": "main", "environment": "production",
   "created_at": "2026-01-24T10:30:00Z", ...}

REST status (GET /repos/{owner}/{repo}/deployments/{id}/statuses?per_page=1):
  [{"state": "success", "created_at": "...", "environment_url": "...", "log_url": "..."}]

Missing commit SHA / ref map to the literal "unknown" (display code treats it as a
renderable value). Every other missing optional field maps to None.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from .types import Deployment, DeploymentState, DeploymentStatus

UNKNOWN_REF = "unknown"


class SourceProtocol(str, Enum):
    STRUCTURED = "graphql"
    RESOURCE = "rest"


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp ("...Z" accepted) into an aware UTC datetime, or None."""
    s = str(raw or "").strip()
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _opt_str(raw: Any) -> Optional[str]:
    s = str(raw).strip() if raw is not None else ""
    return s or None


def _field(raw: Dict[str, Any], structured_name: str, rest_name: str, source: SourceProtocol) -> Any:
    return raw.get(structured_name if source == SourceProtocol.STRUCTURED else rest_name)


def normalize_status(raw: Any, source: SourceProtocol) -> Optional[DeploymentStatus]:
    """Map one status record; None when the platform returned no status."""
    if not isinstance(raw, dict) or not raw:
        return None
    return DeploymentStatus(
        state=DeploymentState.parse(raw.get("state")),
        created_at=parse_timestamp(_field(raw, "createdAt", "created_at", source)),
        environment_url=_opt_str(_field(raw, "environmentUrl", "environment_url", source)),
        log_url=_opt_str(_field(raw, "logUrl", "log_url", source)),
    )


def normalize_structured(node: Dict[str, Any]) -> Deployment:
    commit = node.get("commit") if isinstance(node.get("commit"), dict) else {}
    ref = node.get("ref") if isinstance(node.get("ref"), dict) else {}
    return Deployment(
        id=str(node.get("id") or ""),
        commit_ref=_opt_str(commit.get("oid")) or UNKNOWN_REF,
        branch_or_tag=_opt_str(ref.get("name")) or UNKNOWN_REF,
        environment=str(node.get("environment") or ""),
        created_at=parse_timestamp(node.get("createdAt")),
        latest_status=normalize_status(node.get("latestStatus"), SourceProtocol.STRUCTURED),
    )


def normalize_resource(raw: Dict[str, Any], status: Any = None) -> Deployment:
    """REST deployment record; `status` is the first element of the statuses listing (if any)."""
    return Deployment(
        id=str(raw.get("id") if raw.get("id") is not None else ""),
        commit_ref=_opt_str(raw.get("sha")) or UNKNOWN_REF,
        branch_or_tag=_opt_str(raw.get("ref")) or UNKNOWN_REF,
        environment=str(raw.get("environment") or ""),
        created_at=parse_timestamp(raw.get("created_at")),
        latest_status=normalize_status(status, SourceProtocol.RESOURCE),
    )


def normalize(raw: Dict[str, Any], source: SourceProtocol) -> Deployment:
    if source == SourceProtocol.STRUCTURED:
        return normalize_structured(raw)
    return normalize_resource(raw, raw.get("latestStatus"))
