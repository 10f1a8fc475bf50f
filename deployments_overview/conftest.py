# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Shared test helpers: an in-memory RemoteAPIClient that records every call, plus wire-record builders."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from deployments_overview.client import RemoteAPIClient


def ts(seconds: int) -> str:
    """ISO timestamp `seconds` after a fixed base (2026-01-01T00:00:00Z)."""
    return f"2026-01-01T00:{seconds // 60:02d}:{seconds % 60:02d}Z"


class FakeRemoteClient(RemoteAPIClient):
    """Responses are plain values or exception instances (raised when hit)."""

    def __init__(self, *, structured: Any = None, resources: Optional[Dict[str, Any]] = None):
        self.structured = structured if structured is not None else {"data": {"repository": None}}
        self.resources: Dict[str, Any] = dict(resources or {})
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []

    def calls_of(self, kind: str) -> List[Tuple[str, str, Optional[Dict[str, Any]]]]:
        return [c for c in self.calls if c[0] == kind]

    async def query_structured(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append(("graphql", query, dict(variables or {})))
        if isinstance(self.structured, BaseException):
            raise self.structured
        return self.structured

    async def query_resource(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append(("rest", path, dict(params or {})))
        if path not in self.resources:
            raise AssertionError(f"unexpected REST path {path}")
        val = self.resources[path]
        if isinstance(val, BaseException):
            raise val
        return val


def graphql_node(env: str, seconds: int, state: Optional[str] = "SUCCESS", *, node_id: Optional[str] = None,
                 sha: str = "21a03b316dc1e5031183965e5798b0d9fe2e64b3", ref: Optional[str] = "main") -> Dict[str, Any]:
    return {
        "id": node_id or f"DE_{env}_{seconds}",
        "commit": {"oid": sha},
        "ref": {"name": ref} if ref else None,
        "environment": env,
        "createdAt": ts(seconds),
        "latestStatus": None if state is None else {
            "state": state,
            "createdAt": ts(seconds + 1),
            "environmentUrl": f"https://{env}.example.com",
            "logUrl": None,
        },
    }


def graphql_body(*nodes: Dict[str, Any]) -> Dict[str, Any]:
    return {"data": {"repository": {"deployments": {"nodes": list(nodes)}}}}


def rest_deployment(dep_id: int, env: str, seconds: int, *, sha: Optional[str] = "abc1234def", ref: Optional[str] = "main") -> Dict[str, Any]:
    rec: Dict[str, Any] = {"id": dep_id, "environment": env, "created_at": ts(seconds)}
    if sha is not None:
        rec["sha"] = sha
    if ref is not None:
        rec["ref"] = ref
    return rec


def rest_status(state: str, seconds: int, url: Optional[str] = None) -> List[Dict[str, Any]]:
    return [{"state": state, "created_at": ts(seconds), "environment_url": url, "log_url": None}]
