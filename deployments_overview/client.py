# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""GitHub API client for deployment lookups (async, aiohttp).

Two capabilities, matching the two protocols the fetch coordinator uses:
- query_structured(): POST {base}/graphql -> {"data": ..., "errors": [...]}
- query_resource():   GET  {base}/{path}  -> JSON (dict/list), or raises

`RemoteAPIClient` is the abstract seam; tests substitute a fake implementation.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import aiohttp
import yaml

from .config import DEFAULT_API_BASE_URL, DEFAULT_TIMEOUT_S
from .exceptions import ForbiddenError, NotFoundError, TransientFailureError

_logger = logging.getLogger(__name__)


class RemoteAPIClient(ABC):
    """Remote platform collaborator injected into the fetch coordinator."""

    @abstractmethod
    async def query_structured(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run one GraphQL query and return the full response body (may carry `errors`)."""

    @abstractmethod
    async def query_resource(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a REST resource. Raises NotFoundError / ForbiddenError / TransientFailureError."""


def rest_label_for_path(path: str) -> str:
    """Coarse label for a REST path (keeps deployment ids out of stats keys)."""
    s = "/" + str(path or "").split("?", 1)[0].lstrip("/")
    if re.search(r"^/repos/[^/]+/[^/]+/deployments/\d+/statuses\b", s):
        return "deployment_statuses"
    if re.search(r"^/repos/[^/]+/[^/]+/deployments/?$", s):
        return "deployments"
    parts = [p for p in s.split("/") if p]
    if len(parts) >= 4 and parts[0] == "repos":
        return f"repos_{parts[3]}"
    return "/".join(parts[:3]) if parts else "unknown"


class GitHubDeploymentsClient(RemoteAPIClient):
    """GitHub GraphQL + REST client with automatic token detection.

    Example:
        async with GitHubDeploymentsClient() as client:
            body = await client.query_resource("/repos/owner/repo/deployments", {"per_page": 100})
    """

    @staticmethod
    def get_github_token_from_file() -> Optional[str]:
        """Get a GitHub token from a local config file.

        Environment variables are intentionally not consulted.

        Locations (first match wins):
        - ~/.config/github-token   (single line token)
        - ~/.config/gh/hosts.yml   (GitHub CLI login; oauth_token)
        """
        try:
            token_file = Path.home() / ".config" / "github-token"
            if token_file.exists():
                tok = (token_file.read_text() or "").strip()
                if tok:
                    return tok
        except OSError:
            pass
        return GitHubDeploymentsClient.get_github_token_from_cli()

    @staticmethod
    def get_github_token_from_cli(config_path: Optional[Path] = None) -> Optional[str]:
        """Read oauth_token for github.com from the GitHub CLI hosts.yml (None if absent)."""
        try:
            gh_config_path = config_path or (Path.home() / ".config" / "gh" / "hosts.yml")
            if not gh_config_path.exists():
                return None
            with open(gh_config_path, "r") as f:
                config = yaml.safe_load(f)
            github_config = config.get("github.com") if isinstance(config, dict) else None
            if not isinstance(github_config, dict):
                return None
            if github_config.get("oauth_token"):
                return str(github_config["oauth_token"])
            for _user, user_config in (github_config.get("users") or {}).items():
                if isinstance(user_config, dict) and user_config.get("oauth_token"):
                    return str(user_config["oauth_token"])
        except (OSError, yaml.YAMLError):
            pass
        return None

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_s: int = DEFAULT_TIMEOUT_S,
        require_auth: bool = False,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.token = token or self.get_github_token_from_file()
        if require_auth and not self.token:
            raise RuntimeError(
                "GitHub API authentication is required but no token was found. "
                "Pass --token, or login with gh so ~/.config/gh/hosts.yml exists."
            )
        self.base_url = str(base_url or DEFAULT_API_BASE_URL).rstrip("/")
        self.timeout_s = int(timeout_s)
        self.headers: Dict[str, str] = {"Accept": "application/vnd.github+json"}
        if self.token:
            self.headers["Authorization"] = f"token {self.token}"

        self._session = session
        self._owns_session = session is None

        self._calls_total: int = 0
        self._calls_by_label: Dict[str, int] = {}
        self._success_total: int = 0
        self._errors_total: int = 0
        self._errors_by_status: Dict[int, int] = {}
        self._time_total_s: float = 0.0

    async def __aenter__(self) -> "GitHubDeploymentsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    def has_token(self) -> bool:
        return self.token is not None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_s))
            self._owns_session = True
        return self._session

    def _record(self, *, label: str, status_code: Optional[int], dt_s: float) -> None:
        self._calls_total += 1
        self._calls_by_label[label] = int(self._calls_by_label.get(label, 0)) + 1
        self._time_total_s += max(0.0, float(dt_s))
        if status_code is None:
            self._errors_total += 1
            return
        if 200 <= status_code < 300:
            self._success_total += 1
        else:
            self._errors_total += 1
            self._errors_by_status[status_code] = int(self._errors_by_status.get(status_code, 0)) + 1

    def get_call_stats(self) -> Dict[str, Any]:
        """Per-client call stats for the current process/run."""
        return {
            "total": int(self._calls_total),
            "success_total": int(self._success_total),
            "error_total": int(self._errors_total),
            "time_total_s": float(self._time_total_s),
            "by_label": dict(sorted(self._calls_by_label.items(), key=lambda kv: (-kv[1], kv[0]))),
            "errors_by_status": dict(sorted(self._errors_by_status.items())),
        }

    @staticmethod
    def _error_message(body: Any, fallback: str) -> str:
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return fallback

    async def query_structured(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}/graphql"
        payload: Dict[str, Any] = {"query": query, "variables": dict(variables or {})}
        status_code: Optional[int] = None
        t0 = time.monotonic()
        _logger.debug("GH GraphQL POST %s", url)
        try:
            async with self._get_session().post(url, json=payload, headers=self.headers) as resp:
                status_code = int(resp.status)
                body = await resp.json(content_type=None)
                if status_code >= 400:
                    msg = self._error_message(body, str(resp.reason or ""))
                    raise TransientFailureError(
                        status_code=status_code,
                        endpoint="/graphql",
                        message=f"GitHub GraphQL returned HTTP {status_code}: {msg}",
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise TransientFailureError(
                status_code=int(status_code or 0),
                endpoint="/graphql",
                message=f"GitHub GraphQL request failed: {e}",
            ) from e
        finally:
            self._record(label="graphql", status_code=status_code, dt_s=time.monotonic() - t0)

        if not isinstance(body, dict):
            raise TransientFailureError(
                status_code=int(status_code or 0),
                endpoint="/graphql",
                message="GitHub GraphQL returned a non-object body",
            )
        return body

    async def query_resource(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        ep = "/" + str(path or "").lstrip("/")
        url = f"{self.base_url}{ep}"
        label = rest_label_for_path(ep)
        status_code: Optional[int] = None
        t0 = time.monotonic()
        _logger.debug("GH REST GET [%s] %s params=%s", label, url, params)
        try:
            async with self._get_session().get(url, params=params, headers=self.headers) as resp:
                status_code = int(resp.status)
                if status_code == 404:
                    raise NotFoundError(status_code=404, endpoint=ep, message=f"GitHub API returned 404 Not Found for {ep}")
                if status_code == 403:
                    if resp.headers.get("X-RateLimit-Remaining") == "0":
                        msg = "GitHub API rate limit exceeded"
                    else:
                        msg = f"GitHub API returned 403 Forbidden for {ep}"
                    raise ForbiddenError(status_code=403, endpoint=ep, message=msg)
                if status_code >= 400:
                    raise TransientFailureError(
                        status_code=status_code,
                        endpoint=ep,
                        message=f"HTTP {status_code}: {resp.reason or ''}".strip(),
                    )
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise TransientFailureError(
                status_code=int(status_code or 0),
                endpoint=ep,
                message=f"GitHub API request failed for {ep}: {e}",
            ) from e
        finally:
            self._record(label=label, status_code=status_code, dt_s=time.monotonic() - t0)
