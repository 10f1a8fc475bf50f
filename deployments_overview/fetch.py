# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Fetch + fallback coordinator for repository deployments.

Resources:
  1) GraphQL: POST /graphql  repository.deployments(first: N, orderBy: CREATED_AT DESC)
  2) REST (fallback):
       GET /repos/{owner}/{repo}/deployments?per_page=N
       GET /repos/{owner}/{repo}/deployments/{id}/statuses?per_page=1   (one per environment)

Flow:
  - Any GraphQL failure (SSO/organization policy block, other error envelope,
    transport/HTTP failure) falls back to REST once. No other retries.
  - REST 403/404 on the listing means "no accessible deployments" -> [].
  - Every failure is logged and absorbed; fetch_environments() never raises.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import replace
from typing import Any, Dict, List, Optional

from .client import RemoteAPIClient
from .config import EngineConfig
from .exceptions import (
    DeploymentsAPIError,
    ForbiddenError,
    NotFoundError,
    PolicyBlockedError,
    TransientFailureError,
)
from .normalize import normalize_resource, normalize_status, normalize_structured, SourceProtocol
from .reduce import LatestDeploymentIndex, reduce_latest_per_environment
from .types import Deployment, EnvironmentSnapshot, RepoIdentity

_logger = logging.getLogger(__name__)

DEPLOYMENTS_QUERY = """
query($owner: String!, $name: String!, $first: Int!) {
  repository(owner: $owner, name: $name) {
    deployments(first: $first, orderBy: {field: CREATED_AT, direction: DESC}) {
      nodes {
        id
        commit { oid }
        ref { name }
        environment
        createdAt
        latestStatus {
          state
          createdAt
          environmentUrl
          logUrl
        }
      }
    }
  }
}
"""

_POLICY_BLOCK_RE = re.compile(r"\bsaml\b|\bsso\b|single[\s-]sign[\s-]on|organization", re.IGNORECASE)


def is_policy_block_message(message: Optional[str]) -> bool:
    """True when an error message says GraphQL is blocked by SSO / organization policy.

    Free-text heuristic; swap this function out if GitHub ever exposes a structured code.
    """
    return bool(_POLICY_BLOCK_RE.search(str(message or "")))


class DeploymentsFetcher:
    def __init__(self, client: RemoteAPIClient, *, config: Optional[EngineConfig] = None):
        self.client = client
        self.config = config or EngineConfig()

    async def fetch_environments(self, repo: RepoIdentity) -> List[EnvironmentSnapshot]:
        try:
            return await self.fetch_structured(repo)
        except PolicyBlockedError as e:
            _logger.warning("GraphQL deployments query for %s blocked by SAML/organization policy, trying REST API: %s", repo, e)
        except Exception as e:
            _logger.warning("GraphQL deployments query for %s failed, falling back to REST: %s", repo, e)
        return await self.fetch_resource(repo)

    async def fetch_structured(self, repo: RepoIdentity) -> List[EnvironmentSnapshot]:
        """Primary path. Raises PolicyBlockedError or TransientFailureError."""
        variables = {"owner": repo.owner, "name": repo.name, "first": self.config.per_page}
        try:
            body = await self.client.query_structured(DEPLOYMENTS_QUERY, variables)
        except PolicyBlockedError:
            raise
        except DeploymentsAPIError as e:
            if is_policy_block_message(str(e)):
                raise PolicyBlockedError(status_code=e.status_code, endpoint=e.endpoint, message=str(e)) from e
            raise TransientFailureError(status_code=e.status_code, endpoint=e.endpoint, message=str(e)) from e

        errors = body.get("errors") if isinstance(body, dict) else None
        if isinstance(errors, list) and errors:
            first = errors[0] if isinstance(errors[0], dict) else {}
            message = str(first.get("message") or "")
            if is_policy_block_message(message):
                raise PolicyBlockedError(status_code=0, endpoint="/graphql", message=message)
            raise TransientFailureError(status_code=0, endpoint="/graphql", message=f"GraphQL Error: {message}")

        if isinstance(body, dict) and "data" not in body:
            # bare {"message": ...} envelope (no data, no errors list)
            message = str(body.get("message") or "GraphQL response has no data")
            if is_policy_block_message(message):
                raise PolicyBlockedError(status_code=0, endpoint="/graphql", message=message)
            raise TransientFailureError(status_code=0, endpoint="/graphql", message=f"GraphQL Error: {message}")

        nodes = self._structured_nodes(body)
        if nodes is None:
            raise TransientFailureError(status_code=0, endpoint="/graphql", message="GraphQL response has no deployments payload")
        deployments = [normalize_structured(n) for n in nodes if isinstance(n, dict)]
        return reduce_latest_per_environment(deployments)

    @staticmethod
    def _structured_nodes(body: Any) -> Optional[List[Any]]:
        """repository.deployments.nodes; [] for a repo with no deployments, None for a malformed body."""
        if not isinstance(body, dict):
            return None
        data = body.get("data")
        if not isinstance(data, dict):
            return None
        repository = data.get("repository")
        if repository is None:
            return []
        if not isinstance(repository, dict):
            return None
        nodes = (repository.get("deployments") or {}).get("nodes")
        if nodes is None:
            return []
        return nodes if isinstance(nodes, list) else None

    async def fetch_resource(self, repo: RepoIdentity) -> List[EnvironmentSnapshot]:
        """Secondary path. Never raises; 403/404 and failures yield []."""
        try:
            raw = await self.client.query_resource(
                f"/repos/{repo.owner}/{repo.name}/deployments",
                {"per_page": self.config.per_page},
            )
        except NotFoundError:
            _logger.info("Repository %s not found or no deployments endpoint access", repo)
            return []
        except ForbiddenError as e:
            _logger.info("Access denied to deployments API for %s (may require an organization token): %s", repo, e)
            return []
        except Exception as e:
            _logger.error("Failed to fetch deployments for %s: %s", repo, e)
            return []

        if not isinstance(raw, list):
            _logger.error("Failed to fetch deployments for %s: unexpected response type %s", repo, type(raw).__name__)
            return []

        index = LatestDeploymentIndex()
        for rec in raw:
            if isinstance(rec, dict):
                index.offer(normalize_resource(rec))

        try:
            await self._attach_latest_statuses(repo, index)
        except Exception as e:
            _logger.error("Failed to fetch deployment statuses for %s: %s", repo, e)
            return []
        return index.snapshots()

    async def _attach_latest_statuses(self, repo: RepoIdentity, index: LatestDeploymentIndex) -> None:
        """One statuses call per surviving deployment (i.e. per environment).

        Each result lands in its own environment slot, so completion order is irrelevant.
        """
        sem = asyncio.Semaphore(self.config.status_concurrency)

        async def _one(dep: Deployment) -> None:
            async with sem:
                status_raw = await self._latest_status_raw(repo, dep)
            status = normalize_status(status_raw, SourceProtocol.RESOURCE)
            if status is not None:
                index.replace(replace(dep, latest_status=status))

        candidates = index.deployments()
        if self.config.status_concurrency <= 1:
            for dep in candidates:
                await _one(dep)
            return
        tasks = [asyncio.ensure_future(_one(dep)) for dep in candidates]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # first failure (or our own cancellation) stops the remaining status calls
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _latest_status_raw(self, repo: RepoIdentity, dep: Deployment) -> Optional[Dict[str, Any]]:
        try:
            statuses = await self.client.query_resource(
                f"/repos/{repo.owner}/{repo.name}/deployments/{dep.id}/statuses",
                {"per_page": 1},
            )
        except (NotFoundError, ForbiddenError) as e:
            _logger.info("No accessible statuses for deployment %s (%s): %s", dep.id, dep.environment, e)
            return None
        if isinstance(statuses, list) and statuses and isinstance(statuses[0], dict):
            return statuses[0]
        return None

