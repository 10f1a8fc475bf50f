# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
CLI: show what is deployed where for a GitHub repository.

Examples:
  python3 -m deployments_overview ai-dynamo/dynamo
  python3 -m deployments_overview ai-dynamo/dynamo --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from . import summary
from .client import GitHubDeploymentsClient
from .config import EngineConfig
from .engine import DeploymentsEngine
from .types import EnvironmentSnapshot

_logger = logging.getLogger(__name__)


def snapshot_to_dict(env: EnvironmentSnapshot) -> Dict[str, Any]:
    dep = env.deployment
    out: Dict[str, Any] = {"name": env.name, "deployment": None}
    if dep is None:
        return out
    st = dep.latest_status
    out["deployment"] = {
        "id": dep.id,
        "commit_ref": dep.commit_ref,
        "branch_or_tag": dep.branch_or_tag,
        "environment": dep.environment,
        "created_at": dep.created_at.isoformat() if dep.created_at else None,
        "latest_status": None if st is None else {
            "state": st.state.value,
            "created_at": st.created_at.isoformat() if st.created_at else None,
            "environment_url": st.environment_url,
            "log_url": st.log_url,
        },
    }
    return out


def format_table(environments: List[EnvironmentSnapshot]) -> str:
    if not environments:
        return "No deployments found."
    primary = summary.primary_environment(environments)
    rows = []
    for env in environments:
        st = env.deployment.latest_status if env.deployment else None
        url = (st.environment_url or st.log_url or "") if st else ""
        rows.append([
            ("* " if env is primary else "  ") + env.name,
            summary.status_state(env).value,
            summary.display_version(env),
            summary.time_ago(summary.last_activity(env)),
            url,
        ])
    widths = [max(len(r[i]) for r in rows) for i in range(4)]
    return "\n".join(
        "  ".join(r[i].ljust(widths[i]) for i in range(4)) + ("  " + r[4] if r[4] else "")
        for r in rows
    )


async def _run(args: argparse.Namespace) -> List[EnvironmentSnapshot]:
    config = EngineConfig.from_env()
    if args.api_base_url:
        config = replace(config, api_base_url=args.api_base_url)
    async with GitHubDeploymentsClient(args.token, base_url=config.api_base_url, timeout_s=config.timeout_s) as client:
        engine = DeploymentsEngine(client, config=config)
        environments = await engine.get_environments(args.repo)
        _logger.debug("GitHub call stats: %s", client.get_call_stats())
        return environments


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Show the latest deployment per environment for a GitHub repository.",
        epilog="Examples:\n"
               "  %(prog)s owner/repo\n"
               "  %(prog)s owner/repo --json",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("repo", help="Repository as owner/name")
    parser.add_argument("--token", default=None, help="GitHub token (default: ~/.config/github-token or gh CLI login)")
    parser.add_argument("--api-base-url", default=None, help="GitHub API base URL (default: https://api.github.com)")
    parser.add_argument("--json", action="store_true", help="Print a JSON array instead of a table")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="[%(levelname)s] %(message)s")

    environments = asyncio.run(_run(args))
    if args.json:
        print(json.dumps([snapshot_to_dict(e) for e in environments], indent=2))
    else:
        print(format_table(environments))
    return 0


if __name__ == "__main__":
    sys.exit(main())
