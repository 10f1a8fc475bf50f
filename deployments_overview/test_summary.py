# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Pytest tests for summary.py consumer helpers and the CLI formatting."""

import json
from datetime import datetime, timedelta, timezone

from deployments_overview import cli, summary
from deployments_overview.types import Deployment, DeploymentState, DeploymentStatus, EnvironmentSnapshot

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def snap(name, sha="21a03b316dc1e5031183965e5798b0d9fe2e64b3", ref="main", state=None, url=None):
    status = None if state is None else DeploymentStatus(state=state, created_at=NOW - timedelta(hours=2), environment_url=url)
    dep = Deployment(id=name, commit_ref=sha, branch_or_tag=ref, environment=name,
                     created_at=NOW - timedelta(days=1), latest_status=status)
    return EnvironmentSnapshot(name=name, deployment=dep)


def test_primary_environment_prefers_production_names():
    envs = [snap("staging"), snap("Production"), snap("prod")]
    assert summary.primary_environment(envs).name == "Production"
    assert summary.primary_environment([snap("qa"), snap("dev")]).name == "qa"
    assert summary.primary_environment([]) is None


def test_environments_for_commit_prefix_match():
    envs = [snap("production", sha="abc1234ffff"), snap("staging", sha="def5678"), EnvironmentSnapshot(name="empty")]
    assert [e.name for e in summary.environments_for_commit(envs, "abc1234")] == ["production"]
    assert summary.environments_for_commit(envs, "") == []


def test_environments_for_release_exact_ref():
    envs = [snap("production", ref="v1.2.0"), snap("staging", ref="v1.2.0-rc1")]
    assert [e.name for e in summary.environments_for_release(envs, "v1.2.0")] == ["production"]


def test_format_sha_and_display_version():
    assert summary.format_sha("21a03b316dc1e5031183965e5798b0d9fe2e64b3") == "21a03b3"
    assert summary.format_sha(None) == "unknown"
    assert summary.format_sha("") == "unknown"
    assert summary.display_version(snap("p", ref="v2")) == "v2"
    assert summary.display_version(snap("p", ref="")) == "21a03b3"
    assert summary.display_version(EnvironmentSnapshot(name="p")) == "N/A"


def test_status_state_and_last_activity():
    s = snap("production", state=DeploymentState.SUCCESS)
    assert summary.status_state(s) == DeploymentState.SUCCESS
    assert summary.last_activity(s) == NOW - timedelta(hours=2)

    bare = snap("qa")
    assert summary.status_state(bare) == DeploymentState.UNKNOWN
    assert summary.last_activity(bare) == NOW - timedelta(days=1)
    assert summary.last_activity(EnvironmentSnapshot(name="x")) is None


def test_time_ago():
    assert summary.time_ago(NOW - timedelta(days=3, hours=5), NOW) == "3d ago"
    assert summary.time_ago(NOW - timedelta(hours=2, minutes=59), NOW) == "2h ago"
    assert summary.time_ago(NOW - timedelta(minutes=5), NOW) == "5m ago"
    assert summary.time_ago(NOW - timedelta(seconds=30), NOW) == "just now"
    assert summary.time_ago(None, NOW) == ""


def test_cli_table_marks_primary_and_shows_url():
    envs = [snap("staging", state=DeploymentState.PENDING), snap("production", state=DeploymentState.SUCCESS, url="https://app")]
    lines = cli.format_table(envs).splitlines()
    assert lines[0].startswith("  staging")
    assert lines[1].startswith("* production")
    assert "success" in lines[1] and lines[1].endswith("https://app")
    assert cli.format_table([]) == "No deployments found."


def test_cli_json_shape():
    d = cli.snapshot_to_dict(snap("production", state=DeploymentState.IN_PROGRESS))
    assert json.loads(json.dumps(d))["deployment"]["latest_status"]["state"] == "in_progress"
    assert cli.snapshot_to_dict(EnvironmentSnapshot(name="x")) == {"name": "x", "deployment": None}
