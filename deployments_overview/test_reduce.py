# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Pytest tests for reduce.py (latest deployment per environment)."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from deployments_overview.reduce import LatestDeploymentIndex, reduce_latest_per_environment
from deployments_overview.types import Deployment

BASE = datetime(2026, 1, 1, tzinfo=timezone.utc)


def dep(env: str, seconds, dep_id: str = "") -> Deployment:
    created = None if seconds is None else BASE + timedelta(seconds=seconds)
    return Deployment(
        id=dep_id or f"{env}-{seconds}",
        commit_ref="abc1234",
        branch_or_tag="main",
        environment=env,
        created_at=created,
    )


def test_one_entry_per_environment_and_latest_wins():
    rng = random.Random(1234)
    envs = ["production", "staging", "Production", "qa"]
    records = [dep(rng.choice(envs), rng.randint(0, 500), dep_id=str(i)) for i in range(200)]

    out = reduce_latest_per_environment(records)

    names = [s.name for s in out]
    assert len(names) == len(set(names))
    for snap in out:
        assert snap.deployment.environment == snap.name
        same_env = [r.created_at for r in records if r.environment == snap.name]
        assert snap.deployment.created_at == max(same_env)


def test_unsorted_input_later_record_replaces():
    out = reduce_latest_per_environment([dep("staging", 5), dep("staging", 8), dep("staging", 2)])
    assert len(out) == 1
    assert out[0].deployment.id == "staging-8"


def test_output_follows_first_insertion_order():
    out = reduce_latest_per_environment([dep("zeta", 1), dep("alpha", 9), dep("zeta", 20), dep("mid", 3)])
    assert [s.name for s in out] == ["zeta", "alpha", "mid"]
    assert out[0].deployment.id == "zeta-20"


def test_environment_names_are_case_sensitive():
    out = reduce_latest_per_environment([dep("prod", 1), dep("Prod", 2)])
    assert [s.name for s in out] == ["prod", "Prod"]


def test_identical_timestamps_keep_first_seen():
    out = reduce_latest_per_environment([dep("prod", 5, "first"), dep("prod", 5, "second")])
    assert out[0].deployment.id == "first"


def test_missing_timestamp_never_replaces():
    out = reduce_latest_per_environment([dep("prod", 5, "dated"), dep("prod", None, "undated")])
    assert out[0].deployment.id == "dated"
    out = reduce_latest_per_environment([dep("prod", None, "undated"), dep("prod", 5, "dated")])
    assert out[0].deployment.id == "undated"


def test_empty_input():
    assert reduce_latest_per_environment([]) == []


def test_index_offer_and_replace():
    index = LatestDeploymentIndex()
    assert index.offer(dep("prod", 5))
    assert not index.offer(dep("prod", 4))
    assert index.is_newer(dep("prod", 6))
    assert len(index) == 1

    index.replace(dep("prod", 5, "with-status"))
    assert index.get("prod").id == "with-status"
    with pytest.raises(KeyError):
        index.replace(dep("qa", 1))
