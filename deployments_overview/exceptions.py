# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Deployment API error types.

These are intentionally lightweight so the fetch coordinator can catch specific
error classes (e.g. 404 Not Found vs. an SSO policy block) without importing the
aiohttp client.
"""

from __future__ import annotations


class DeploymentsAPIError(Exception):
    def __init__(self, *, status_code: int, endpoint: str, message: str):
        super().__init__(message)
        self.status_code = int(status_code)
        self.endpoint = str(endpoint or "")


class PolicyBlockedError(DeploymentsAPIError):
    """GraphQL refused for organization / SAML SSO policy reasons."""


class ForbiddenError(DeploymentsAPIError):
    pass


class NotFoundError(DeploymentsAPIError):
    pass


class TransientFailureError(DeploymentsAPIError):
    """Any other network, HTTP or parse failure."""
