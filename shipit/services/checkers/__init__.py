# SPDX-License-Identifier: MIT
"""Preflight checks run before the release touches anything."""

from shipit.services.checkers.base import CheckResult, CheckStatus
from shipit.services.checkers.preflight import PreflightChecker

__all__ = ["CheckResult", "CheckStatus", "PreflightChecker"]
