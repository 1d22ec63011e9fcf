"""Centralized version constants for the tool and its artifacts."""
from __future__ import annotations

SPLITFILE_VERSION = "0.2.0"

PLAN_ARTIFACT_VERSION = "1.0.0"
