"""Pytest package configuration shared by the test modules."""

from __future__ import annotations

import os

os.environ.setdefault("MDALT_DISABLE_METRICS", "1")
