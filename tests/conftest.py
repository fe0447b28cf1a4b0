#!/usr/bin/env python3
# CUI // SP-CTI
"""Shared pytest fixtures for the cloudhouse test suite.

Centralizes clouds.yaml / clouds-public.yaml / secure.yaml fixtures and
the fake environment view used by resolver and credential tests.
"""

import sys
from pathlib import Path

import pytest
import yaml

# Ensure project root is on sys.path
BASE_DIR = Path(__file__).resolve().parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from cloudhouse.resilience.correlation import clear_correlation_id  # noqa: E402


# ---------------------------------------------------------------------------
# Cloud configuration files
# ---------------------------------------------------------------------------
@pytest.fixture
def write_yaml(tmp_path):
    """Write a mapping as YAML under tmp_path and return the path."""
    def _write(filename, data):
        path = tmp_path / filename
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def config_env(tmp_path):
    """Environment view pointing the three override variables into tmp_path.

    Files are only picked up once a test writes them.
    """
    return {
        "OS_CLIENT_CONFIG_FILE": str(tmp_path / "clouds.yaml"),
        "OS_CLIENT_VENDOR_FILE": str(tmp_path / "clouds-public.yaml"),
        "OS_CLIENT_SECURE_FILE": str(tmp_path / "secure.yaml"),
    }


@pytest.fixture(autouse=True)
def _clean_correlation():
    clear_correlation_id()
    yield
    clear_correlation_id()
