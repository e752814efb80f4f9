"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
"""

import json
import sys
from pathlib import Path

import pytest

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from contractAgent.config.settings import RuntimeSettings, Settings  # noqa: E402
from tests.support import success_payload  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    """Settings whose runtime works inside tmp_path."""
    return Settings(runtime=RuntimeSettings(working_dir=str(tmp_path)))


@pytest.fixture
def write_artifact(tmp_path):
    """Write an artifact of N words under tmp_path and return its path."""

    def _write(name="out.md", words=4000):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(" ".join(["word"] * words), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def success_output():
    """Serialized success FinalOutput."""

    def _build(artifact_path="out.md", **overrides):
        return json.dumps(success_payload(artifact_path, **overrides))

    return _build
