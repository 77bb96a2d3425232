"""Pytest configuration for gqlls tests."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from gqlls.core.entities.server_config import ServerConfig


@pytest.fixture
def server_config(tmp_path: Path) -> ServerConfig:
    """Server config whose generated artifacts stay inside the test directory."""
    return ServerConfig(generated_schema_dir=tmp_path / "generated")


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """An empty workspace root."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def write_file(project_root: Path) -> Callable[[str, str], Path]:
    """Write a file relative to the workspace root and return its path."""

    def write(name: str, text: str) -> Path:
        path = project_root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return write


@pytest.fixture
def write_config(write_file: Callable[[str, str], Path]) -> Callable[[dict], Path]:
    """Write ``graphql.config.json`` into the workspace root."""

    def write(config: dict) -> Path:
        return write_file("graphql.config.json", json.dumps(config))

    return write
