"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from platformcli.config import CliConfig
from platformcli.local.application import LocalApplication
from platformcli.local.filesystem import FilesystemHelper
from platformcli.local.toolstack import BuildStager


# =============================================================================
# FAKES
# =============================================================================

class FakeGitHelper:
    """Version-control probe with a fixed answer."""

    def __init__(self, is_repo: bool = False):
        self.is_repo = is_repo
        self.calls = []

    def is_repository(self, path) -> bool:
        self.calls.append(Path(path))
        return self.is_repo


# =============================================================================
# CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def make_config(tmp_path):
    """Factory: CliConfig from a YAML snippet, isolated from the environment."""
    def _make(yaml_text: str = "") -> CliConfig:
        path = tmp_path / "platformcli.yaml"
        path.write_text(yaml_text, encoding="utf-8")
        return CliConfig(path, env={})
    return _make


@pytest.fixture
def config(make_config):
    return make_config()


# =============================================================================
# PROJECT FIXTURES
# =============================================================================

@pytest.fixture
def project_dir(tmp_path) -> Path:
    """A single-application project.

    project/
        index.php
        favicon.ico
        robots.txt
        .env
        public/index.html
        lib/util.php
        lib/.cache
    """
    project = tmp_path / "project"
    project.mkdir()
    (project / "index.php").write_text("<?php echo 'hi';")
    (project / "favicon.ico").write_bytes(b"\x00\x00\x01\x00icon")
    (project / "robots.txt").write_text("User-agent: *\n")
    (project / ".env").write_text("SECRET=1\n")
    (project / "public").mkdir()
    (project / "public" / "index.html").write_text("<html></html>")
    (project / "lib").mkdir()
    (project / "lib" / "util.php").write_text("<?php")
    (project / "lib" / ".cache").write_text("cache")
    return project


@pytest.fixture
def app(project_dir) -> LocalApplication:
    return LocalApplication(root=project_dir, name="project", document_root="public")


@pytest.fixture
def build_dir(tmp_path) -> Path:
    """Build directory outside the project (not created)."""
    return tmp_path / "builds" / "project"


@pytest.fixture
def resources_dir(tmp_path) -> Path:
    resources = tmp_path / "resources"
    resources.mkdir()
    (resources / "gitignore-default").write_text("/vendor\n")
    return resources


@pytest.fixture
def fake_git() -> FakeGitHelper:
    return FakeGitHelper(is_repo=False)


class _CurrentStdout:
    """Forward writes to whatever sys.stdout is at write time (capsys swaps it per phase)."""

    def write(self, text: str) -> int:
        return sys.stdout.write(text)

    def flush(self) -> None:
        sys.stdout.flush()


@pytest.fixture
def stager(fake_git, resources_dir, capsys) -> BuildStager:
    s = BuildStager(FilesystemHelper(), fake_git, resources_dir)
    s.set_output(_CurrentStdout())
    return s
