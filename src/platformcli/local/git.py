"""
Git Operations

Read-only git queries used by local builds.
"""
from __future__ import annotations
import logging
import subprocess
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def _run_git(cwd: Path, *args: str, timeout: int = 30) -> tuple[bool, str, str]:
    """Run git command in a directory."""
    try:
        result = subprocess.run(
            ["git"] + list(args),
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout
        )
        return result.returncode == 0, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return False, "", "Command timed out"
    except FileNotFoundError:
        return False, "", "Git not found in PATH"


class GitHelper:
    """Version-control probe."""

    def is_repository(self, path: Union[str, Path]) -> bool:
        """Whether ``path`` is inside a git checkout."""
        path = Path(path)
        if not path.is_dir():
            return False
        ok, out, err = _run_git(path, "rev-parse", "--git-dir")
        if not ok:
            logger.debug(f"{path} is not a repository: {err.strip()}")
        return ok

