"""
GitHelper tests. git itself is never invoked.
"""
import subprocess

from platformcli.local import git
from platformcli.local.git import GitHelper, _run_git


class _Completed:
    def __init__(self, returncode, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class TestIsRepository:

    def test_not_a_directory(self, tmp_path, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("git should not run")
        monkeypatch.setattr(git.subprocess, "run", fail)
        assert GitHelper().is_repository(tmp_path / "missing") is False

    def test_inside_checkout(self, tmp_path, monkeypatch):
        seen = {}

        def run(cmd, **kwargs):
            seen["cmd"] = cmd
            seen["cwd"] = kwargs["cwd"]
            return _Completed(0, ".git\n")

        monkeypatch.setattr(git.subprocess, "run", run)
        assert GitHelper().is_repository(tmp_path) is True
        assert seen["cmd"] == ["git", "rev-parse", "--git-dir"]
        assert seen["cwd"] == tmp_path

    def test_outside_checkout(self, tmp_path, monkeypatch):
        monkeypatch.setattr(git.subprocess, "run", lambda cmd, **kw: _Completed(128, "", "fatal: not a git repository"))
        assert GitHelper().is_repository(tmp_path) is False


class TestRunGit:

    def test_git_missing(self, tmp_path, monkeypatch):
        def run(cmd, **kwargs):
            raise FileNotFoundError("git")
        monkeypatch.setattr(git.subprocess, "run", run)
        assert _run_git(tmp_path, "status") == (False, "", "Git not found in PATH")

    def test_timeout(self, tmp_path, monkeypatch):
        def run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])
        monkeypatch.setattr(git.subprocess, "run", run)
        ok, _, err = _run_git(tmp_path, "status", timeout=1)
        assert not ok
        assert err == "Command timed out"
