"""
Filesystem Operations

Copy, symlink and remove helpers used to stage application builds.
"""
from __future__ import annotations

import fnmatch
import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, Sequence, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

DEFAULT_SKIP = (".git", ".DS_Store")


def _is_windows() -> bool:
    return os.name == "nt"


def matches_any(relpath: str, patterns: Iterable[str]) -> bool:
    """Whether a relative path, or its basename, matches one of the glob patterns."""
    name = relpath.rsplit("/", 1)[-1]
    for pattern in patterns:
        if fnmatch.fnmatchcase(relpath, pattern) or fnmatch.fnmatchcase(name, pattern):
            return True
    return False


class FilesystemHelper:
    """Filesystem operator for build staging.

    Symlinks are relative by default. With ``copy_on_windows`` set, symlink
    requests on Windows are served by copying instead.
    """

    def __init__(self, relative_links: bool = True, copy_on_windows: bool = False):
        self.relative_links = relative_links
        self.copy_on_windows = copy_on_windows

    def set_relative_links(self, relative_links: bool) -> None:
        self.relative_links = relative_links

    def set_copy_on_windows(self, copy_on_windows: bool) -> None:
        self.copy_on_windows = copy_on_windows

    def mkdir(self, path: PathLike, mode: int = 0o755) -> Path:
        path = Path(path)
        path.mkdir(mode=mode, parents=True, exist_ok=True)
        return path

    def remove(self, path: PathLike) -> bool:
        """Delete a file, link or directory tree. Returns False if nothing was there."""
        path = Path(path)
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        else:
            return False
        logger.debug(f"Removed {path}")
        return True

    def copy(self, source: PathLike, destination: PathLike) -> None:
        """Copy a file, link or directory tree. Links are copied as links."""
        source, destination = Path(source), Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        if source.is_symlink():
            if destination.is_symlink() or destination.is_file():
                destination.unlink()
            os.symlink(os.readlink(source), destination)
        elif source.is_dir():
            shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
        else:
            # Never write through an existing link into someone else's file.
            if destination.is_symlink():
                destination.unlink()
            shutil.copy2(source, destination)

    def copy_all(
        self,
        source: PathLike,
        destination: PathLike,
        skip: Sequence[str] = DEFAULT_SKIP,
        preserve_existing: bool = True,
    ) -> None:
        """Recursively copy a directory, excluding paths matching ``skip``.

        Patterns are matched against each entry's path relative to ``source``
        and against its basename. The destination is never copied into
        itself, even when it lies inside ``source``. Links are copied as
        links, so cycles are not followed.

        With ``preserve_existing`` False the destination is emptied first;
        otherwise files already in the destination that are not in the source
        are left in place.
        """
        source, destination = Path(source), Path(destination)
        if not source.is_dir():
            self.copy(source, destination)
            return

        if not preserve_existing and (destination.exists() or destination.is_symlink()):
            self.remove(destination)
        if destination.is_symlink():
            destination.unlink()
        destination.mkdir(parents=True, exist_ok=True)

        self._copy_tree(source, destination, "", tuple(skip), destination.resolve())

    def _copy_tree(self, source: Path, destination: Path, relbase: str, skip: tuple, guard: Path) -> None:
        for entry in sorted(os.scandir(source), key=lambda e: e.name):
            relpath = f"{relbase}{entry.name}"
            if matches_any(relpath, skip):
                continue
            entry_path = Path(entry.path)
            if not entry.is_symlink() and entry_path.resolve() == guard:
                logger.debug(f"Not copying {entry_path} into itself")
                continue
            target = destination / entry.name
            if entry.is_dir(follow_symlinks=False):
                if target.is_symlink() or target.is_file():
                    target.unlink()
                target.mkdir(exist_ok=True)
                shutil.copystat(entry_path, target)
                self._copy_tree(entry_path, target, relpath + "/", skip, guard)
            else:
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                self.copy(entry_path, target)

    def symlink(self, target: PathLike, link: PathLike) -> None:
        """Create ``link`` pointing at ``target``, replacing whatever is at ``link``."""
        target, link = Path(target), Path(link)
        if self.copy_on_windows and _is_windows():
            if link.exists() or link.is_symlink():
                self.remove(link)
            self.copy(target, link)
            return

        if link.exists() or link.is_symlink():
            self.remove(link)
        link.parent.mkdir(parents=True, exist_ok=True)
        link_target = self.make_path_relative(target, link.parent) if self.relative_links else str(target.absolute())
        os.symlink(link_target, link, target_is_directory=target.is_dir())
        logger.debug(f"Linked {link} -> {link_target}")

    @staticmethod
    def make_path_relative(path: PathLike, reference_dir: PathLike) -> str:
        """Path to ``path`` relative to ``reference_dir``, resolving links in the directory."""
        return os.path.relpath(
            os.path.realpath(path) if Path(path).exists() else os.path.abspath(path),
            os.path.realpath(reference_dir),
        )
