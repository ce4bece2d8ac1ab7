"""
Toolstack Variants

The fixed set of toolstacks. Each one is tagged with a ``ToolstackKind``
and delegates staging to its ``BuildStager``.
"""
from __future__ import annotations

import hashlib
import logging
import subprocess
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ...config import CliConfig, ConfigurationError
from ..application import LocalApplication
from ..filesystem import FilesystemHelper
from ..git import GitHelper
from .base import RESOURCES_DIR, BuildSettings, BuildStager, SettingsLike, Toolstack

logger = logging.getLogger(__name__)


class ToolstackKind(str, Enum):
    NONE = "none"
    COMPOSER = "php:composer"


class NoToolstack(Toolstack):
    """Applications without a build step: stage the files as they are."""

    kind = ToolstackKind.NONE

    def install(self) -> None:
        self.stager.copy_to_build_dir()
        self.stager.process_special_destinations()
        self.stager.copy_gitignore("gitignore-default")


class ComposerToolstack(Toolstack):
    """PHP applications whose dependencies are installed with Composer."""

    kind = ToolstackKind.COMPOSER

    def prepare(self, build_dir: Path | str, app: LocalApplication, config: CliConfig, settings: SettingsLike = None) -> None:
        if not isinstance(settings, BuildSettings):
            settings = BuildSettings.from_dict(settings or {})
        # Dependencies are written into the build, so it must not be a link to the source.
        super().prepare(build_dir, app, config, replace(settings, copy=True))

    def install(self) -> None:
        build_dir = self.stager.copy_to_build_dir()
        if (build_dir / "composer.json").exists():
            self._run_composer(build_dir)
        else:
            logger.info(f"No composer.json in {build_dir}, skipping dependency install")
        self.stager.process_special_destinations()
        self.stager.copy_gitignore("gitignore-composer")

    def _run_composer(self, build_dir: Path) -> None:
        self.stager.output.write("Found a composer.json file; installing dependencies\n")
        subprocess.run(
            ["composer", "install", "--no-progress", "--prefer-dist", "--optimize-autoloader", "--no-interaction"],
            cwd=build_dir,
            check=True,
        )

    def get_key(self) -> Union[str, bool]:
        """Hash of composer.json and composer.lock, or False without them."""
        app_root = self.stager.app_root
        digest = hashlib.sha1()
        found = False
        for name in ("composer.json", "composer.lock"):
            path = app_root / name
            if path.exists():
                digest.update(name.encode("utf-8"))
                digest.update(path.read_bytes())
                found = True
        return digest.hexdigest() if found else False


TOOLSTACKS: dict[ToolstackKind, type[Toolstack]] = {
    ToolstackKind.NONE: NoToolstack,
    ToolstackKind.COMPOSER: ComposerToolstack,
}


def create_toolstack(
    kind: Union[ToolstackKind, str],
    fs_helper: FilesystemHelper,
    git_helper: GitHelper,
    resources_dir: Optional[Path] = None,
) -> Toolstack:
    """Instantiate the toolstack for ``kind`` with its own stager."""
    try:
        kind = ToolstackKind(kind)
    except ValueError:
        known = ", ".join(k.value for k in ToolstackKind)
        raise ConfigurationError(f"Unknown toolstack: {kind} (known: {known})") from None
    stager = BuildStager(fs_helper, git_helper, resources_dir or RESOURCES_DIR)
    return TOOLSTACKS[kind](stager)
