"""
Local Builds

Builds every application in a project into
``<source_dir>/.platform/local/builds/<app>`` and links the project's web
root (``_www`` by default) to the result.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, TextIO

from ..config import CliConfig
from .application import LocalApplication, find_applications
from .filesystem import FilesystemHelper
from .git import GitHelper
from .toolstack import BuildSettings, ToolstackKind, app_slug, create_toolstack

logger = logging.getLogger(__name__)


class LocalBuild:
    """Runs a toolstack for each application of a project."""

    def __init__(
        self,
        config: CliConfig,
        settings: BuildSettings,
        fs_helper: FilesystemHelper,
        git_helper: GitHelper,
        output: TextIO = sys.stderr,
        toolstack: Optional[str] = None,
    ):
        self.config = config
        self.settings = settings
        self.fs_helper = fs_helper
        self.git_helper = git_helper
        self.output = output
        self.toolstack = toolstack

    def build(self, source_dir: Path | str, destination: Optional[Path | str] = None) -> list[Path]:
        """Build all applications in ``source_dir``. Returns their build directories."""
        source_dir = Path(source_dir).absolute()
        apps = find_applications(source_dir)
        self.settings = replace(self.settings, source_dir=source_dir, multi_app=len(apps) > 1)
        if destination is None:
            destination = source_dir / self.config.get("local.web_root")

        logger.info(f"Building {len(apps)} application(s) in {source_dir}")
        return [self.build_app(app, destination) for app in apps]

    def build_app(self, app: LocalApplication, destination: Optional[Path | str] = None) -> Path:
        """Build one application and link ``destination`` to its web root."""
        source_dir = self.settings.source_dir or app.root
        build_dir = Path(source_dir) / self.config.get("local.build_dir") / app_slug(app.name)

        kind = self.toolstack or app.toolstack or ToolstackKind.NONE
        toolstack = create_toolstack(kind, self.fs_helper, self.git_helper)
        toolstack.set_output(self.output)

        if build_dir.exists() or build_dir.is_symlink():
            self.fs_helper.remove(build_dir)
        self.fs_helper.mkdir(build_dir.parent)

        self.output.write(f"Building application {app.name} ({toolstack.kind.value})\n")
        toolstack.prepare(build_dir, app, self.config, self.settings)
        toolstack.install()

        if destination is not None:
            link = Path(destination)
            if self.settings.multi_app:
                link = link / app_slug(app.name)
            self.fs_helper.symlink(toolstack.get_web_root(), link)
            self.output.write(f"Web root: {link}\n")

        logger.info(f"Build complete for {app.name}: {build_dir} (archivable: {toolstack.can_archive()})")
        return build_dir


def create_local_build(config: CliConfig, settings: BuildSettings, **kwargs) -> LocalBuild:
    """LocalBuild with the default filesystem and git helpers."""
    return LocalBuild(config, settings, FilesystemHelper(), GitHelper(), **kwargs)
