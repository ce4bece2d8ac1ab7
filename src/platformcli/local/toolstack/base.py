"""
Build Staging

Shared logic for turning an application's source tree into a build
directory. Toolstacks hold a ``BuildStager`` and call into it; the stager
decides between copying and symlinking, relocates special files such as
``favicon.ico`` and ``robots.txt``, manages the shared-data directory and
seeds a default ``.gitignore``.

Typical sequence, per build:

    stager.prepare(build_dir, app, config, settings)
    stager.copy_to_build_dir()
    stager.process_special_destinations()
    # ... toolstack-specific install steps ...
    stager.copy_gitignore("gitignore-default")
"""
from __future__ import annotations

import glob
import logging
import re
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, TextIO, Union

from ...config import CliConfig
from ..application import LocalApplication
from ..filesystem import FilesystemHelper, matches_any
from ..git import GitHelper

logger = logging.getLogger(__name__)

RESOURCES_DIR = Path(__file__).resolve().parent.parent.parent / "resources"

# Stricter than the platform's own rule (which only hides the app config
# file): every dot-file stays out of the build.
DEFAULT_IGNORED_FILES = (".*",)

WEBROOT = "{webroot}"
APPROOT = "{approot}"

# Source pattern (relative to the app root) -> destination template.
SPECIAL_DESTINATIONS: Mapping[str, str] = MappingProxyType({
    "favicon.ico": WEBROOT,
    "robots.txt": WEBROOT,
})


def resolve_destination(template: str, web_root: Path, app_dir: Path) -> str:
    """Substitute the ``{webroot}`` and ``{approot}`` placeholders."""
    return template.replace(WEBROOT, str(web_root)).replace(APPROOT, str(app_dir))


def app_slug(name: str) -> str:
    """Filesystem-safe form of an application name: ``My App!`` -> ``My-App-``."""
    return re.sub(r"[^a-z0-9\-_]+", "-", name, flags=re.IGNORECASE)


def _real_location(path: Path) -> Path:
    """Where the entry itself lives: links in the parent directories are
    resolved, a link at ``path`` itself is not."""
    return path.parent.resolve() / path.name


@dataclass(frozen=True)
class BuildSettings:
    """Per-build options."""
    copy: bool = False
    absolute_links: bool = False
    source_dir: Optional[Path] = None
    multi_app: bool = False

    @classmethod
    def from_dict(cls, settings: Mapping[str, Any]) -> "BuildSettings":
        """Build from a settings bag, accepting camelCase or snake_case keys."""
        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in settings:
                    return settings[key]
            return default

        source_dir = pick("sourceDir", "source_dir")
        return cls(
            copy=bool(pick("copy", default=False)),
            absolute_links=bool(pick("absoluteLinks", "absolute_links", default=False)),
            source_dir=Path(source_dir) if source_dir else None,
            multi_app=bool(pick("multiApp", "multi_app", default=False)),
        )


SettingsLike = Union[BuildSettings, Mapping[str, Any], None]


class BuildStager:
    """Stages one application into one build directory.

    Collaborators are always passed in; ``BuildStager.create()`` assembles
    the default ones.
    """

    def __init__(self, fs_helper: FilesystemHelper, git_helper: GitHelper, resources_dir: Path | str = RESOURCES_DIR):
        self.fs_helper = fs_helper
        self.git_helper = git_helper
        self.resources_dir = Path(resources_dir)
        self.output: TextIO = sys.stderr

        self.special_destinations = SPECIAL_DESTINATIONS
        self._added_ignored_files: list[str] = []
        self._web_root_pattern: Optional[str] = None
        self._ignored_files: tuple[str, ...] = self._snapshot_ignored_files()

        self.app: Optional[LocalApplication] = None
        self.config: Optional[CliConfig] = None
        self.settings = BuildSettings()
        self.build_dir: Optional[Path] = None
        self.copy = False
        # Whether all app files have been symlinked or copied to the build as one unit.
        self.build_in_place = False

    @classmethod
    def create(cls, resources_dir: Path | str = RESOURCES_DIR) -> "BuildStager":
        return cls(FilesystemHelper(), GitHelper(), resources_dir)

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def set_output(self, output: TextIO) -> None:
        self.output = output

    def add_ignored_files(self, patterns: Iterable[str]) -> None:
        self._added_ignored_files.extend(patterns)
        self._ignored_files = self._snapshot_ignored_files()

    @property
    def ignored_files(self) -> tuple[str, ...]:
        """Patterns excluded from staging, relative to the app root."""
        return self._ignored_files

    def _snapshot_ignored_files(self) -> tuple[str, ...]:
        patterns = [*DEFAULT_IGNORED_FILES, *self._added_ignored_files]
        if self._web_root_pattern:
            patterns.append(self._web_root_pattern)
        return tuple(dict.fromkeys(patterns))

    def prepare(self, build_dir: Path | str, app: LocalApplication, config: CliConfig, settings: SettingsLike = None) -> None:
        if not isinstance(settings, BuildSettings):
            settings = BuildSettings.from_dict(settings or {})

        self.app = app
        self.config = config
        self.settings = settings
        self.build_dir = Path(build_dir)
        self.build_in_place = False

        if config.get("local.copy_on_windows"):
            self.fs_helper.set_copy_on_windows(True)

        self._web_root_pattern = config.get("local.web_root")
        self._ignored_files = self._snapshot_ignored_files()

        self.copy = settings.copy
        self.fs_helper.set_relative_links(not settings.absolute_links)

    @property
    def app_root(self) -> Path:
        return self._require_app().root

    def _require_app(self) -> LocalApplication:
        if self.app is None or self.build_dir is None:
            raise RuntimeError("prepare() must be called before staging")
        return self.app

    # -------------------------------------------------------------------------
    # Staging
    # -------------------------------------------------------------------------

    def copy_to_build_dir(self) -> Path:
        """Copy, or symlink, files from the app root to the build directory.

        Returns the path the app's files now live at.
        """
        app = self._require_app()
        self.build_in_place = True
        target = self.build_dir
        if app.should_move_to_root():
            target = self.build_dir / app.document_root

        if self.copy:
            self.fs_helper.copy_all(app.root, target, self.ignored_files, preserve_existing=True)
        else:
            self.fs_helper.symlink(app.root, target)

        logger.info(f"Staged {app.name} into {target} ({'copy' if self.copy else 'symlink'})")
        return target

    def process_special_destinations(self) -> None:
        """Copy or symlink special files (favicon.ico, robots.txt, ...) into place."""
        app = self._require_app()
        for source_pattern, template in self.special_destinations.items():
            matched = sorted(glob.glob(f"{glob.escape(str(app.root))}/{source_pattern}"))
            if not matched:
                continue

            abs_destination = Path(resolve_destination(template, self.get_web_root(), self.build_dir))
            creates_dir = template in (WEBROOT, APPROOT) and not (self.build_in_place and not self.copy)

            for source in map(Path, matched):
                rel_source = source.relative_to(app.root).as_posix()
                if matches_any(rel_source, self.ignored_files):
                    continue

                if creates_dir and not abs_destination.is_dir():
                    self.fs_helper.mkdir(abs_destination)

                destination = abs_destination
                # Do not overwrite directories with files.
                while not source.is_dir() and destination.is_dir():
                    destination = destination / source.name
                if _real_location(destination) == _real_location(source):
                    continue

                if template == WEBROOT and self.build_in_place:
                    # A symlinked tree is the app root itself: writing through
                    # it would modify the source. A copied tree already has
                    # the file if it landed in the web root.
                    if not self.copy or destination.exists() or destination.is_symlink():
                        continue

                verb = "Copying" if self.copy else "Symlinking"
                self._writeln(f"{verb} {rel_source} to {template}")

                if destination.exists() or destination.is_symlink():
                    self._writeln(f"Overriding existing path '{self._relative_to_build(destination)}' in destination")
                    self.fs_helper.remove(destination)

                if self.copy:
                    self.fs_helper.copy(source, destination)
                else:
                    self.fs_helper.symlink(source, destination)

    def get_shared_dir(self) -> Optional[Path]:
        """Directory for files shared between builds, created if needed.

        ``<source_dir>/shared`` for a single-application project, or
        ``<source_dir>/shared/<app-name>`` when there are several. None when
        no source directory is known.
        """
        app = self._require_app()
        if not self.settings.source_dir:
            return None
        shared = Path(self.settings.source_dir) / self.config.get("local.shared_dir")
        if self.settings.multi_app:
            shared = shared / app_slug(app.name)
        if not shared.is_dir():
            shared.mkdir(mode=0o755, parents=True)
        return shared.absolute()

    def copy_gitignore(self, template: str) -> None:
        """Create a default .gitignore file for the app.

        ``template`` is relative to the resources directory. Nothing happens
        if the project is already a git repository.
        """
        app = self._require_app()
        source = self.resources_dir / template
        source_dir = self.settings.source_dir
        if not source.exists() or not source_dir or self.git_helper.is_repository(source_dir):
            return
        app_gitignore = app.root / ".gitignore"
        if not app_gitignore.exists() and not (Path(source_dir) / ".gitignore").exists():
            self._writeln("Creating a .gitignore file")
            shutil.copyfile(source, app_gitignore)

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    def get_web_root(self) -> Path:
        app = self._require_app()
        return self.build_dir / app.document_root

    def get_app_dir(self) -> Path:
        self._require_app()
        return self.build_dir

    def can_archive(self) -> bool:
        # A symlinked tree points at live source outside the build.
        return not self.build_in_place or self.copy

    def _relative_to_build(self, path: Path) -> str:
        try:
            return path.relative_to(self.build_dir).as_posix()
        except ValueError:
            return str(path)

    def _writeln(self, line: str) -> None:
        self.output.write(line + "\n")


class Toolstack:
    """Interface every toolstack implements.

    Subclasses add their install steps; staging is delegated to the
    injected ``BuildStager``.
    """

    kind = None

    def __init__(self, stager: BuildStager):
        self.stager = stager

    def set_output(self, output: TextIO) -> None:
        self.stager.set_output(output)

    def add_ignored_files(self, patterns: Iterable[str]) -> None:
        self.stager.add_ignored_files(patterns)

    def prepare(self, build_dir: Path | str, app: LocalApplication, config: CliConfig, settings: SettingsLike = None) -> None:
        self.stager.prepare(build_dir, app, config, settings)

    def install(self) -> None:
        """Build the application into the prepared build directory."""
        # Override to define install steps.

    def get_key(self) -> Union[str, bool]:
        """Cache key for this build configuration, or False if not cacheable."""
        return False

    def can_archive(self) -> bool:
        return self.stager.can_archive()

    def get_web_root(self) -> Path:
        return self.stager.get_web_root()

    def get_app_dir(self) -> Path:
        return self.stager.get_app_dir()
