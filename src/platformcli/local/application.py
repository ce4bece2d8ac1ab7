"""
Local Applications

An application is a directory of source code with an ``.platform.app.yaml``
file. A project may hold one application at its root, or several in
subdirectories.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from ..config import ConfigurationError

logger = logging.getLogger(__name__)

APP_CONFIG_FILE = ".platform.app.yaml"

DEFAULT_DOCUMENT_ROOT = "public"


@dataclass
class LocalApplication:
    """An application within a (possibly multi-app) project.

    This is pure data, loaded once per build.
    """
    root: Path
    name: str
    document_root: str = DEFAULT_DOCUMENT_ROOT
    move_to_root: bool = False
    toolstack: Optional[str] = None
    config: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.root = Path(self.root).absolute()
        self.document_root = normalize_document_root(self.document_root)

    def should_move_to_root(self) -> bool:
        """Whether the app's files belong directly in the web root."""
        return self.move_to_root

    @classmethod
    def from_root(cls, root: Path | str) -> "LocalApplication":
        """Load an application from its root directory."""
        root = Path(root).absolute()
        config = _read_app_config(root / APP_CONFIG_FILE)

        return cls(
            root=root,
            name=str(config.get("name") or root.name),
            document_root=_document_root_from_config(config),
            move_to_root=bool(config.get("move_to_root", False)),
            toolstack=config.get("toolstack"),
            config=config,
        )


def normalize_document_root(document_root: Optional[str]) -> str:
    """Strip slashes: ``/web/`` -> ``web``, ``/`` -> ``""``."""
    return (document_root or "").strip("/")


def _read_app_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Application config must contain a mapping: {path}")
    return data


def _document_root_from_config(config: dict[str, Any]) -> str:
    web = config.get("web") or {}
    locations = web.get("locations") or {}
    root_location = locations.get("/") or {}
    if "root" in root_location:
        return root_location["root"] or ""
    if "document_root" in web:
        return web["document_root"] or ""
    return DEFAULT_DOCUMENT_ROOT


def find_applications(source_dir: Path | str) -> list[LocalApplication]:
    """Find all applications in a project.

    Dot-directories are not searched. A project without any app config file
    is treated as a single application rooted at ``source_dir``.
    """
    source_dir = Path(source_dir).absolute()
    roots: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(source_dir):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        if APP_CONFIG_FILE in filenames:
            roots.append(Path(dirpath))
            # Applications do not nest.
            dirnames[:] = []

    if not roots:
        logger.debug(f"No {APP_CONFIG_FILE} found, using {source_dir} as the application")
        roots = [source_dir]

    return [LocalApplication.from_root(root) for root in roots]
