"""
Toolstacks - turn application source trees into build directories.
"""

from platformcli.local.toolstack.base import (
    DEFAULT_IGNORED_FILES,
    SPECIAL_DESTINATIONS,
    BuildSettings,
    BuildStager,
    Toolstack,
    app_slug,
    resolve_destination,
)

from platformcli.local.toolstack.variants import (
    TOOLSTACKS,
    ComposerToolstack,
    NoToolstack,
    ToolstackKind,
    create_toolstack,
)

__all__ = [
    # Staging
    "DEFAULT_IGNORED_FILES",
    "SPECIAL_DESTINATIONS",
    "BuildSettings",
    "BuildStager",
    "Toolstack",
    "app_slug",
    "resolve_destination",
    # Variants
    "TOOLSTACKS",
    "ComposerToolstack",
    "NoToolstack",
    "ToolstackKind",
    "create_toolstack",
]
