"""
Local development: applications, filesystem and git helpers, builds.
"""

from platformcli.local.application import (
    APP_CONFIG_FILE,
    LocalApplication,
    find_applications,
)

from platformcli.local.filesystem import FilesystemHelper
from platformcli.local.git import GitHelper

from platformcli.local.build import (
    LocalBuild,
    create_local_build,
)

__all__ = [
    "APP_CONFIG_FILE",
    "LocalApplication",
    "find_applications",
    "FilesystemHelper",
    "GitHelper",
    "LocalBuild",
    "create_local_build",
]
