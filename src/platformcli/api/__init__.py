"""
Platform API client and resource models.
"""

from platformcli.api.client import (
    ApiClient,
    ApiError,
    create_client,
)

from platformcli.api.models import (
    SshKey,
    Variable,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "create_client",
    "SshKey",
    "Variable",
]
