"""
API Client

Thin request/response wrapper over the platform's HTTP API.

Usage:
    from platformcli.api import create_client

    client = create_client(config)
    key = client.get_ssh_key(123)
    if key:
        client.delete_ssh_key(key.key_id)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import CliConfig
from .models import SshKey, Variable

logger = logging.getLogger(__name__)

USER_AGENT = "platformcli"


class ApiError(Exception):
    """Raised when the API returns an error response or cannot be reached."""
    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}" if status else message)


class ApiClient:
    """Client for the platform API."""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _request(self, method: str, path: str) -> Optional[Any]:
        """Send a request. Returns the decoded JSON body, or None on 404."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug(f"{method} {url}")
        req = Request(url, method=method, headers=headers)
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except HTTPError as e:
            if e.code == 404:
                return None
            raise ApiError(e.code, _error_message(e)) from e
        except URLError as e:
            raise ApiError(None, f"Cannot reach {url}: {e.reason}") from e

        if not body:
            return {}
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ApiError(None, f"Invalid JSON from {url}: {e}") from e

    # -------------------------------------------------------------------------
    # SSH keys
    # -------------------------------------------------------------------------

    def get_ssh_key(self, key_id: int) -> Optional[SshKey]:
        data = self._request("GET", f"ssh_keys/{int(key_id)}")
        return SshKey.model_validate(data) if data is not None else None

    def delete_ssh_key(self, key_id: int) -> None:
        if self._request("DELETE", f"ssh_keys/{int(key_id)}") is None:
            raise ApiError(404, f"SSH key not found: {key_id}")

    # -------------------------------------------------------------------------
    # Environment variables
    # -------------------------------------------------------------------------

    def _variables_path(self, project: str, environment: str) -> str:
        return f"projects/{quote(project, safe='')}/environments/{quote(environment, safe='')}/variables"

    def get_variable(self, project: str, environment: str, name: str) -> Optional[Variable]:
        data = self._request("GET", f"{self._variables_path(project, environment)}/{quote(name, safe='')}")
        return Variable.model_validate(data) if data is not None else None

    def get_variables(self, project: str, environment: str) -> list[Variable]:
        data = self._request("GET", self._variables_path(project, environment))
        return [Variable.model_validate(item) for item in (data or [])]


def _error_message(error: HTTPError) -> str:
    try:
        payload = json.loads(error.read() or b"{}")
    except (ValueError, OSError):
        payload = {}
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("detail") or error.reason)
    return str(error.reason)


def create_client(config: CliConfig) -> ApiClient:
    """Client configured from ``api.*`` settings."""
    return ApiClient(
        base_url=config.get("api.base_url"),
        token=config.get("api.token"),
        timeout=float(config.get("api.timeout", 30)),
    )
