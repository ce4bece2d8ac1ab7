from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class SshKey(BaseModel):
    """
    An SSH key registered on the user's account.

    Attributes:
        key_id: Numeric key ID (used by ``ssh-key:delete``)
        title: Label chosen when the key was added
        fingerprint: Key fingerprint
        value: Public key
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    key_id: int = Field(alias="id")
    title: Optional[str] = None
    fingerprint: Optional[str] = None
    value: Optional[str] = None


class Variable(BaseModel):
    """
    An environment variable.

    Attributes:
        id: Variable ID (usually the same as the name)
        name: Variable name
        value: Variable value; JSON-encoded when ``is_json`` is set
        inherited: Whether the value comes from a parent environment
        is_json: Whether the value is JSON
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    value: str = ""
    inherited: bool = False
    is_json: bool = False
