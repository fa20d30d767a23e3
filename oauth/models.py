"""Pydantic models for GitHub OAuth responses"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class TokenBundle(BaseModel):
    """Token response from GitHub's access_token endpoint

    Unknown fields are preserved so the bundle can be relayed to the client
    exactly as GitHub sent it.
    """

    model_config = ConfigDict(extra="allow")

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None
    expires_in: Optional[int] = None
    refresh_token_expires_in: Optional[int] = None
    error: Optional[str] = None
    error_description: Optional[str] = None

    def to_client(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class InstallationList(BaseModel):
    """Response from GET /user/installations"""

    model_config = ConfigDict(extra="ignore")

    total_count: int = 0
    installations: List[Dict[str, Any]] = []

    @property
    def has_installation(self) -> bool:
        return self.total_count > 0 and len(self.installations) > 0
