"""
Pydantic models for the gateway's JSON request and response bodies.
"""
from typing import Optional
from pydantic import BaseModel


class RefreshTokenRequest(BaseModel):
    """Body of POST /refresh-token"""
    refreshToken: Optional[str] = None


class SessionTokenRequest(BaseModel):
    """Body of POST /token"""
    session: Optional[str] = None


class SessionTokenResponse(BaseModel):
    """Raw GitHub token recovered from a session artifact"""
    token: str


class ErrorResponse(BaseModel):
    """Error body shared by every endpoint"""
    error: str
    kind: str
