"""Domain Entities - Auth"""
from pydantic import BaseModel, Field
from datetime import datetime


class AuthData(BaseModel):
    """Login credentials, never persisted"""
    email: str
    senha: str


class SessionClaims(BaseModel):
    """Claims carried by a session token"""
    sub: str = Field(min_length=1)
    exp: datetime
