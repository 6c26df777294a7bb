"""Domain Entities - Profiles and Users"""
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current UTC time at millisecond precision, the resolution BSON dates keep"""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class Profile(BaseModel):
    """Profile Entity - a named role users are assigned to"""

    # Identity (ObjectId hex, assigned by the store)
    id: Optional[str] = None

    nome: str
    descricao: str = ""

    # Metadata
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class User(BaseModel):
    """User Entity

    ``senha`` holds the bcrypt hash once the user has been stored; the
    plaintext only lives here between request decoding and the store call.
    """

    id: Optional[str] = None

    nome: str
    email: str
    senha: str = ""
    documento: str = ""
    telefone: str = ""
    cidade: str = ""

    # Reference to Profile.id, not checked for existence
    perfil_id: str = ""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserWithProfile(BaseModel):
    """A user joined with the profile it references"""
    usuario: User
    perfil: Profile
