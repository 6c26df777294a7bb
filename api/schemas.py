"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import List, Optional


# ============================================================================
# COMMON SCHEMAS
# ============================================================================

class ErrorResponse(BaseModel):
    """Error envelope returned by every failing request"""
    error: str
    message: str


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health response DTO; statuses are HTTP codes as strings"""
    app_status: str
    db_connection: str


# ============================================================================
# PROFILE SCHEMAS
# ============================================================================

class CreateProfileRequest(BaseModel):
    """Create profile request DTO"""
    nome: str = Field(min_length=1)
    descricao: str = ""


class UpdateProfileRequest(BaseModel):
    """Only the description of a profile can change"""
    descricao: str


class ProfileResponse(BaseModel):
    """Profile response DTO"""
    id: str
    nome: str
    descricao: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


# ============================================================================
# USER SCHEMAS
# ============================================================================

class CreateUserRequest(BaseModel):
    """Create user request DTO"""
    nome: str = Field(min_length=1)
    email: EmailStr
    senha: str = Field(min_length=1)
    documento: str = ""
    telefone: str = ""
    cidade: str = ""
    perfil_id: str = ""


class UpdateUserRequest(BaseModel):
    """Update user request DTO; an empty senha leaves the password unchanged"""
    nome: str = Field(min_length=1)
    email: EmailStr
    senha: str = ""
    documento: str = ""
    telefone: str = ""
    cidade: str = ""
    perfil_id: str = ""


class UserResponse(BaseModel):
    """User response DTO, never carries the password hash"""
    id: str
    nome: str
    email: str
    documento: str
    telefone: str
    cidade: str
    perfil_id: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class UserWithProfileResponse(BaseModel):
    usuario: UserResponse
    perfil: ProfileResponse


class UserListResponse(BaseModel):
    total_usuarios: int
    usuarios: List[UserWithProfileResponse]


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class LoginRequest(BaseModel):
    """Login request DTO"""
    email: EmailStr
    senha: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """Token response DTO"""
    token: str


# ============================================================================
# EMAIL SCHEMAS
# ============================================================================

class EmailRequest(BaseModel):
    """Send email request DTO"""
    to: EmailStr
    subject: str
    body: str

    @field_validator("subject")
    @classmethod
    def subject_single_line(cls, v: str) -> str:
        if "\r" in v or "\n" in v:
            raise ValueError("subject must not contain line breaks")
        return v
