"""API Dependencies - wiring and the bearer token gate"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from application.services import AuthService, ProfileService, UserService
from domain.errors import AuthError, InternalError
from domain.repositories import ProfileRepository, UserRepository
from infrastructure.config import Settings, get_settings
from infrastructure.database import MongoDatabase
from infrastructure.mailer import SmtpEmailSender

bearer_scheme = HTTPBearer(auto_error=False)


# Repositories and the database handle are attached to app.state at startup.

def get_profile_repository(request: Request) -> ProfileRepository:
    return request.app.state.profile_repository


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.user_repository


def get_database(request: Request) -> Optional[MongoDatabase]:
    return getattr(request.app.state, "database", None)


def get_profile_service(
    repository: ProfileRepository = Depends(get_profile_repository),
) -> ProfileService:
    return ProfileService(repository)


def get_user_service(
    repository: UserRepository = Depends(get_user_repository),
    profile_repository: ProfileRepository = Depends(get_profile_repository),
) -> UserService:
    return UserService(repository, profile_repository)


def get_auth_service(
    repository: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    if not settings.jwt_secret:
        raise InternalError("JWT_SECRET não configurado.", error="Falha na autenticação!")
    return AuthService(
        repository,
        secret_key=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_hours=settings.jwt_expire_hours,
    )


def get_email_sender(settings: Settings = Depends(get_settings)) -> SmtpEmailSender:
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        timeout=settings.smtp_timeout,
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    """Gate for private routes: returns the token subject or raises AuthError"""
    if credentials is None:
        raise AuthError(
            "Token de autenticação não fornecido",
            error="Token de autenticação inválido!",
        )
    return auth_service.validate_token(credentials.credentials)
