"""Application Services - Business use cases"""
import logging
from datetime import timedelta
from typing import List

from fastapi.concurrency import run_in_threadpool
from jose import JWTError
from pydantic import ValidationError as PydanticValidationError

from domain.auth import AuthData, SessionClaims
from domain.repositories import ProfileRepository, UserRepository
from domain.entities import Profile, User, UserWithProfile, utcnow
from domain.errors import AuthError, InternalError, NotFoundError, ServiceError
from infrastructure.security import (
    DEFAULT_ALGORITHM, ACCESS_TOKEN_EXPIRE_HOURS,
    create_access_token, decode_access_token, verify_password,
)

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for Profile use cases"""

    def __init__(self, repository: ProfileRepository):
        self.repository = repository

    async def create_profile(self, nome: str, descricao: str = "") -> Profile:
        """Create a profile; names are not checked for uniqueness"""
        now = utcnow()
        profile = Profile(nome=nome, descricao=descricao, created_at=now, updated_at=now)
        return await self.repository.create(profile)

    async def get_all_profiles(self) -> List[Profile]:
        return await self.repository.find_all()

    async def get_profile(self, profile_id: str) -> Profile:
        return await self.repository.find_by_id(profile_id)

    async def get_profile_by_name(self, nome: str) -> Profile:
        profile = await self.repository.find_by_name(nome)
        if profile is None:
            raise NotFoundError(
                "Nenhum perfil encontrado com o nome especificado.",
                error="Perfil não encontrado!",
            )
        return profile

    async def update_description(self, profile_id: str, descricao: str) -> Profile:
        """Change only the description of an existing profile"""
        profile = await self.repository.find_by_id(profile_id)
        profile.descricao = descricao
        profile.updated_at = utcnow()
        await self.repository.update_description(profile)
        return profile

    async def delete_profile(self, profile_id: str) -> None:
        await self.repository.delete(profile_id)


class UserService:
    """Service for User use cases; reads return the user joined with its profile"""

    def __init__(self, repository: UserRepository, profile_repository: ProfileRepository):
        self.repository = repository
        self.profile_repository = profile_repository

    async def _profile_for(self, user: User) -> Profile:
        """Secondary lookup; any failure here fails the whole read"""
        try:
            return await self.profile_repository.find_by_id(user.perfil_id)
        except ServiceError as exc:
            logger.error("Profile lookup for user %s failed: %s", user.id, exc.message)
            raise InternalError(exc.message, error="Falha ao buscar Perfil do Usuário!") from exc

    async def create_user(self, user: User) -> User:
        """Create a user; the referenced profile is not checked for existence"""
        return await self.repository.create(user, user.perfil_id)

    async def get_user(self, user_id: str) -> UserWithProfile:
        user = await self.repository.find_by_id(user_id)
        profile = await self._profile_for(user)
        return UserWithProfile(usuario=user, perfil=profile)

    async def get_all_users(self) -> List[UserWithProfile]:
        users = await self.repository.find_all()
        result = []
        for user in users:
            profile = await self._profile_for(user)
            result.append(UserWithProfile(usuario=user, perfil=profile))
        return result

    async def update_user(self, user_id: str, user: User) -> User:
        """Update an existing user; an empty senha keeps the stored hash"""
        existing = await self.repository.find_by_id(user_id)
        return await self.repository.update(existing.id, user)

    async def delete_user(self, user_id: str) -> None:
        await self.repository.delete(user_id)


class AuthService:
    """Login and session token validation with a single signing secret"""

    def __init__(
        self,
        user_repository: UserRepository,
        secret_key: str,
        algorithm: str = DEFAULT_ALGORITHM,
        expire_hours: int = ACCESS_TOKEN_EXPIRE_HOURS,
    ):
        self.user_repository = user_repository
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = timedelta(hours=expire_hours)

    async def login(self, credentials: AuthData) -> str:
        """Return a session token for valid credentials.

        Unknown email and wrong password both raise AuthError so the
        response does not reveal whether the account exists.
        """
        user = await self.user_repository.find_by_email(credentials.email)
        if user is None:
            logger.info("Login rejected: unknown email")
            raise AuthError("Email ou senha incorretos.", error="Credenciais inválidas!")

        if not await run_in_threadpool(verify_password, credentials.senha, user.senha):
            logger.info("Login rejected: wrong password for user %s", user.id)
            raise AuthError("Email ou senha incorretos.", error="Credenciais inválidas!")

        token = self.create_token(user.id)
        logger.info("User logged in: %s", user.nome)
        return token

    def create_token(self, user_id: str) -> str:
        return create_access_token(
            data={"sub": user_id},
            secret_key=self.secret_key,
            expires_delta=self.expires_delta,
            algorithm=self.algorithm,
        )

    def validate_token(self, token: str) -> str:
        """Return the subject user id of a valid, unexpired token"""
        try:
            payload = decode_access_token(token, self.secret_key, self.algorithm)
        except JWTError as exc:
            logger.info("Rejected session token: %s", exc)
            raise AuthError(str(exc), error="Token de autenticação inválido!") from exc

        try:
            claims = SessionClaims(**payload)
        except PydanticValidationError as exc:
            raise AuthError("Token sem identificação do usuário.", error="Token de autenticação inválido!") from exc
        return claims.sub
