"""In-Memory Repository Implementations"""
import logging
from typing import Optional, List, Dict

from fastapi.concurrency import run_in_threadpool

from domain.repositories import ProfileRepository, UserRepository
from domain.entities import Profile, User, utcnow
from domain.errors import NotFoundError
from infrastructure.repositories.identifiers import new_id, parse_object_id
from infrastructure.security import get_password_hash

logger = logging.getLogger(__name__)

PROFILE_NOT_FOUND = "Perfil não encontrado!"
USER_NOT_FOUND = "Usuário não encontrado!"


class InMemoryProfileRepository(ProfileRepository):
    """In-memory implementation of ProfileRepository"""

    def __init__(self):
        self._storage: Dict[str, Profile] = {}

    def _key(self, profile_id: str) -> str:
        return str(parse_object_id(profile_id, PROFILE_NOT_FOUND, f"Perfil {profile_id} não existe"))

    async def create(self, profile: Profile) -> Profile:
        """Save profile to memory under a fresh id"""
        stored = profile.model_copy(update={"id": new_id()})
        self._storage[stored.id] = stored
        logger.info("Profile created: %s (%s)", stored.nome, stored.id)
        return stored.model_copy()

    async def find_all(self) -> List[Profile]:
        """Find all profiles"""
        return [p.model_copy() for p in self._storage.values()]

    async def find_by_id(self, profile_id: str) -> Profile:
        """Find profile by ID"""
        profile = self._storage.get(self._key(profile_id))
        if profile is None:
            logger.info("Profile %s not found", profile_id)
            raise NotFoundError(f"Perfil {profile_id} não existe", error=PROFILE_NOT_FOUND)
        return profile.model_copy()

    async def find_by_name(self, nome: str) -> Optional[Profile]:
        """Find profile by name"""
        for profile in self._storage.values():
            if profile.nome == nome:
                return profile.model_copy()
        return None

    async def update_description(self, profile: Profile) -> None:
        """Update description"""
        key = self._key(profile.id)
        if key not in self._storage:
            raise NotFoundError(f"Perfil {profile.id} não existe", error=PROFILE_NOT_FOUND)
        self._storage[key] = self._storage[key].model_copy(
            update={"descricao": profile.descricao, "updated_at": utcnow()}
        )
        logger.info("Profile updated: %s", key)

    async def delete(self, profile_id: str) -> None:
        """Delete profile"""
        key = self._key(profile_id)
        if key not in self._storage:
            raise NotFoundError(f"Perfil {profile_id} não existe", error=PROFILE_NOT_FOUND)
        del self._storage[key]
        logger.info("Profile deleted: %s", key)


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository"""

    def __init__(self):
        self._storage: Dict[str, User] = {}

    def _key(self, user_id: str) -> str:
        return str(parse_object_id(user_id, USER_NOT_FOUND, f"Usuário {user_id} não existe"))

    async def create(self, user: User, profile_id: str) -> User:
        """Save user to memory with a hashed password"""
        now = utcnow()
        stored = user.model_copy(update={
            "id": new_id(),
            "senha": await run_in_threadpool(get_password_hash, user.senha),
            "perfil_id": profile_id,
            "created_at": now,
            "updated_at": now,
        })
        self._storage[stored.id] = stored
        logger.info("User created: %s", stored.id)
        return stored.model_copy()

    async def find_all(self) -> List[User]:
        """Find all users"""
        return [u.model_copy() for u in self._storage.values()]

    async def find_by_id(self, user_id: str) -> User:
        """Find user by ID"""
        user = self._storage.get(self._key(user_id))
        if user is None:
            logger.info("User %s not found", user_id)
            raise NotFoundError(f"Usuário {user_id} não existe", error=USER_NOT_FOUND)
        return user.model_copy()

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email"""
        for user in self._storage.values():
            if user.email == email:
                return user.model_copy()
        return None

    async def update(self, user_id: str, user: User) -> User:
        """Update user, keeping the stored hash when no new password is given"""
        key = self._key(user_id)
        existing = self._storage.get(key)
        if existing is None:
            raise NotFoundError(f"Usuário {user_id} não existe", error=USER_NOT_FOUND)

        changes = {
            "nome": user.nome,
            "email": user.email,
            "documento": user.documento,
            "telefone": user.telefone,
            "cidade": user.cidade,
            "perfil_id": user.perfil_id,
            "updated_at": utcnow(),
        }
        if user.senha:
            changes["senha"] = await run_in_threadpool(get_password_hash, user.senha)

        self._storage[key] = existing.model_copy(update=changes)
        logger.info("User updated: %s", key)
        return self._storage[key].model_copy()

    async def delete(self, user_id: str) -> None:
        """Delete user"""
        key = self._key(user_id)
        if key not in self._storage:
            raise NotFoundError(f"Usuário {user_id} não existe", error=USER_NOT_FOUND)
        del self._storage[key]
        logger.info("User deleted: %s", key)
