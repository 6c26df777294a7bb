"""Bootstrap data created at startup"""
import logging
from typing import Optional

from domain.entities import Profile, User
from domain.repositories import ProfileRepository, UserRepository

logger = logging.getLogger(__name__)

ADMIN_PROFILE = "Admin"

DEFAULT_PROFILES = (
    (ADMIN_PROFILE, "Permissões de administrador."),
    ("Clientes", "Permissões de clientes."),
)


async def seed_profiles(repository: ProfileRepository) -> int:
    """Create the default profiles that are missing; returns how many were created"""
    existing = {profile.nome for profile in await repository.find_all()}

    created = 0
    for nome, descricao in DEFAULT_PROFILES:
        if nome in existing:
            logger.info("Seed: profile '%s' already exists", nome)
            continue
        await repository.create(Profile(nome=nome, descricao=descricao))
        logger.info("Seed: profile '%s' created", nome)
        created += 1
    return created


async def seed_admin_user(
    user_repository: UserRepository,
    profile_repository: ProfileRepository,
    email: str,
    password: str,
    nome: str = "Admin",
) -> Optional[User]:
    """Create a first user with the Admin profile when no user exists yet"""
    if await user_repository.find_all():
        logger.info("Seed: users already exist, no admin created")
        return None

    admin_profile = await profile_repository.find_by_name(ADMIN_PROFILE)
    if admin_profile is None:
        logger.warning("Seed: profile '%s' not found, admin user not created", ADMIN_PROFILE)
        return None

    user = await user_repository.create(User(nome=nome, email=email, senha=password), admin_profile.id)
    logger.info("Seed: user '%s' created", nome)
    return user
