"""MongoDB Repository Implementations

pymongo is blocking; every driver call runs in the worker thread pool.
"""
import logging
from typing import Any, Callable, Optional, List

from bson import ObjectId
from pymongo.errors import PyMongoError
from fastapi.concurrency import run_in_threadpool

from domain.repositories import ProfileRepository, UserRepository
from domain.entities import Profile, User, utcnow
from domain.errors import InternalError, NotFoundError
from infrastructure.database import MongoDatabase, PROFILES_COLLECTION, USERS_COLLECTION
from infrastructure.repositories.identifiers import parse_object_id
from infrastructure.security import get_password_hash

logger = logging.getLogger(__name__)

PROFILE_NOT_FOUND = "Perfil não encontrado!"
USER_NOT_FOUND = "Usuário não encontrado!"


def _to_document(entity, object_id: ObjectId) -> dict:
    document = entity.model_dump(exclude={"id"})
    document["_id"] = object_id
    return document


def _from_document(document: dict) -> dict:
    data = dict(document)
    data["id"] = str(data.pop("_id"))
    return data


class _MongoRepository:
    collection_name: str = ""

    def __init__(self, database: MongoDatabase):
        self._collection = database.collection(self.collection_name)

    async def _run(self, operation: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return await run_in_threadpool(fn, *args, **kwargs)
        except PyMongoError as exc:
            logger.error("%s on %s failed: %s", operation, self.collection_name, exc)
            raise InternalError(str(exc), error=f"Falha ao executar {operation}!") from exc


class MongoProfileRepository(_MongoRepository, ProfileRepository):
    """Profiles stored in the ``perfis`` collection"""

    collection_name = PROFILES_COLLECTION

    def _object_id(self, profile_id: str) -> ObjectId:
        return parse_object_id(profile_id, PROFILE_NOT_FOUND, f"Perfil {profile_id} não existe")

    async def create(self, profile: Profile) -> Profile:
        object_id = ObjectId()
        await self._run("criar perfil", self._collection.insert_one, _to_document(profile, object_id))
        logger.info("Profile created: %s (%s)", profile.nome, object_id)
        return profile.model_copy(update={"id": str(object_id)})

    async def find_all(self) -> List[Profile]:
        documents = await self._run("listar perfis", lambda: list(self._collection.find({})))
        return [Profile(**_from_document(doc)) for doc in documents]

    async def find_by_id(self, profile_id: str) -> Profile:
        object_id = self._object_id(profile_id)
        document = await self._run("buscar perfil", self._collection.find_one, {"_id": object_id})
        if document is None:
            logger.info("Profile %s not found", profile_id)
            raise NotFoundError(f"Perfil {profile_id} não existe", error=PROFILE_NOT_FOUND)
        return Profile(**_from_document(document))

    async def find_by_name(self, nome: str) -> Optional[Profile]:
        document = await self._run("buscar perfil", self._collection.find_one, {"nome": nome})
        if document is None:
            return None
        return Profile(**_from_document(document))

    async def update_description(self, profile: Profile) -> None:
        object_id = self._object_id(profile.id)
        result = await self._run(
            "editar perfil",
            self._collection.update_one,
            {"_id": object_id},
            {"$set": {"descricao": profile.descricao, "updated_at": utcnow()}},
        )
        if result.matched_count == 0:
            raise NotFoundError(f"Perfil {profile.id} não existe", error=PROFILE_NOT_FOUND)
        logger.info("Profile updated: %s", object_id)

    async def delete(self, profile_id: str) -> None:
        object_id = self._object_id(profile_id)
        count = await self._run("deletar perfil", self._collection.count_documents, {"_id": object_id})
        if count == 0:
            raise NotFoundError(f"Perfil {profile_id} não existe", error=PROFILE_NOT_FOUND)
        await self._run("deletar perfil", self._collection.delete_one, {"_id": object_id})
        logger.info("Profile deleted: %s", object_id)


class MongoUserRepository(_MongoRepository, UserRepository):
    """Users stored in the ``usuarios`` collection"""

    collection_name = USERS_COLLECTION

    def _object_id(self, user_id: str) -> ObjectId:
        return parse_object_id(user_id, USER_NOT_FOUND, f"Usuário {user_id} não existe")

    async def create(self, user: User, profile_id: str) -> User:
        object_id = ObjectId()
        now = utcnow()
        stored = user.model_copy(update={
            "id": str(object_id),
            "senha": await run_in_threadpool(get_password_hash, user.senha),
            "perfil_id": profile_id,
            "created_at": now,
            "updated_at": now,
        })
        await self._run("criar usuário", self._collection.insert_one, _to_document(stored, object_id))
        logger.info("User created: %s", object_id)
        return stored

    async def find_all(self) -> List[User]:
        documents = await self._run("listar usuários", lambda: list(self._collection.find({})))
        return [User(**_from_document(doc)) for doc in documents]

    async def find_by_id(self, user_id: str) -> User:
        object_id = self._object_id(user_id)
        document = await self._run("buscar usuário", self._collection.find_one, {"_id": object_id})
        if document is None:
            logger.info("User %s not found", user_id)
            raise NotFoundError(f"Usuário {user_id} não existe", error=USER_NOT_FOUND)
        return User(**_from_document(document))

    async def find_by_email(self, email: str) -> Optional[User]:
        document = await self._run("buscar usuário", self._collection.find_one, {"email": email})
        if document is None:
            return None
        return User(**_from_document(document))

    async def update(self, user_id: str, user: User) -> User:
        object_id = self._object_id(user_id)
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

        result = await self._run(
            "editar usuário", self._collection.update_one, {"_id": object_id}, {"$set": changes}
        )
        if result.matched_count == 0:
            raise NotFoundError(f"Usuário {user_id} não existe", error=USER_NOT_FOUND)
        logger.info("User updated: %s", object_id)
        return await self.find_by_id(user_id)

    async def delete(self, user_id: str) -> None:
        object_id = self._object_id(user_id)
        count = await self._run("deletar usuário", self._collection.count_documents, {"_id": object_id})
        if count == 0:
            raise NotFoundError(f"Usuário {user_id} não existe", error=USER_NOT_FOUND)
        await self._run("deletar usuário", self._collection.delete_one, {"_id": object_id})
        logger.info("User deleted: %s", object_id)
