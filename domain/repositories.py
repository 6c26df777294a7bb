"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List

from domain.entities import Profile, User


class ProfileRepository(ABC):
    """Repository interface for the ``perfis`` collection"""

    @abstractmethod
    async def create(self, profile: Profile) -> Profile:
        """Assign a new id and insert the profile"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Profile]:
        """Find all profiles"""
        pass

    @abstractmethod
    async def find_by_id(self, profile_id: str) -> Profile:
        """Find profile by ID, raising NotFoundError on a malformed or unknown id"""
        pass

    @abstractmethod
    async def find_by_name(self, nome: str) -> Optional[Profile]:
        """Find profile by name, None when nothing matches"""
        pass

    @abstractmethod
    async def update_description(self, profile: Profile) -> None:
        """Overwrite description and updated_at only"""
        pass

    @abstractmethod
    async def delete(self, profile_id: str) -> None:
        """Delete profile, raising NotFoundError when it does not exist"""
        pass


class UserRepository(ABC):
    """Repository interface for the ``usuarios`` collection

    Implementations hash ``senha`` before anything reaches storage.
    """

    @abstractmethod
    async def create(self, user: User, profile_id: str) -> User:
        """Assign id and profile, hash the password and insert"""
        pass

    @abstractmethod
    async def find_all(self) -> List[User]:
        """Find all users"""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> User:
        """Find user by ID, raising NotFoundError on a malformed or unknown id"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email, None when nothing matches"""
        pass

    @abstractmethod
    async def update(self, user_id: str, user: User) -> User:
        """Overwrite the mutable fields; rehash senha only when it is non-empty"""
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        """Delete user, raising NotFoundError when it does not exist"""
        pass
