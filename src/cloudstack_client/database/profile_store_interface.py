from abc import ABC, abstractmethod
from typing import List

from cloudstack_client.models.profile import ConnectionProfile


class BaseProfileStore(ABC):
    """
    Abstract base class defining the interface for connection profile backends.
    """

    @abstractmethod
    def get_profile(self, name: str) -> ConnectionProfile:
        """Retrieve a profile by name; raises ProfileNotFoundError if absent."""
        pass

    @abstractmethod
    def list_profiles(self) -> List[ConnectionProfile]:
        """Return all stored profiles."""
        pass

    @abstractmethod
    def add_profile(self, profile: ConnectionProfile) -> None:
        """Store a new profile; raises ValueError if the name is taken."""
        pass

    @abstractmethod
    def update_profile(self, profile: ConnectionProfile) -> None:
        """Replace an existing profile; raises ProfileNotFoundError if absent."""
        pass

    @abstractmethod
    def remove_profile(self, name: str) -> None:
        """Delete a profile by name; raises ProfileNotFoundError if absent."""
        pass
