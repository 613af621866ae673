from abc import ABC, abstractmethod
from typing import Any, Dict


class SeenDataAccess(ABC):
    """
    Abstract Base Class for the seen-insight storage layer.
    Defines the contract for persisting per-user exposure history, so the
    seen store can sit on top of any backend (JSON files, Postgres, ...)
    through a consistent interface.
    """

    @abstractmethod
    def load_seen_map(self, storage_key: str) -> Dict[str, Any]:
        """
        Loads the raw seen map stored under a user's storage key.

        Args:
            storage_key: The user-namespaced key, e.g. "reclaim/insights:seen:v1:u1".

        Returns:
            The stored mapping of "<screen>:<insight_id>" to epoch millis, or
            an empty dict if nothing has been stored yet.
        """
        pass

    @abstractmethod
    def save_seen_map(self, storage_key: str, seen: Dict[str, int]) -> None:
        """Replaces the seen map stored under a user's storage key."""
        pass
