from abc import ABC, abstractmethod
from typing import List

from cyberhack.domain.models.world import WorldState


class SaveRepository(ABC):
    @abstractmethod
    def save(self, slot: int, world: WorldState) -> None:
        raise NotImplementedError

    @abstractmethod
    def load(self, slot: int) -> WorldState:
        """Return a fresh WorldState for ``slot`` or raise ``SaveSlotError``."""
        raise NotImplementedError

    @abstractmethod
    def list_slots(self) -> List[int]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, slot: int) -> bool:
        raise NotImplementedError
