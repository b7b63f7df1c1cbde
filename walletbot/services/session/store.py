from abc import ABC, abstractmethod
from typing import Dict, Generic, Optional, TypeVar

V = TypeVar("V")


class KeyValueStore(ABC, Generic[V]):
    """
    Storage capability behind the session and conversation stores.

    Keys are conversation identifiers. Implementations may live in process
    memory or in an external key-value service.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[V]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: V) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def contains(self, key: str) -> bool:
        raise NotImplementedError


class InMemoryStore(KeyValueStore[V]):
    """
    Process-wide dictionary store.

    No locking: the platform never delivers two messages of the same
    conversation concurrently and different conversations use different keys.
    Entries never expire.
    """

    def __init__(self) -> None:
        self._items: Dict[str, V] = {}

    def get(self, key: str) -> Optional[V]:
        return self._items.get(key)

    def set(self, key: str, value: V) -> None:
        self._items[key] = value

    def delete(self, key: str) -> None:
        self._items.pop(key, None)

    def contains(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
