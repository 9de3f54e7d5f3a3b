"""
Working color list storage.

The core never owns the user's working palette; it talks to a store
through ``ColorStore``. ``InMemoryColorStore`` is the per-session
implementation used by the HTTP layer.
"""

from collections import OrderedDict
from threading import Lock
from typing import List, Optional, Protocol

from loguru import logger

from prizm.config import config
from prizm.services.colors.model import Color


class ColorStore(Protocol):
    def add(self, color: Color) -> bool:
        ...

    def remove(self, index: int) -> Color:
        ...

    def remove_all(self) -> None:
        ...

    def rename(self, index: int, name: str) -> str:
        ...

    def colors(self) -> List[Color]:
        ...

    def names(self) -> List[str]:
        ...


def default_name(number: int) -> str:
    return f"Color {number}"


class InMemoryColorStore:
    """
    Thread-safe working color list with display names.

    Every added color gets the next "Color <n>" number, and keeps it after
    other entries are removed, so default names never repeat within a list.
    """

    def __init__(self):
        self._lock = Lock()
        self._colors: List[Color] = []
        self._names: List[str] = []
        self._numbers: List[int] = []
        self._next_number = 1

    def add(self, color: Color) -> bool:
        """Append ``color`` unless its hex key is already present."""
        with self._lock:
            key = color.hex_key()
            if any(existing.hex_key() == key for existing in self._colors):
                return False
            self._colors.append(color)
            self._numbers.append(self._next_number)
            self._names.append(default_name(self._next_number))
            self._next_number += 1
            return True

    def remove(self, index: int) -> Color:
        """
        Remove the color at ``index``.

        Raises:
            IndexError: If ``index`` is out of range
        """
        with self._lock:
            self._check_index(index)
            self._names.pop(index)
            self._numbers.pop(index)
            return self._colors.pop(index)

    def remove_all(self) -> None:
        with self._lock:
            self._colors.clear()
            self._names.clear()
            self._numbers.clear()
            self._next_number = 1

    def rename(self, index: int, name: str) -> str:
        """Rename a color; a blank name restores its default "Color <n>"."""
        with self._lock:
            self._check_index(index)
            cleaned = name.strip()
            self._names[index] = cleaned or default_name(self._numbers[index])
            return self._names[index]

    def colors(self) -> List[Color]:
        with self._lock:
            return list(self._colors)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._names)

    def __len__(self) -> int:
        with self._lock:
            return len(self._colors)

    def _check_index(self, index: int):
        if not 0 <= index < len(self._colors):
            raise IndexError(f"No color at index {index}")


class SessionStoreRegistry:
    """
    Hands out one ``InMemoryColorStore`` per session id.

    Holds at most ``max_sessions`` stores; creating one more evicts the
    least recently used session.
    """

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._lock = Lock()
        self._stores: "OrderedDict[str, InMemoryColorStore]" = OrderedDict()

    def get(self, session_id: str) -> InMemoryColorStore:
        """Return the session's store, creating it on first use."""
        with self._lock:
            store = self._stores.get(session_id)
            if store is None:
                if len(self._stores) >= self.max_sessions:
                    self._evict_lru()
                store = InMemoryColorStore()
                self._stores[session_id] = store
            else:
                self._stores.move_to_end(session_id)
            return store

    def peek(self, session_id: str) -> Optional[InMemoryColorStore]:
        """Return the session's store if it exists, without creating one."""
        with self._lock:
            store = self._stores.get(session_id)
            if store is not None:
                self._stores.move_to_end(session_id)
            return store

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._stores.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._stores.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._stores)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._stores

    def _evict_lru(self):
        """Evict the least recently used session."""
        if not self._stores:
            return
        session_id, _ = self._stores.popitem(last=False)
        logger.debug(f"Evicted palette session: {session_id}")


# Global registry instance
session_stores = SessionStoreRegistry(max_sessions=config.MAX_SESSIONS)
