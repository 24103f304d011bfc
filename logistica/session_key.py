"""
Session key management for the shared cart.

The cart key is the only identity the client has: there is no login, and any
client holding the same key sees (and edits) the same server-side cart. The
key is persisted under a fixed storage key ("chave_carrinho") so it survives
restarts: in a small JSON file by default, or in any other KeyStorage (the
Streamlit app keeps it in the page URL, one key per browser tab).

Lifecycle:
- Created on first use if nothing is persisted yet.
- Replaced wholesale when the user applies a key or generates a new one.
- Never partially mutated.
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .exceptions import InvalidSessionKey

logger = logging.getLogger(__name__)

STORAGE_KEY = "chave_carrinho"
KEY_LENGTH = 8


def generate_key() -> str:
    """Generate a short, URL-safe random cart key (8 hex characters)."""
    return uuid.uuid4().hex[:KEY_LENGTH]


class KeyStorage(ABC):
    """Where the active key is kept between runs."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, name: str, value: str) -> None:
        ...


class KeyFileStorage(KeyStorage):
    """Durable string storage backed by a JSON object on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable key file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, name: str) -> Optional[str]:
        value = self._read().get(name)
        return value if isinstance(value, str) and value else None

    def set(self, name: str, value: str) -> None:
        data = self._read()
        data[name] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f)
        tmp_path.replace(self.path)


class SessionKeyStore:
    """
    Owns the single active cart key of this client instance.

    Every change is written through to storage. The store never talks to the
    network; reloading the cart after a key change is the caller's job.
    """

    def __init__(self, storage: KeyStorage):
        self._storage = storage
        self._active: Optional[str] = None
        self._regenerate_listeners: List[Callable[[str], None]] = []

    @property
    def active_key(self) -> str:
        return self.get_or_create_key()

    def get_or_create_key(self) -> str:
        """
        Return the active key, reading or creating the persisted one on first call.

        Returns:
            The active cart key. Repeated calls return the same value.
        """
        if self._active is None:
            stored = self._storage.get(STORAGE_KEY)
            if stored:
                self._active = stored
            else:
                self._active = generate_key()
                self._storage.set(STORAGE_KEY, self._active)
                logger.info("Generated new cart key %s", self._active)
        return self._active

    def set_key(self, new_key: Optional[str]) -> str:
        """
        Replace the active key with a user- or server-supplied one.

        Args:
            new_key: Candidate key; surrounding whitespace is ignored

        Returns:
            The trimmed key now active

        Raises:
            InvalidSessionKey: If the key is empty after trimming
        """
        key = (new_key or "").strip()
        if not key:
            raise InvalidSessionKey("Enter a cart key.")
        self._storage.set(STORAGE_KEY, key)
        self._active = key
        logger.info("Cart key set to %s", key)
        return key

    def regenerate_key(self) -> str:
        """Persist a fresh random key and tell listeners the old cart is gone."""
        key = generate_key()
        self._storage.set(STORAGE_KEY, key)
        self._active = key
        logger.info("Cart key regenerated: %s", key)
        for callback in list(self._regenerate_listeners):
            callback(key)
        return key

    def on_regenerate(self, callback: Callable[[str], None]) -> None:
        if callback not in self._regenerate_listeners:
            self._regenerate_listeners.append(callback)
