"""Environment provider - the client's view of its surroundings.

Session logic never touches process globals directly. It reads the current
URL's query parameters, a small persisted key-value store, and performs
navigations through an :class:`EnvironmentProvider` handed in by the caller.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import httpx

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Persisted string flags, the analogue of browser local storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class InMemoryStore(KeyValueStore):
    """Store that lives as long as the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store persisted as a flat JSON object on disk.

    The file is read on every access so that separate processes (e.g. two
    CLI invocations) observe each other's writes. A missing or unreadable
    file is treated as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # write then swap, so a reader never sees a half-written file
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True))
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class EnvironmentProvider(ABC):
    """Capabilities the session logic needs from its host."""

    @abstractmethod
    def get_query_param(self, name: str) -> Optional[str]:
        """Value of a query parameter on the current location, if present."""
        pass

    @abstractmethod
    def get_stored_flag(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_stored_flag(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_stored_flag(self, key: str) -> None:
        pass

    @abstractmethod
    def navigate_to(self, url: str) -> None:
        """Leave the current location for ``url``."""
        pass


class LocationEnvironment(EnvironmentProvider):
    """Environment backed by a current URL and a :class:`KeyValueStore`.

    Navigations replace the current URL and are recorded in
    ``navigations`` in the order they happened.
    """

    def __init__(self, url: str = "/", store: Optional[KeyValueStore] = None):
        self.url = url
        self.store = store if store is not None else InMemoryStore()
        self.navigations: list[str] = []

    def get_query_param(self, name: str) -> Optional[str]:
        return httpx.URL(self.url).params.get(name)

    def get_stored_flag(self, key: str) -> Optional[str]:
        return self.store.get(key)

    def set_stored_flag(self, key: str, value: str) -> None:
        self.store.set(key, value)

    def remove_stored_flag(self, key: str) -> None:
        self.store.remove(key)

    def navigate_to(self, url: str) -> None:
        logger.debug("Navigating from %s to %s", self.url, url)
        self.navigations.append(url)
        self.url = url
