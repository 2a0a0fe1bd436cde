"""
Document Storage Backends for VectorDraft

Key/value stores holding the serialized document. Read and write
failures are logged and reported through return values; they never
raise into the editor.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union
import json
import logging

logger = logging.getLogger(__name__)


class DocumentStorage(ABC):
    """Abstract key/value storage for serialized documents."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read a stored value.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if missing or unreadable
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> bool:
        """
        Store a value.

        Returns:
            True if the value was written
        """
        pass


class MemoryStorage(DocumentStorage):
    """In-process storage, used for tests and scratch documents."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> bool:
        self._values[key] = value
        return True


class JsonFileStorage(DocumentStorage):
    """A JSON object on disk mapping keys to stored strings."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold an object", self.path)
            return {}
        return data

    def read(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> bool:
        data = self._load()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.warning("Could not write storage file %s: %s", self.path, e)
            return False
        return True


class QtSettingsStorage(DocumentStorage):
    """Storage in the platform settings store through ``QSettings``."""

    def __init__(self, organization: str = "VectorDraft", application: str = "VectorDraft"):
        from PyQt6.QtCore import QSettings

        self._no_error = QSettings.Status.NoError
        self._settings = QSettings(organization, application)

    def read(self, key: str) -> Optional[str]:
        value = self._settings.value(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> bool:
        self._settings.setValue(key, value)
        self._settings.sync()
        if self._settings.status() != self._no_error:
            logger.warning("Could not write settings key %s: %s", key, self._settings.status())
            return False
        return True
