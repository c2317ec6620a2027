"""Persistence for the conversation collection.

The whole collection is stored as one JSON string under a single key. Any
mutable mapping works as the backend: NiceGUI's per-browser
``app.storage.user`` in the running app, a plain dict in tests.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from typing import Any

from pydantic import ValidationError

from localchat.chat.models import ConversationCollection

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "chats"


class ChatStorage(ABC):
    """Load/save interface for the conversation collection."""

    @abstractmethod
    def load(self) -> ConversationCollection | None:
        """Return the stored collection, or None when nothing usable is stored."""

    @abstractmethod
    def save(self, collection: ConversationCollection) -> None:
        """Replace the stored collection."""


class KeyValueStorage(ChatStorage):
    """Stores the collection as JSON under one key of a mapping.

    Not transactional: two writers sharing the same backend and key
    overwrite each other.
    """

    def __init__(
        self,
        backend: MutableMapping[str, Any],
        key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._backend = backend
        self._key = key

    def load(self) -> ConversationCollection | None:
        raw = self._backend.get(self._key)
        if raw is None:
            return None

        try:
            return ConversationCollection.model_validate_json(raw)
        except (ValidationError, TypeError, ValueError) as e:
            logger.error(f"Error parsing saved chats, discarding them: {e}")
            self._backend.pop(self._key, None)
            return None

    def save(self, collection: ConversationCollection) -> None:
        self._backend[self._key] = collection.model_dump_json(by_alias=True)
