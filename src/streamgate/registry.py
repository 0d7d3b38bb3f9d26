"""Model registry: one authoritative table for routing and listing."""

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping

from pydantic import BaseModel, ConfigDict

from .errors import MissingModel, UnknownModel

logger = logging.getLogger(__name__)


class ModelEntry(BaseModel):
    """A single upstream model."""
    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    name: str
    description: str = ""


class ModelRegistry(Mapping[str, ModelEntry]):
    """
    Read-only mapping from model identifier to its entry.

    The endpoint used for routing and the metadata used for listing live on the
    same entry, so the two views always agree on which models exist.
    """

    def __init__(self, entries: Mapping[str, ModelEntry]):
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_config(cls, models: Dict[str, Dict[str, Any]]) -> "ModelRegistry":
        """
        Build a registry from the ``models`` section of the configuration.

        Raises:
            ValueError: if an entry has no url.
        """
        entries = {}
        for model_id, settings in (models or {}).items():
            settings = settings or {}
            url = settings.get("url")
            if not url:
                raise ValueError(f"Model '{model_id}' has no url configured")
            entries[model_id] = ModelEntry(
                id=model_id,
                url=url,
                name=settings.get("name") or model_id,
                description=settings.get("description") or "",
            )

        if not entries:
            logger.warning("No models configured, every chat request will be rejected")
        return cls(entries)

    def __getitem__(self, model_id: str) -> ModelEntry:
        return self._entries[model_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, model_id: str) -> ModelEntry:
        """Return the entry for a requested model or raise the matching client error."""
        if not model_id:
            raise MissingModel()
        entry = self._entries.get(model_id)
        if entry is None:
            raise UnknownModel(model_id)
        return entry

    def listing(self) -> Dict[str, Dict[str, str]]:
        """Display metadata keyed by model identifier."""
        return {
            model_id: {"name": entry.name, "description": entry.description}
            for model_id, entry in self._entries.items()
        }
