"""
Event repositories.

Only a mock repository exists today: it re-reads the fixed prototype catalog on
every call and never remembers anything between queries. Placement relative to
the query location is done by `EventPrototype.resolve`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from eventfinder.catalog.loader import load_prototypes
from eventfinder.domain.models import EventPrototype

logger = logging.getLogger(__name__)


class EventRepository(Protocol):
    """Anything that can hand the query pipeline its candidate events."""

    def prototypes(self) -> list[EventPrototype]: ...


class MockEventRepository:
    """Serves the static fixture catalog (packaged JSON or a configured file)."""

    def __init__(self, catalog_path: str | Path | None = None):
        self._catalog_path = catalog_path

    def prototypes(self) -> list[EventPrototype]:
        items = load_prototypes(self._catalog_path)
        logger.debug("Loaded %d event prototypes from %s", len(items), self._catalog_path or "packaged catalog")
        return items
