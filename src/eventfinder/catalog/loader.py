"""
Event catalog loader.

The catalog is a JSON list of event prototypes. By default the packaged fixture
(`eventfinder/catalog/prototypes.json`) is used; `events.catalog_path` in settings
points at a replacement file, relative to the working directory. Entries are
validated into typed Pydantic models so the query pipeline can assume a
consistent shape.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path

from pydantic import TypeAdapter

from eventfinder.domain.models import EventPrototype


_PROTOTYPES_ADAPTER = TypeAdapter(list[EventPrototype])

PACKAGED_CATALOG = "prototypes.json"


def load_prototypes(path: str | Path | None = None) -> list[EventPrototype]:
    """Load and validate an event prototype catalog (packaged fixture when `path` is None)."""
    if path is None:
        text = resources.files("eventfinder.catalog").joinpath(PACKAGED_CATALOG).read_text(encoding="utf-8")
    else:
        text = Path(path).expanduser().read_text(encoding="utf-8")
    return _PROTOTYPES_ADAPTER.validate_python(json.loads(text))
