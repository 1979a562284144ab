"""`.env` support: local overrides such as `EVENTFINDER_LOCATION_LAT` can live in a `.env` file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the nearest `.env` above the working directory, once.

    Variables already set in the process environment are never overridden.
    Returns the loaded file, or None when there is none.
    """
    found = find_dotenv(usecwd=True)
    if not found:
        return None
    load_dotenv(dotenv_path=found, override=False)
    return Path(found)
