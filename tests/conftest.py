import pytest

from eventfinder.config.settings import Settings, get_settings
from eventfinder.domain.models import Coordinate


def without_delay(settings: Settings) -> Settings:
    events = settings.events.model_copy(update={"simulated_delay_seconds": 0.0})
    return settings.model_copy(update={"events": events})


@pytest.fixture
def settings() -> Settings:
    # Packaged defaults, minus the simulated network latency.
    return without_delay(get_settings())


@pytest.fixture
def nyc() -> Coordinate:
    return Coordinate(latitude=40.7128, longitude=-74.0060)
