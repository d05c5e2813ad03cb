"""Shared test fixtures for triptrack tests."""

from __future__ import annotations

import pytest

from triptrack.core.contracts.data import AppData, Attraction, Coordinates
from triptrack.core.merge import default_seed
from tests.fakes.data import FIXED_NOW, attraction, city


@pytest.fixture
def seed() -> AppData:
    """The built-in seed with deterministic timestamps."""
    return default_seed(FIXED_NOW)


@pytest.fixture
def visited_attraction() -> Attraction:
    return attraction(
        "forbidden-city",
        "Forbidden City (edited)",
        visited=True,
        visit_count=3,
        photos=["data:image/png;base64,AAAA", "data:image/png;base64,BBBB"],
        notes="Go early",
        coordinates=Coordinates(lat=39.9163, lng=116.3972),
    )


@pytest.fixture
def stored_data(visited_attraction: Attraction) -> AppData:
    """A user's stored data: Beijing trimmed to three attractions plus a user-created Tokyo."""
    beijing = city(
        "beijing",
        attraction("tiananmen", "Tiananmen Square"),
        visited_attraction,
        attraction("great-wall", "Great Wall"),
        name="Peking",
    )
    tokyo = city("tokyo", attraction("senso-ji", "Senso-ji", visited=True, visit_count=1))
    return AppData(cities=[beijing, tokyo])
