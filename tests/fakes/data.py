"""Deterministic travel data builders for tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from triptrack.core.contracts.data import AppData, Attraction, City

FIXED_NOW = datetime(2024, 5, 1, 8, 30, tzinfo=UTC)


def attraction(attraction_id: str, name: str | None = None, **fields: object) -> Attraction:
    return Attraction(
        id=attraction_id,
        name=name or attraction_id.replace("-", " ").title(),
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
        **fields,
    )


def city(city_id: str, *attractions: Attraction, name: str | None = None) -> City:
    return City(id=city_id, name=name or city_id.title(), created_at=FIXED_NOW, attractions=list(attractions))


def single_city(city_id: str = "lisbon", *attraction_ids: str) -> AppData:
    return AppData(cities=[city(city_id, *(attraction(attraction_id) for attraction_id in attraction_ids))])


class StepClock:
    """Clock advancing one second per call."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self._now = start

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now
