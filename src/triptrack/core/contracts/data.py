"""Travel data contracts: coordinates, attractions, cities and the app snapshot."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field, model_validator


def utc_now() -> datetime:
    return datetime.now(UTC)


_WIRE_MODEL_CONFIG = {"frozen": True, "populate_by_name": True}


class Coordinates(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

    model_config = _WIRE_MODEL_CONFIG


class Attraction(BaseModel):
    """A place within a city.

    ``visited`` and ``visit_count`` are stored independently; readers should use
    :attr:`really_visited`, which only counts a visit when both agree.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    visited: bool = False
    visit_count: int = Field(default=0, ge=0, alias="visitCount")
    photos: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)
    notes: str = ""
    coordinates: Coordinates | None = None
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    model_config = _WIRE_MODEL_CONFIG

    @property
    def really_visited(self) -> bool:
        return self.visited and self.visit_count > 0


class City(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    attractions: list[Attraction] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")

    model_config = _WIRE_MODEL_CONFIG

    @model_validator(mode="after")
    def validate_unique_attraction_ids(self) -> City:
        seen: set[str] = set()
        for attraction in self.attractions:
            if attraction.id in seen:
                raise ValueError(f"duplicate attraction id in city {self.id}: {attraction.id}")
            seen.add(attraction.id)
        return self

    def attraction_ids(self) -> list[str]:
        return [attraction.id for attraction in self.attractions]

    def find_attraction(self, attraction_id: str) -> Attraction | None:
        for attraction in self.attractions:
            if attraction.id == attraction_id:
                return attraction
        return None


class AppData(BaseModel):
    """Whole-dataset snapshot: the unit of storage, export, merge and sync."""

    cities: list[City] = Field(default_factory=list)

    model_config = _WIRE_MODEL_CONFIG

    @model_validator(mode="after")
    def validate_unique_city_ids(self) -> AppData:
        seen: set[str] = set()
        for city in self.cities:
            if city.id in seen:
                raise ValueError(f"duplicate city id: {city.id}")
            seen.add(city.id)
        return self

    def city_ids(self) -> list[str]:
        return [city.id for city in self.cities]

    def find_city(self, city_id: str) -> City | None:
        for city in self.cities:
            if city.id == city_id:
                return city
        return None


__all__ = ["AppData", "Attraction", "City", "Coordinates", "utc_now"]
