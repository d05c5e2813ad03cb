"""Built-in seed dataset shipped with the application."""

from __future__ import annotations

from datetime import datetime

from triptrack.core.contracts.data import AppData, Attraction, City, Coordinates, utc_now

# (city id, city name, [(attraction id, attraction name, lat, lng), ...])
_SEED_CITIES: tuple[tuple[str, str, tuple[tuple[str, str, float, float], ...]], ...] = (
    (
        "beijing",
        "Beijing",
        (
            ("tiananmen", "Tiananmen Square", 39.9042, 116.3974),
            ("yuanmingyuan", "Old Summer Palace", 40.0086, 116.3008),
            ("forbidden-city", "Forbidden City", 39.9163, 116.3972),
            ("great-wall", "Great Wall", 40.4319, 116.5704),
            ("summer-palace", "Summer Palace", 39.9998, 116.2754),
        ),
    ),
    (
        "shanghai",
        "Shanghai",
        (
            ("bund", "The Bund", 31.2397, 121.4994),
            ("disney", "Shanghai Disneyland", 31.1443, 121.6573),
            ("yu-garden", "Yu Garden", 31.2267, 121.4932),
        ),
    ),
    (
        "guangzhou",
        "Guangzhou",
        (
            ("canton-tower", "Canton Tower", 23.1064, 113.3245),
            ("yuexiu-park", "Yuexiu Park", 23.1394, 113.2688),
        ),
    ),
)


def default_seed(now: datetime | None = None) -> AppData:
    """Build the seed dataset with every timestamp set to *now*."""
    stamp = now or utc_now()
    cities = [
        City(
            id=city_id,
            name=city_name,
            created_at=stamp,
            attractions=[
                Attraction(
                    id=attraction_id,
                    name=attraction_name,
                    coordinates=Coordinates(lat=lat, lng=lng),
                    created_at=stamp,
                    updated_at=stamp,
                )
                for attraction_id, attraction_name, lat, lng in attractions
            ],
        )
        for city_id, city_name, attractions in _SEED_CITIES
    ]
    return AppData(cities=cities)


__all__ = ["default_seed"]
