"""Seed/stored dataset reconciliation."""

from __future__ import annotations

from triptrack.core.contracts.data import AppData, City


def _merge_city(seed_city: City, stored_city: City) -> City:
    stored_ids = set(stored_city.attraction_ids())
    added = [attraction for attraction in seed_city.attractions if attraction.id not in stored_ids]
    if not added:
        return stored_city
    return stored_city.model_copy(update={"attractions": [*stored_city.attractions, *added]})


def merge(seed: AppData, stored: AppData) -> AppData:
    """Reconcile the seed dataset with a user's stored dataset.

    Stored cities and attractions are kept as-is; seed attractions missing from
    a stored city are appended after the stored ones, seed cities missing from
    ``stored`` are carried over whole, and user-created cities follow the seed
    cities in their original order. Neither input is modified.

    Presence is judged by id only, so a seed attraction the user deleted comes
    back on the next merge.
    """
    stored_by_id = {city.id: city for city in stored.cities}
    seed_ids = {city.id for city in seed.cities}

    merged: list[City] = []
    for seed_city in seed.cities:
        stored_city = stored_by_id.get(seed_city.id)
        if stored_city is None:
            merged.append(seed_city)
        else:
            merged.append(_merge_city(seed_city, stored_city))

    merged.extend(city for city in stored.cities if city.id not in seed_ids)
    return AppData(cities=merged)


__all__ = ["merge"]
