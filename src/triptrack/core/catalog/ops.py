"""City and attraction edits.

Every operation returns a new :class:`AppData`; the input snapshot is never
modified. Callers persist the returned snapshot as a whole.
"""

from __future__ import annotations

import base64
from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from triptrack.core.contracts.data import AppData, Attraction, City, Coordinates, utc_now
from triptrack.core.contracts.exceptions import NotFoundError, ValidationError

_EDITABLE_FIELDS = frozenset({"name", "visited", "visit_count", "photos", "videos", "notes", "coordinates"})


def _generate_id(prefix: str, taken: set[str], now: datetime) -> str:
    base = f"{prefix}-{int(now.timestamp() * 1000)}"
    candidate = base
    suffix = 1
    while candidate in taken:
        suffix += 1
        candidate = f"{base}-{suffix}"
    return candidate


def _require_name(name: str, *, what: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError(f"{what} name must not be empty")
    return cleaned


def _get_city(data: AppData, city_id: str) -> City:
    city = data.find_city(city_id)
    if city is None:
        raise NotFoundError(f"city not found: {city_id}", city_id=city_id)
    return city


def _get_attraction(city: City, attraction_id: str) -> Attraction:
    attraction = city.find_attraction(attraction_id)
    if attraction is None:
        raise NotFoundError(
            f"attraction not found: {city.id}/{attraction_id}",
            city_id=city.id,
            attraction_id=attraction_id,
        )
    return attraction


def _replace_city(data: AppData, city: City) -> AppData:
    return AppData(cities=[city if existing.id == city.id else existing for existing in data.cities])


def _replace_attraction(data: AppData, city: City, attraction: Attraction) -> AppData:
    attractions = [attraction if existing.id == attraction.id else existing for existing in city.attractions]
    return _replace_city(data, city.model_copy(update={"attractions": attractions}))


def _edit_attraction(
    data: AppData,
    city_id: str,
    attraction_id: str,
    edit: Callable[[Attraction], dict[str, Any]],
    now: datetime | None,
) -> AppData:
    city = _get_city(data, city_id)
    attraction = _get_attraction(city, attraction_id)
    update = edit(attraction)
    update["updated_at"] = now or utc_now()
    return _replace_attraction(data, city, attraction.model_copy(update=update))


# ----------------------------------------------------------------------
# Cities
# ----------------------------------------------------------------------


def add_city(data: AppData, name: str, *, now: datetime | None = None) -> tuple[AppData, City]:
    stamp = now or utc_now()
    city = City(
        id=_generate_id("city", set(data.city_ids()), stamp),
        name=_require_name(name, what="city"),
        created_at=stamp,
    )
    return AppData(cities=[*data.cities, city]), city


def rename_city(data: AppData, city_id: str, name: str) -> AppData:
    city = _get_city(data, city_id)
    return _replace_city(data, city.model_copy(update={"name": _require_name(name, what="city")}))


def delete_city(data: AppData, city_id: str) -> AppData:
    _get_city(data, city_id)
    return AppData(cities=[city for city in data.cities if city.id != city_id])


# ----------------------------------------------------------------------
# Attractions
# ----------------------------------------------------------------------


def add_attraction(
    data: AppData, city_id: str, name: str, *, now: datetime | None = None
) -> tuple[AppData, Attraction]:
    city = _get_city(data, city_id)
    stamp = now or utc_now()
    attraction = Attraction(
        id=_generate_id("attraction", set(city.attraction_ids()), stamp),
        name=_require_name(name, what="attraction"),
        created_at=stamp,
        updated_at=stamp,
    )
    updated_city = city.model_copy(update={"attractions": [*city.attractions, attraction]})
    return _replace_city(data, updated_city), attraction


def update_attraction(
    data: AppData,
    city_id: str,
    attraction_id: str,
    *,
    now: datetime | None = None,
    **changes: Any,
) -> AppData:
    """Apply field *changes* to an attraction and bump its ``updated_at``.

    The result is re-validated so out-of-range values raise
    :class:`ValidationError` instead of being stored.
    """
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"unsupported attraction fields: {', '.join(sorted(unknown))}")

    city = _get_city(data, city_id)
    attraction = _get_attraction(city, attraction_id)
    payload = attraction.model_dump()
    payload.update(changes)
    payload["updated_at"] = now or utc_now()
    try:
        updated = Attraction.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(f"invalid attraction update: {exc}") from exc
    return _replace_attraction(data, city, updated)


def delete_attraction(data: AppData, city_id: str, attraction_id: str) -> AppData:
    city = _get_city(data, city_id)
    _get_attraction(city, attraction_id)
    remaining = [attraction for attraction in city.attractions if attraction.id != attraction_id]
    return _replace_city(data, city.model_copy(update={"attractions": remaining}))


def toggle_visited(data: AppData, city_id: str, attraction_id: str, *, now: datetime | None = None) -> AppData:
    def edit(attraction: Attraction) -> dict[str, Any]:
        visited = not attraction.visited
        update: dict[str, Any] = {"visited": visited}
        if visited and attraction.visit_count == 0:
            update["visit_count"] = 1
        return update

    return _edit_attraction(data, city_id, attraction_id, edit, now)


def change_visit_count(
    data: AppData, city_id: str, attraction_id: str, delta: int, *, now: datetime | None = None
) -> AppData:
    def edit(attraction: Attraction) -> dict[str, Any]:
        count = max(0, attraction.visit_count + delta)
        return {"visit_count": count, "visited": count > 0}

    return _edit_attraction(data, city_id, attraction_id, edit, now)


def set_coordinates(
    data: AppData,
    city_id: str,
    attraction_id: str,
    lat: float,
    lng: float,
    *,
    now: datetime | None = None,
) -> AppData:
    if not -90 <= lat <= 90:
        raise ValidationError(f"latitude must be between -90 and 90, got {lat}")
    if not -180 <= lng <= 180:
        raise ValidationError(f"longitude must be between -180 and 180, got {lng}")
    coordinates = Coordinates(lat=lat, lng=lng)
    return _edit_attraction(data, city_id, attraction_id, lambda _: {"coordinates": coordinates}, now)


def clear_coordinates(data: AppData, city_id: str, attraction_id: str, *, now: datetime | None = None) -> AppData:
    return _edit_attraction(data, city_id, attraction_id, lambda _: {"coordinates": None}, now)


# ----------------------------------------------------------------------
# Media
# ----------------------------------------------------------------------


def media_data_url(content: bytes, mime_type: str) -> str:
    if "/" not in mime_type:
        raise ValidationError(f"invalid media type: {mime_type!r}")
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


def _append_media(field: str) -> Callable[..., AppData]:
    def append(
        data: AppData,
        city_id: str,
        attraction_id: str,
        content: bytes,
        mime_type: str,
        *,
        now: datetime | None = None,
    ) -> AppData:
        url = media_data_url(content, mime_type)
        return _edit_attraction(
            data, city_id, attraction_id, lambda attraction: {field: [*getattr(attraction, field), url]}, now
        )

    return append


def _remove_media(field: str) -> Callable[..., AppData]:
    def remove(
        data: AppData, city_id: str, attraction_id: str, index: int, *, now: datetime | None = None
    ) -> AppData:
        def edit(attraction: Attraction) -> dict[str, Any]:
            items = list(getattr(attraction, field))
            if not 0 <= index < len(items):
                raise ValidationError(f"{field} index out of range: {index}")
            del items[index]
            return {field: items}

        return _edit_attraction(data, city_id, attraction_id, edit, now)

    return remove


add_photo = _append_media("photos")
add_video = _append_media("videos")
remove_photo = _remove_media("photos")
remove_video = _remove_media("videos")


# ----------------------------------------------------------------------
# Progress
# ----------------------------------------------------------------------


def is_visited(attraction: Attraction) -> bool:
    return attraction.really_visited


def city_progress(city: City) -> tuple[int, int]:
    visited = sum(1 for attraction in city.attractions if is_visited(attraction))
    return visited, len(city.attractions)


def overall_progress(data: AppData) -> tuple[int, int]:
    visited = 0
    total = 0
    for city in data.cities:
        city_visited, city_total = city_progress(city)
        visited += city_visited
        total += city_total
    return visited, total
