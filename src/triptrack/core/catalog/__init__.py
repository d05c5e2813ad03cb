"""Catalog edits over app snapshots."""

from triptrack.core.catalog.ops import (
    add_attraction,
    add_city,
    add_photo,
    add_video,
    change_visit_count,
    city_progress,
    clear_coordinates,
    delete_attraction,
    delete_city,
    is_visited,
    media_data_url,
    overall_progress,
    remove_photo,
    remove_video,
    rename_city,
    set_coordinates,
    toggle_visited,
    update_attraction,
)

__all__ = [
    "add_attraction",
    "add_city",
    "add_photo",
    "add_video",
    "change_visit_count",
    "city_progress",
    "clear_coordinates",
    "delete_attraction",
    "delete_city",
    "is_visited",
    "media_data_url",
    "overall_progress",
    "remove_photo",
    "remove_video",
    "rename_city",
    "set_coordinates",
    "toggle_visited",
    "update_attraction",
]
