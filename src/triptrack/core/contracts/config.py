"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class TripTrackConfig(BaseModel):
    data_path: Path = Path("triptrack-state.json")
    room_store: str = "http"
    room_url: str | None = None
    poll_interval: float = Field(default=2.0, gt=0)
    timeout: float = Field(default=10.0, gt=0)
    share_base_url: str = "https://example.invalid/trip"

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_room_store(self) -> TripTrackConfig:
        if self.room_store not in {"http", "memory"}:
            raise ValueError("room_store must be one of: http, memory")
        if self.room_store == "http" and not (self.room_url or "").strip():
            raise ValueError("room_store 'http' requires a non-empty room_url")
        return self
