"""Snapshot text encoding shared by file export, clipboard text and share links."""

from __future__ import annotations

import base64
import binascii
import json
from datetime import date
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from pydantic import ValidationError as PydanticValidationError

from triptrack.core.contracts.data import AppData
from triptrack.core.contracts.exceptions import FormatError

SHARE_PARAM = "share"


def _to_payload(data: AppData) -> dict[str, Any]:
    return data.model_dump(mode="json", by_alias=True, exclude_none=True)


def encode(data: AppData) -> str:
    """Serialize *data* as indented, human-readable JSON."""
    return json.dumps(_to_payload(data), indent=2, ensure_ascii=False)


def decode(text: str) -> AppData:
    """Parse a snapshot; fails with :class:`FormatError` unless fully valid."""
    try:
        payload: Any = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise FormatError(f"snapshot is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise FormatError("snapshot must be a JSON object")
    if not isinstance(payload.get("cities"), list):
        raise FormatError("snapshot is missing a 'cities' array")

    try:
        return AppData.model_validate(payload)
    except PydanticValidationError as exc:
        raise FormatError(f"snapshot does not match the data model: {exc}") from exc


def encode_for_link(data: AppData) -> str:
    """Compact URL-safe token for embedding *data* in a query parameter."""
    compact = json.dumps(_to_payload(data), separators=(",", ":"), ensure_ascii=False)
    return base64.urlsafe_b64encode(compact.encode("utf-8")).decode("ascii").rstrip("=")


def _token_to_text(token: str) -> str:
    # parse_qsl turns '+' from standard base64 into spaces.
    normalized = token.strip().replace(" ", "+").replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(normalized, validate=True)
        text = raw.decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise FormatError("share token is not valid base64") from exc
    # Tokens from the web client wrap percent-encoded JSON.
    if text.startswith("%"):
        text = unquote(text)
    return text


def _query_of(url_or_query: str) -> str:
    if "://" in url_or_query:
        return urlsplit(url_or_query).query
    return url_or_query.split("#", 1)[0].lstrip("?")


def decode_from_link(url_or_query: str) -> AppData | None:
    """Return the shared snapshot, or ``None`` when no share token is present."""
    params = dict(parse_qsl(_query_of(url_or_query), keep_blank_values=True))
    token = params.get(SHARE_PARAM)
    if token is None:
        return None
    if not token.strip():
        raise FormatError("share token is empty")
    return decode(_token_to_text(token))


def share_link(data: AppData, base_url: str) -> str:
    separator = "&" if urlsplit(base_url).query else "?"
    return f"{base_url}{separator}{urlencode({SHARE_PARAM: encode_for_link(data)})}"


def strip_share_param(url: str) -> str:
    parts = urlsplit(url)
    kept = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != SHARE_PARAM]
    return urlunsplit(parts._replace(query=urlencode(kept)))


def export_filename(day: date) -> str:
    return f"trip-data-{day.isoformat()}.json"


def export_to_file(data: AppData, directory: str | Path, *, day: date | None = None) -> Path:
    path = Path(directory) / export_filename(day or date.today())
    path.write_text(encode(data) + "\n", encoding="utf-8")
    return path


def import_from_file(path: str | Path) -> AppData:
    import_path = Path(path)
    try:
        text = import_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FormatError(f"failed reading import file: {import_path}") from exc
    return decode(text)


__all__ = [
    "SHARE_PARAM",
    "decode",
    "decode_from_link",
    "encode",
    "encode_for_link",
    "export_filename",
    "export_to_file",
    "import_from_file",
    "share_link",
    "strip_share_param",
]
