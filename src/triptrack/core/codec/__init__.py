"""Snapshot codec."""

from triptrack.core.codec.snapshot import (
    SHARE_PARAM,
    decode,
    decode_from_link,
    encode,
    encode_for_link,
    export_filename,
    export_to_file,
    import_from_file,
    share_link,
    strip_share_param,
)

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
