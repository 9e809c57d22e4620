"""Process GUID parsing."""

from __future__ import annotations

from event_forwarder.errors import GUIDParseError

GUID_LENGTH = 36
FULL_GUID_LENGTH = GUID_LENGTH + 9  # "-" plus an 8 digit hex segment id
DEFAULT_SEGMENT_ID = 1


def parse_full_guid(token: str) -> tuple[str, int]:
    """
    Split a process GUID token into ``(process_id, segment_id)``.

    Accepted shapes:

    - ``<36 char guid>`` -> segment id 1
    - ``<36 char guid>-<8 hex digits>`` -> the hex segment id

    Raises:
        GUIDParseError: token is not a string, is truncated or has an
            unexpected length or segment.
    """
    if not isinstance(token, str):
        raise GUIDParseError(f"GUID must be a string, got {type(token).__name__}")

    if len(token) < GUID_LENGTH:
        raise GUIDParseError(f"Truncated GUID: {token!r}")
    if len(token) == GUID_LENGTH:
        return token, DEFAULT_SEGMENT_ID
    if len(token) != FULL_GUID_LENGTH or token[GUID_LENGTH] != "-":
        raise GUIDParseError(f"Unexpected GUID length {len(token)}: {token!r}")

    try:
        segment_id = int(token[GUID_LENGTH + 1 :], 16)
    except ValueError as e:
        raise GUIDParseError(f"Invalid segment id in GUID {token!r}: {e}") from e

    return token[:GUID_LENGTH], segment_id
