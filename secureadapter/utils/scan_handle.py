"""Opaque scan response IDs.

The adapter keeps no state between a scan and its report, so the ID handed to
Harbor carries the repository and the image digest. Both are serialized as a
JSON array before URL-safe base64 encoding, so no character in either value
can be confused with a field boundary.
"""
import base64
import binascii
import json
from typing import Tuple
from secureadapter.core.errors import InvalidScanHandle

def encode(repository: str, digest: str) -> str:
    payload = json.dumps([repository, digest], separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")

def decode(scan_response_id: str) -> Tuple[str, str]:
    padded = scan_response_id + "=" * (-len(scan_response_id) % 4)
    try:
        plain = base64.urlsafe_b64decode(padded.encode("ascii"))
        fields = json.loads(plain.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidScanHandle(f"Malformed scan response ID {scan_response_id!r}: {e}") from e

    if not isinstance(fields, list) or len(fields) != 2 or not all(isinstance(f, str) for f in fields):
        raise InvalidScanHandle(f"Malformed scan response ID {scan_response_id!r}")

    repository, digest = fields
    return repository, digest
