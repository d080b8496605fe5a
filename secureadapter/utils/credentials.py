import base64
import binascii
from typing import Tuple
from secureadapter.core.errors import InvalidAuthorization
from secureadapter.core.models import ScanRequest

SCHEMES = ("https://", "http://")

def registry_from_url(url: str) -> str:
    """Return the bare host[:port] of a registry URL."""
    for scheme in SCHEMES:
        if url.startswith(scheme):
            url = url[len(scheme):]
            break
    return url.rstrip("/")

def user_and_password_from(authorization: str) -> Tuple[str, str]:
    """Decode a Basic authorization header into (user, password)."""
    payload = authorization
    if payload.startswith("Basic "):
        payload = payload[len("Basic "):]
    try:
        plain = base64.b64decode(payload.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise InvalidAuthorization(f"Registry authorization is not valid base64: {e}") from e

    # Only the user name is forbidden from containing a colon
    user, sep, password = plain.partition(":")
    if not sep:
        raise InvalidAuthorization("Registry authorization is missing the user:password separator")
    return user, password

def image_from(request: ScanRequest) -> str:
    registry = registry_from_url(request.registry.url)
    return f"{registry}/{request.artifact.repository}:{request.artifact.tag}"
