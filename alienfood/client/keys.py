"""
Tool: VAPID Key Provisioner
Purpose: Resolve the application server key used to subscribe

The key is fetched from the backend on every call so a rotated key is
picked up by the next subscribe attempt. When the backend cannot be
reached the statically configured key is used instead.

Usage:
    from alienfood.client.keys import resolve_public_key

    application_server_key = await resolve_public_key()
"""

import base64

import httpx

from alienfood.config import get_api_base_url, get_fallback_public_key
from alienfood.logging_config import get_logger


logger = get_logger(__name__)

VAPID_PATH = "/push/vapid"

# Uncompressed P-256 point: 0x04 || X || Y
PUBLIC_KEY_LENGTH = 65

FALLBACK_VAPID_PUBLIC_KEY = (
    "BEl62iUYgUivxIkv69yViEuiBIa-Ib9-SkvMeAtA3LFgDzkrxZJjSgSnfckjBJuBkr3qBUYIHBQFLXYp5Nksh8U"
)


def url_base64_to_bytes(value: str) -> bytes:
    """
    Decode URL-safe base64, with or without padding.

    Raises:
        binascii.Error: If the input is not valid base64
    """
    padding = "=" * ((4 - len(value) % 4) % 4)
    standard = (value + padding).replace("-", "+").replace("_", "/")
    return base64.b64decode(standard)


def bytes_to_url_base64(raw: bytes) -> str:
    """Encode bytes as URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


async def fetch_public_key(
    http_client: httpx.AsyncClient,
    api_base_url: str,
) -> str | None:
    """
    Ask the backend for its VAPID public key.

    Returns:
        The base64url key, or None if the backend did not provide one
    """
    url = api_base_url.rstrip("/") + VAPID_PATH
    try:
        response = await http_client.get(url)
    except httpx.HTTPError as e:
        logger.warning("vapid_fetch_failed", url=url, error=str(e))
        return None

    if not response.is_success:
        logger.warning("vapid_fetch_failed", url=url, status=response.status_code)
        return None

    try:
        data = response.json()
    except ValueError:
        logger.warning("vapid_fetch_invalid_json", url=url)
        return None

    if not isinstance(data, dict):
        return None

    public_key = data.get("publicKey")
    if not isinstance(public_key, str) or not public_key:
        return None

    return public_key


async def resolve_public_key(
    http_client: httpx.AsyncClient | None = None,
    api_base_url: str | None = None,
    fallback_key: str | None = None,
) -> bytes:
    """
    Resolve the server's VAPID public key as raw bytes.

    Args:
        http_client: Client to reuse; a short-lived one is created otherwise
        api_base_url: Backend base URL (default: configured api_base_url)
        fallback_key: Key used when the backend is unavailable
            (default: configured key, then FALLBACK_VAPID_PUBLIC_KEY)

    Returns:
        Decoded key bytes. A key of unexpected length is returned anyway and
        will be rejected by the push service at subscribe time.
    """
    base_url = api_base_url or get_api_base_url()

    if http_client is None:
        async with httpx.AsyncClient() as client:
            public_key = await fetch_public_key(client, base_url)
    else:
        public_key = await fetch_public_key(http_client, base_url)

    if public_key:
        logger.debug("vapid_key_from_server")
    else:
        public_key = fallback_key or get_fallback_public_key() or FALLBACK_VAPID_PUBLIC_KEY
        logger.debug("vapid_key_from_fallback")

    raw = url_base64_to_bytes(public_key)
    if len(raw) != PUBLIC_KEY_LENGTH:
        logger.warning(
            "vapid_key_unexpected_length",
            length=len(raw),
            expected=PUBLIC_KEY_LENGTH,
        )

    return raw
