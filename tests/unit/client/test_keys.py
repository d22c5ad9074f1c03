"""Tests for alienfood/client/keys.py"""

import binascii
import os
from unittest.mock import patch

import httpx
import pytest

from alienfood.client.keys import (
    FALLBACK_VAPID_PUBLIC_KEY,
    PUBLIC_KEY_LENGTH,
    bytes_to_url_base64,
    fetch_public_key,
    resolve_public_key,
    url_base64_to_bytes,
)
from alienfood.push.vapid import generate_vapid_keys


API_BASE_URL = "http://backend.test"


# ─────────────────────────────────────────────────────────────────────────────
# Base64url Conversion
# ─────────────────────────────────────────────────────────────────────────────


class TestUrlBase64:
    def test_fallback_key_decodes_to_uncompressed_point(self):
        raw = url_base64_to_bytes(FALLBACK_VAPID_PUBLIC_KEY)

        assert len(raw) == PUBLIC_KEY_LENGTH
        assert raw[0] == 0x04

    def test_generated_key_round_trips(self):
        keys = generate_vapid_keys()
        raw = url_base64_to_bytes(keys["public_key"])

        assert len(raw) == PUBLIC_KEY_LENGTH
        assert bytes_to_url_base64(raw) == keys["public_key"]

    def test_arbitrary_key_bytes_round_trip(self):
        samples = [bytes(65), b"\xff" * 65, b"\xfb\xef" * 32 + b"\xbe"]
        samples += [os.urandom(PUBLIC_KEY_LENGTH) for _ in range(200)]

        for raw in samples:
            encoded = bytes_to_url_base64(raw)
            assert "=" not in encoded
            assert "+" not in encoded and "/" not in encoded
            assert url_base64_to_bytes(encoded) == raw

    def test_handles_url_alphabet(self):
        # 0xfb 0xff encodes to "-_8" in the URL-safe alphabet
        assert url_base64_to_bytes("-_8") == b"\xfb\xff"

    def test_accepts_padded_input(self):
        assert url_base64_to_bytes("YWI=") == b"ab"
        assert url_base64_to_bytes("YWI") == b"ab"

    def test_encoding_strips_padding(self):
        assert bytes_to_url_base64(b"ab") == "YWI"

    def test_invalid_input_raises(self):
        with pytest.raises(binascii.Error):
            url_base64_to_bytes("a")


# ─────────────────────────────────────────────────────────────────────────────
# Key Resolution
# ─────────────────────────────────────────────────────────────────────────────


class TestFetchPublicKey:
    @pytest.mark.asyncio
    async def test_returns_server_key(self, backend, http_client):
        backend.public_key = "server-key"

        assert await fetch_public_key(http_client, API_BASE_URL) == "server-key"
        assert backend.requests[0].url == httpx.URL("http://backend.test/push/vapid")

    @pytest.mark.asyncio
    async def test_missing_field_returns_none(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"key": "x"})
        ))

        assert await fetch_public_key(client, API_BASE_URL) is None

    @pytest.mark.asyncio
    async def test_non_json_body_returns_none(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, text="<html>maintenance</html>")
        ))

        assert await fetch_public_key(client, API_BASE_URL) is None


class TestResolvePublicKey:
    @pytest.mark.asyncio
    async def test_prefers_server_key(self, backend, http_client):
        server_key = generate_vapid_keys()["public_key"]
        backend.public_key = server_key

        raw = await resolve_public_key(http_client=http_client, api_base_url=API_BASE_URL)

        assert raw == url_base64_to_bytes(server_key)

    @pytest.mark.asyncio
    async def test_fetched_on_every_call(self, backend, http_client):
        await resolve_public_key(http_client=http_client, api_base_url=API_BASE_URL)
        await resolve_public_key(http_client=http_client, api_base_url=API_BASE_URL)

        assert len(backend.requests_to("/push/vapid")) == 2

    @pytest.mark.asyncio
    async def test_server_error_uses_fallback(self, backend, http_client):
        backend.vapid_status = 500

        raw = await resolve_public_key(http_client=http_client, api_base_url=API_BASE_URL)

        assert raw == url_base64_to_bytes(FALLBACK_VAPID_PUBLIC_KEY)

    @pytest.mark.asyncio
    async def test_network_error_uses_fallback(self, backend, http_client):
        backend.network_error = True

        raw = await resolve_public_key(http_client=http_client, api_base_url=API_BASE_URL)

        assert len(raw) == PUBLIC_KEY_LENGTH

    @pytest.mark.asyncio
    async def test_explicit_fallback_wins_over_builtin(self, backend, http_client):
        backend.network_error = True
        own_key = generate_vapid_keys()["public_key"]

        raw = await resolve_public_key(
            http_client=http_client,
            api_base_url=API_BASE_URL,
            fallback_key=own_key,
        )

        assert raw == url_base64_to_bytes(own_key)

    @pytest.mark.asyncio
    async def test_configured_fallback_from_environment(self, backend, http_client, monkeypatch):
        backend.network_error = True
        own_key = generate_vapid_keys()["public_key"]
        monkeypatch.setenv("ALIENFOOD_VAPID_PUBLIC_KEY", own_key)

        raw = await resolve_public_key(http_client=http_client, api_base_url=API_BASE_URL)

        assert raw == url_base64_to_bytes(own_key)

    @pytest.mark.asyncio
    async def test_unexpected_length_logged_but_returned(self, backend, http_client):
        backend.public_key = "c2hvcnQta2V5"

        with patch("alienfood.client.keys.logger") as logger:
            raw = await resolve_public_key(http_client=http_client, api_base_url=API_BASE_URL)

        assert raw == b"short-key"
        logger.warning.assert_called_once_with(
            "vapid_key_unexpected_length", length=len(b"short-key"), expected=65
        )
