"""Tests for the aiohttp-backed HTTP client."""

from __future__ import annotations

import asyncio
from pathlib import Path

import aiohttp.test_utils
import pytest
from aiohttp import web

from secure_installer.http import AiohttpClient, HttpError, HttpResponse
from secure_installer.protocols import HttpClient

PAYLOAD = b"0123456789" * 20_000
TRICKLE_CHUNKS = 6


def _app() -> web.Application:
    async def hello(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "ua": request.headers.get("User-Agent"),
                "auth": request.headers.get("Authorization"),
            }
        )

    async def missing(request: web.Request) -> web.Response:
        return web.Response(status=404, text="nope")

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(2)
        return web.Response(text="late")

    async def payload(request: web.Request) -> web.Response:
        return web.Response(body=PAYLOAD)

    async def trickle(request: web.Request) -> web.StreamResponse:
        response = web.StreamResponse()
        await response.prepare(request)
        for _ in range(TRICKLE_CHUNKS):
            await response.write(b"x" * 1024)
            await asyncio.sleep(0.15)
        await response.write_eof()
        return response

    async def stall(request: web.Request) -> web.StreamResponse:
        response = web.StreamResponse()
        await response.prepare(request)
        await response.write(b"x" * 1024)
        await asyncio.sleep(2)
        await response.write_eof()
        return response

    app = web.Application()
    app.router.add_get("/hello", hello)
    app.router.add_get("/missing", missing)
    app.router.add_get("/slow", slow)
    app.router.add_get("/payload", payload)
    app.router.add_get("/trickle", trickle)
    app.router.add_get("/stall", stall)
    return app


def _serve(scenario):
    """Run ``scenario(client, base_url)`` against a local test server."""

    async def _run():
        client = AiohttpClient.create()
        try:
            async with aiohttp.test_utils.TestServer(_app()) as ts:
                return await scenario(client, f"http://{ts.host}:{ts.port}")
        finally:
            await client.close()

    return asyncio.run(_run())


class TestHttpResponse:
    """Tests for HttpResponse."""

    @pytest.mark.parametrize(("status", "ok"), [(200, True), (204, True), (301, False), (404, False)])
    def test_ok(self, status: int, ok: bool) -> None:
        assert HttpResponse(status=status).ok is ok

    def test_text_replaces_bad_bytes(self) -> None:
        assert HttpResponse(200, b"abc\xff").text() == "abc�"

    def test_json(self) -> None:
        assert HttpResponse(200, b'{"a": 1}').json() == {"a": 1}

    def test_json_invalid(self) -> None:
        with pytest.raises(ValueError):
            HttpResponse(200, b"<html>").json()


class TestAiohttpClient:
    """Tests for AiohttpClient against a local server."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(AiohttpClient.create(), HttpClient)

    def test_get_sends_headers(self) -> None:
        async def scenario(client: AiohttpClient, base: str) -> HttpResponse:
            return await client.get(
                f"{base}/hello", timeout=5, headers={"Authorization": "Bearer t"}
            )

        response = _serve(scenario)

        assert response.ok
        assert response.json() == {"ua": "secure-installer", "auth": "Bearer t"}

    def test_get_non_2xx_is_returned(self) -> None:
        """Statuses are data for get(); only transport errors raise."""

        async def scenario(client: AiohttpClient, base: str) -> HttpResponse:
            return await client.get(f"{base}/missing", timeout=5)

        response = _serve(scenario)

        assert response.status == 404
        assert response.text() == "nope"

    def test_get_timeout(self) -> None:
        async def scenario(client: AiohttpClient, base: str) -> None:
            await client.get(f"{base}/slow", timeout=0.2)

        with pytest.raises(HttpError, match="timed out"):
            _serve(scenario)

    def test_connection_refused(self) -> None:
        async def _run() -> None:
            async with aiohttp.test_utils.TestServer(_app()) as ts:
                url = f"http://{ts.host}:{ts.port}/hello"
            client = AiohttpClient.create()
            try:
                await client.get(url, timeout=2)
            finally:
                await client.close()

        with pytest.raises(HttpError, match="failed"):
            asyncio.run(_run())

    def test_download_streams_to_file(self, tmp_path: Path) -> None:
        dest = tmp_path / "payload.bin"

        async def scenario(client: AiohttpClient, base: str) -> int:
            return await client.download(f"{base}/payload", dest, timeout=5)

        written = _serve(scenario)

        assert written == len(PAYLOAD)
        assert dest.read_bytes() == PAYLOAD

    def test_download_non_2xx_raises(self, tmp_path: Path) -> None:
        dest = tmp_path / "missing.bin"

        async def scenario(client: AiohttpClient, base: str) -> int:
            return await client.download(f"{base}/missing", dest, timeout=5)

        with pytest.raises(HttpError) as excinfo:
            _serve(scenario)

        assert excinfo.value.status == 404
        assert not dest.exists()

    def test_close_is_idempotent(self) -> None:
        async def _run() -> None:
            client = AiohttpClient.create()
            await client.close()
            await client.close()

        asyncio.run(_run())

    def test_download_longer_than_timeout_completes(self, tmp_path: Path) -> None:
        """The timeout limits idle time between reads, not total transfer time."""
        dest = tmp_path / "slow.bin"

        async def scenario(client: AiohttpClient, base: str) -> int:
            return await client.download(f"{base}/trickle", dest, timeout=0.5)

        written = _serve(scenario)

        assert written == TRICKLE_CHUNKS * 1024
        assert dest.stat().st_size == TRICKLE_CHUNKS * 1024

    def test_download_stalled_raises(self, tmp_path: Path) -> None:
        dest = tmp_path / "stalled.bin"

        async def scenario(client: AiohttpClient, base: str) -> int:
            return await client.download(f"{base}/stall", dest, timeout=0.3)

        with pytest.raises(HttpError, match="stalled"):
            _serve(scenario)
