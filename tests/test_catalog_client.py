import asyncio
import json

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from rookie_cli.catalog.client import CatalogClient
from rookie_cli.exceptions import NetworkError, ParseError

STORE_INDEX = {
    "Name": "Store",
    "Apps": [{"Id": "a", "Name": "A", "Version": "1", "Apk": "http://h/a.apk"}],
}
APK_BYTES = b"PK\x03\x04" + b"\x00" * 4096


def build_app() -> web.Application:
    async def index(request):
        return web.Response(text=json.dumps(STORE_INDEX), content_type="text/plain")

    async def broken(request):
        return web.Response(text="{not json", content_type="application/json")

    async def bom_index(request):
        body = b"\xef\xbb\xbf" + json.dumps(STORE_INDEX).encode("utf-8")
        return web.Response(body=body, content_type="application/json")

    async def null_doc(request):
        return web.json_response(None)

    async def wrong_shape(request):
        return web.json_response({"Apps": "nope"})

    async def missing(request):
        raise web.HTTPNotFound()

    async def apk(request):
        return web.Response(body=APK_BYTES, content_type="application/vnd.android.package-archive")

    app = web.Application()
    app.router.add_get("/index.json", index)
    app.router.add_get("/broken.json", broken)
    app.router.add_get("/bom.json", bom_index)
    app.router.add_get("/null.json", null_doc)
    app.router.add_get("/shape.json", wrong_shape)
    app.router.add_get("/missing.json", missing)
    app.router.add_get("/files/app-1.0.apk", apk)
    app.router.add_get("/files/", apk)
    return app


def run_with_server(scenario):
    """Starts a local catalog server, runs `scenario(client, url)` and tears down."""

    async def _run():
        server = TestServer(build_app())
        await server.start_server()
        try:
            async with CatalogClient(timeout=10) as client:
                return await scenario(client, lambda path: str(server.make_url(path)))
        finally:
            await server.close()

    return asyncio.run(_run())


def test_fetch_catalog_store_scenario():
    index = run_with_server(lambda client, url: client.fetch_catalog(url("/index.json")))
    assert index.name == "Store"
    assert len(index.apps) == 1
    assert index.apps[0].id == "a"
    assert index.apps[0].apk == "http://h/a.apk"


def test_fetch_catalog_accepts_byte_order_mark():
    index = run_with_server(lambda client, url: client.fetch_catalog(url("/bom.json")))
    assert index.name == "Store"
    assert [a.id for a in index.apps] == ["a"]


def test_http_error_is_network_error():
    with pytest.raises(NetworkError, match="404"):
        run_with_server(lambda client, url: client.fetch_catalog(url("/missing.json")))


@pytest.mark.parametrize("path", ["/broken.json", "/null.json", "/shape.json"])
def test_bad_document_is_parse_error(path):
    with pytest.raises(ParseError):
        run_with_server(lambda client, url: client.fetch_catalog(url(path)))


def test_unreachable_server_is_network_error():
    async def _fetch():
        async with CatalogClient(timeout=5) as client:
            return await client.fetch_catalog("http://127.0.0.1:1/index.json")

    with pytest.raises(NetworkError):
        asyncio.run(_fetch())


def test_download_names_file_after_url(tmp_path):
    fractions = []

    path = run_with_server(
        lambda client, url: client.download_artifact(
            url("/files/app-1.0.apk"), tmp_path / "downloads", on_progress=fractions.append
        )
    )

    assert path == (tmp_path / "downloads" / "app-1.0.apk").resolve()
    assert path.read_bytes() == APK_BYTES
    assert fractions and fractions[-1] == 1.0
    assert fractions == sorted(fractions)


def test_download_without_file_name_uses_default(tmp_path):
    path = run_with_server(
        lambda client, url: client.download_artifact(url("/files/"), tmp_path)
    )
    assert path.name == "download.apk"


def test_download_overwrites_existing_file(tmp_path):
    stale = tmp_path / "app-1.0.apk"
    stale.write_bytes(b"old contents that are longer than nothing")

    path = run_with_server(
        lambda client, url: client.download_artifact(url("/files/app-1.0.apk"), tmp_path)
    )

    assert path == stale.resolve()
    assert path.read_bytes() == APK_BYTES


def test_download_http_error_is_network_error(tmp_path):
    with pytest.raises(NetworkError, match="404"):
        run_with_server(
            lambda client, url: client.download_artifact(url("/files/gone.apk"), tmp_path)
        )
