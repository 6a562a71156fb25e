"""Shared fixtures: a scripted adb backend and catalog doubles."""

import json
from pathlib import Path

import pytest

from rookie_cli.catalog.servers import load_server_config
from rookie_cli.device.backend import BridgeResult
from rookie_cli.device.gateway import DeviceGateway
from rookie_cli.models.catalog import CatalogIndex


class FakeBackend:
    """Answers adb command lines from a table of canned results."""

    def __init__(self, responses=None, error=None):
        self.responses = dict(responses or {})
        self.error = error
        self.calls: list[tuple[str, ...]] = []

    def set(self, args, stdout="", returncode=0, stderr=""):
        self.responses[tuple(args)] = (returncode, stdout, stderr)

    async def run(self, *args):
        self.calls.append(tuple(args))
        if self.error is not None:
            raise self.error
        returncode, stdout, stderr = self.responses.get(tuple(args), (0, "", ""))
        return BridgeResult(list(args), returncode, stdout, stderr)

    def called(self, *verbs):
        """Calls whose arguments contain every given word."""
        return [c for c in self.calls if all(v in c for v in verbs)]


class FakeCatalog:
    """Stands in for CatalogClient without any network access."""

    def __init__(self, index=None, download_error=None):
        self.index = index or CatalogIndex()
        self.download_error = download_error
        self.fetched: list[str] = []
        self.downloads: list[tuple[str, Path]] = []
        self.closed = False

    @staticmethod
    def load_server_config(path):
        return load_server_config(path)

    async def fetch_catalog(self, index_url):
        self.fetched.append(index_url)
        return self.index

    async def download_artifact(self, artifact_url, destination_folder, on_progress=None):
        self.downloads.append((artifact_url, Path(destination_folder)))
        if self.download_error is not None:
            raise self.download_error
        if on_progress:
            for fraction in (0.25, 0.5, 1.0):
                on_progress(fraction)
        return Path(destination_folder) / "app.apk"

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        self.closed = True


DEVICES_OUTPUT = "List of devices attached\n\nABC123\tdevice\nEMU1\tunauthorized\n"


@pytest.fixture
def backend():
    fake = FakeBackend()
    fake.set(["devices"], DEVICES_OUTPUT)
    return fake


@pytest.fixture
def gateway(backend):
    return DeviceGateway(backend)


@pytest.fixture
def write_servers(tmp_path):
    """Writes a servers.json under tmp_path and returns its path."""

    def _write(document, name="servers.json"):
        path = tmp_path / name
        if isinstance(document, str):
            path.write_text(document, encoding="utf-8")
        else:
            path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write
