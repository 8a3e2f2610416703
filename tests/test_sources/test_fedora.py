"""Tests for the Fedora source."""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, Mock

from conftest import make_tar
from rootfetch.errors import InsecureTransportError
from rootfetch.fetch.download import Downloader
from rootfetch.sources.fedora import FedoraSource


INDEX = '<a href="20231101.0/">20231101.0/</a> <a href="20231110.n.0/">20231110.n.0/</a>'
IMAGE_PATH = (
    "/packages/Fedora-Container-Base/39/20231110.n.0/images/"
    "Fedora-Container-Base-39-20231110.n.0.x86_64.tar.xz"
)


@pytest.fixture
def base_image(tmp_path):
    """Container base image with a single layer."""
    layer = make_tar(tmp_path / "build" / "layer.tar", {"usr/lib/os-release": "NAME=Fedora\n"})
    return make_tar(tmp_path / "build" / "base.tar", {
        "manifest.json": json.dumps([{"Layers": ["abc/layer.tar"], "Config": "abc.json"}]),
        "repositories": "{}",
        "abc/layer.tar": layer.read_bytes(),
        "abc.json": "{}",
    }).read_bytes()


@pytest.mark.asyncio
class TestFedoraSource:
    """Test FedoraSource."""

    async def test_run_resolves_downloads_and_flattens(self, tmp_path, make_definition, tarfile_unpacker, base_image):
        """Test the latest build is fetched and its layers applied."""
        requests = []

        def handler(request):
            requests.append(request.url.path)
            if request.url.path == "/packages/Fedora-Container-Base/39":
                return httpx.Response(200, text=INDEX)
            if request.url.path == IMAGE_PATH:
                return httpx.Response(200, content=base_image)
            return httpx.Response(404)

        definition = make_definition("fedora-http", url="https://kojipkgs.example.org")
        rootfs = tmp_path / "rootfs"

        async with Downloader(tmp_path / "cache", transport=httpx.MockTransport(handler)) as downloader:
            source = FedoraSource(definition, rootfs, downloader, tarfile_unpacker, Mock())
            await source.run()

        assert requests == ["/packages/Fedora-Container-Base/39", IMAGE_PATH]
        assert (rootfs / "usr" / "lib" / "os-release").read_text() == "NAME=Fedora\n"
        assert not (rootfs / "manifest.json").exists()
        assert not (rootfs / "abc").exists()
        assert not (rootfs / "abc.json").exists()

    async def test_plain_http_without_keys_refused(self, tmp_path, make_definition):
        """Test the image is never downloaded over HTTP without keys."""
        downloader = Mock()
        downloader.get_text = AsyncMock(return_value=INDEX)
        downloader.fetch = AsyncMock()
        definition = make_definition("fedora-http", url="http://kojipkgs.example.org")

        source = FedoraSource(definition, tmp_path, downloader, Mock(), Mock())
        with pytest.raises(InsecureTransportError):
            await source.run()

        downloader.fetch.assert_not_awaited()
