"""Shared fixtures."""

import io
import tarfile
from pathlib import Path
from typing import Dict, Union

import pytest

from rootfetch.models.source import ImageDefinition


def make_tar(path: Path, members: Dict[str, Union[str, bytes]], mode: str = "w") -> Path:
    """Write a tarball whose members are given as {name: content}."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, mode) as tar:
        for name, content in members.items():
            data = content.encode() if isinstance(content, str) else content
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


class TarfileUnpacker:
    """In-process unpacker standing in for the tar binary."""

    def __init__(self):
        self.calls = []

    async def unpack(self, archive: Path, dest: Path) -> None:
        self.calls.append((Path(archive), Path(dest)))
        Path(dest).mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive) as tar:
            tar.extractall(dest)


@pytest.fixture
def tarfile_unpacker():
    """Unpacker that does not need a tar binary."""
    return TarfileUnpacker()


@pytest.fixture
def make_definition():
    """Factory for image definitions."""
    def _make(downloader="fedora-http", url="https://mirror.example.org", **overrides):
        image = {
            "distribution": "test",
            "release": "39",
            "architecture": "x86_64",
        }
        source = {"downloader": downloader, "url": url}
        image.update(overrides.pop("image", {}))
        source.update(overrides.pop("source", {}))
        return ImageDefinition(image=image, source=source)
    return _make
