"""Tests for archive extraction."""

import shutil

import pytest
from unittest.mock import AsyncMock, patch

from rootfetch.errors import UnpackError
from rootfetch.fetch.unpack import TarUnpacker


@pytest.mark.asyncio
class TestTarUnpacker:
    """Test TarUnpacker command construction and errors."""

    async def test_command(self, tmp_path):
        """Test tar is invoked with the archive and destination."""
        archive = tmp_path / "rootfs.tar.xz"
        archive.write_bytes(b"")
        dest = tmp_path / "rootfs"

        with patch("rootfetch.fetch.unpack.run_command", new_callable=AsyncMock) as mock_run:
            await TarUnpacker("bsdtar").unpack(archive, dest)

        cmd = mock_run.call_args[0][0]
        assert cmd[0] == "bsdtar"
        assert cmd[cmd.index("--file") + 1] == str(archive)
        assert cmd[cmd.index("--directory") + 1] == str(dest)
        assert dest.is_dir()

    async def test_missing_archive(self, tmp_path):
        """Test a missing archive fails without running tar."""
        with patch("rootfetch.fetch.unpack.run_command", new_callable=AsyncMock) as mock_run:
            with pytest.raises(UnpackError) as exc_info:
                await TarUnpacker().unpack(tmp_path / "missing.tar", tmp_path / "rootfs")

        assert "missing.tar" in str(exc_info.value)
        mock_run.assert_not_awaited()

    async def test_failure_is_reported_as_unpack_error(self, tmp_path):
        """Test tar failures are raised as UnpackError naming the archive."""
        archive = tmp_path / "rootfs.tar.xz"
        archive.write_bytes(b"")

        with patch("rootfetch.fetch.unpack.run_command", new_callable=AsyncMock) as mock_run:
            await TarUnpacker().unpack(archive, tmp_path / "rootfs")

        kwargs = mock_run.call_args.kwargs
        assert kwargs["error"] is UnpackError
        assert "rootfs.tar.xz" in kwargs["failure"]

    @pytest.mark.skipif(shutil.which("tar") is None, reason="tar is required")
    async def test_tar_failure(self, tmp_path):
        """Test a broken archive fails through the system tar."""
        archive = tmp_path / "broken.tar"
        archive.write_bytes(b"garbage" * 1024)

        with pytest.raises(UnpackError) as exc_info:
            await TarUnpacker().unpack(archive, tmp_path / "rootfs")

        assert "broken.tar" in str(exc_info.value)
