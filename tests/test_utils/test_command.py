"""Tests for subprocess helpers."""

import shutil

import pytest

from rootfetch.errors import CommandError, UnpackError
from rootfetch.utils.command import run_command


pytestmark = pytest.mark.skipif(shutil.which("sh") is None, reason="sh is required")


@pytest.mark.asyncio
class TestRunCommand:
    """Test run_command."""

    async def test_captures_output(self):
        """Test stdout and stderr are captured and decoded."""
        result = await run_command(["sh", "-c", "echo out; echo err >&2"])

        assert result.returncode == 0
        assert result.stdout == "out\n"
        assert result.stderr == "err\n"

    async def test_failure_raises_given_error(self):
        """Test a non-zero exit raises the requested error with stderr."""
        with pytest.raises(UnpackError) as exc_info:
            await run_command(
                ["sh", "-c", "echo 'not a tar archive' >&2; exit 2"],
                error=UnpackError,
                failure="Failed to unpack 'x.tar'",
            )

        assert str(exc_info.value) == "Failed to unpack 'x.tar': not a tar archive"

    async def test_failure_without_stderr(self):
        """Test the exit status is reported when stderr is empty."""
        with pytest.raises(CommandError, match="exit status 3"):
            await run_command(["sh", "-c", "exit 3"])

    async def test_no_check(self):
        """Test check=False returns the failing result."""
        result = await run_command(["sh", "-c", "exit 1"], check=False)

        assert result.returncode == 1

    async def test_timeout(self):
        """Test a command running past its timeout is killed and reported."""
        with pytest.raises(CommandError, match="timed out"):
            await run_command(["sh", "-c", "sleep 5"], timeout=0.1)

    async def test_missing_binary(self):
        """Test a binary that cannot be started raises the requested error."""
        with pytest.raises(UnpackError):
            await run_command(["/nonexistent/tar"], error=UnpackError)
