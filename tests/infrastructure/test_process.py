"""Tests for CommandRunner against real processes."""

import sys

import pytest

from debapps.exceptions import CommandError
from debapps.infrastructure.process import (
    COMMAND_NOT_FOUND,
    COMMAND_TIMED_OUT,
    CommandResult,
    CommandRunner,
)


class TestCommandRunner:
    """Test subprocess execution."""

    @pytest.mark.asyncio
    async def test_captures_output(self):
        result = await CommandRunner().run(
            sys.executable,
            "-c",
            "import sys; print('out'); print('err', file=sys.stderr)",
        )

        assert result.ok
        assert result.stdout == "out\n"
        assert result.stderr == "err"

    @pytest.mark.asyncio
    async def test_stdin(self):
        result = await CommandRunner().run(
            sys.executable,
            "-c",
            "import sys; sys.stdout.write(sys.stdin.read().upper())",
            input_data=b"key",
        )

        assert result.output == b"KEY"

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        result = await CommandRunner().run("debapps-no-such-tool")

        assert result.returncode == COMMAND_NOT_FOUND
        assert not result.ok

    @pytest.mark.asyncio
    async def test_timeout(self):
        result = await CommandRunner().run(
            sys.executable, "-c", "import time; time.sleep(5)", timeout=0.2
        )

        assert result.returncode == COMMAND_TIMED_OUT

    @pytest.mark.asyncio
    async def test_check_raises(self):
        with pytest.raises(CommandError) as exc_info:
            await CommandRunner().check(
                sys.executable, "-c", "import sys; sys.exit(3)"
            )

        assert exc_info.value.returncode == 3

    def test_result_decodes_invalid_utf8(self):
        result = CommandResult(("x",), 0, b"\xffok")

        assert result.stdout.endswith("ok")
