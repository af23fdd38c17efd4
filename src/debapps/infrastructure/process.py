"""Subprocess execution for package managers and system tools."""

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path

from debapps.exceptions import CommandError
from debapps.logger import get_logger

logger = get_logger(__name__)

# Exit statuses reported when a command could not run to completion
COMMAND_NOT_FOUND = 127
COMMAND_TIMED_OUT = 124


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one external command."""

    args: tuple[str, ...]
    returncode: int
    output: bytes = b""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def stdout(self) -> str:
        return self.output.decode("utf-8", errors="replace")


class CommandRunner:
    """Run external commands with asyncio.create_subprocess_exec."""

    def which(self, name: str) -> str | None:
        """Locate an executable on PATH."""
        return shutil.which(name)

    async def run(
        self,
        *args: str,
        cwd: Path | None = None,
        input_data: bytes | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a command and capture its output.

        A missing executable or a timeout is reported through the return
        code rather than raised.

        Args:
            *args: Program and arguments
            cwd: Working directory
            input_data: Bytes written to stdin
            timeout: Seconds before the process is killed

        Returns:
            CommandResult

        """
        logger.debug("Running: %s", " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                stdin=(
                    asyncio.subprocess.PIPE
                    if input_data is not None
                    else asyncio.subprocess.DEVNULL
                ),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            logger.debug("Command not found: %s", args[0])
            return CommandResult(args, COMMAND_NOT_FOUND, b"", str(e))

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(input_data), timeout=timeout
            )
        except TimeoutError:
            process.kill()
            await process.wait()
            logger.debug("Command timed out after %ss: %s", timeout, args[0])
            return CommandResult(args, COMMAND_TIMED_OUT, b"", "timed out")

        result = CommandResult(
            args,
            process.returncode if process.returncode is not None else 1,
            stdout or b"",
            (stderr or b"").decode("utf-8", errors="ignore").strip(),
        )
        if not result.ok:
            logger.debug(
                "Command exited %d: %s %s",
                result.returncode,
                args[0],
                result.stderr,
            )
        return result

    async def check(
        self,
        *args: str,
        cwd: Path | None = None,
        input_data: bytes | None = None,
    ) -> CommandResult:
        """Run a command and raise if it fails.

        Raises:
            CommandError: On a non-zero exit status

        """
        result = await self.run(*args, cwd=cwd, input_data=input_data)
        if not result.ok:
            msg = f"exited with status {result.returncode}"
            if result.stderr:
                msg += f": {result.stderr}"
            raise CommandError(
                msg,
                target=" ".join(args),
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result
