"""Flatpak operations for the flatpak installer and detection."""

from debapps.constants import FLATHUB_REMOTE, VERSION_UNKNOWN
from debapps.infrastructure.process import CommandRunner
from debapps.logger import get_logger

logger = get_logger(__name__)


class FlatpakClient:
    """Async wrapper over the flatpak CLI."""

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def available(self) -> bool:
        return self.runner.which("flatpak") is not None

    async def has_remote(self, remote: str = FLATHUB_REMOTE) -> bool:
        """True when the named remote is configured."""
        result = await self.runner.run("flatpak", "remotes", "--columns=name")
        return remote in result.stdout.split()

    async def is_installed(self, flatpak_id: str) -> bool:
        """True when flatpak list contains the application id."""
        result = await self.runner.run(
            "flatpak", "list", "--app", "--columns=application"
        )
        return flatpak_id in result.stdout.split()

    async def get_version(self, flatpak_id: str) -> str:
        """Version line of ``flatpak info``, or "unknown"."""
        result = await self.runner.run("flatpak", "info", flatpak_id)
        for line in result.stdout.splitlines():
            key, _, value = line.strip().partition(":")
            if key.strip() == "Version" and value.strip():
                return value.strip()
        return VERSION_UNKNOWN

    async def install(self, flatpak_id: str, remote: str = FLATHUB_REMOTE) -> None:
        """Install an application from a remote."""
        await self.runner.check("flatpak", "install", "-y", remote, flatpak_id)

    async def uninstall(self, flatpak_id: str) -> None:
        await self.runner.check("flatpak", "uninstall", "-y", flatpak_id)

    async def update(self, flatpak_id: str) -> None:
        await self.runner.check("flatpak", "update", "-y", flatpak_id)
