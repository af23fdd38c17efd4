"""APT and dpkg operations used by the package-based installers."""

import re
from pathlib import Path

from debapps.constants import DPKG_INSTALLED_STATE
from debapps.exceptions import ConfigError
from debapps.infrastructure.process import CommandRunner
from debapps.logger import get_logger

logger = get_logger(__name__)

DISTRO_PLACEHOLDER = "<DISTRO>"
OS_RELEASE_FILE = Path("/etc/os-release")
ARMORED_KEY_MARKER = b"-----BEGIN PGP"
_GLOB_CHARS = "*?["

_CANDIDATE_RE = re.compile(r"^\s*Candidate:\s*(\S*)", re.MULTILINE)
_DPKG_QUERY_FORMAT = "${db:Status-Abbrev}\t${Package}\t${Version}\n"


class AptClient:
    """Thin async wrapper over dpkg, apt-get, apt-cache and gpg."""

    def __init__(
        self,
        runner: CommandRunner,
        os_release: Path = OS_RELEASE_FILE,
    ) -> None:
        self.runner = runner
        self.os_release = os_release

    # --- dpkg queries ----------------------------------------------------

    async def package_states(self, pattern: str) -> dict[str, tuple[str, str]]:
        """Return ``{package: (state, version)}`` for a name or glob.

        Args:
            pattern: Package name or dpkg glob such as ``*libreoffice*``

        """
        result = await self.runner.run(
            "dpkg-query", "-W", f"-f={_DPKG_QUERY_FORMAT}", pattern
        )
        states: dict[str, tuple[str, str]] = {}
        for line in result.stdout.splitlines():
            parts = line.split("\t")
            if len(parts) < 3:  # noqa: PLR2004
                continue
            state, package, version = parts[0].strip(), parts[1], parts[2]
            states[package.split(":")[0]] = (state, version)
        return states

    async def installed_packages(self, pattern: str) -> dict[str, str]:
        """Return ``{package: version}`` for fully installed matches."""
        return {
            package: version
            for package, (state, version) in (
                await self.package_states(pattern)
            ).items()
            if state == DPKG_INSTALLED_STATE
        }

    async def is_installed(self, package: str) -> bool:
        """True when dpkg reports the package as ``ii``."""
        return package in await self.installed_packages(package)

    async def get_version(self, package: str) -> str:
        """Installed version of a package, or "" when not installed.

        A dpkg glob such as ``libreoffice*-core`` yields the version of
        the first installed match.
        """
        installed = await self.installed_packages(package)
        if package in installed:
            return installed[package]
        if any(char in package for char in _GLOB_CHARS) and installed:
            return next(iter(installed.values()))
        return ""

    async def dependency_present(self, name: str) -> bool:
        """Check a dependency by name, its t64 variant, then a glob."""
        for candidate in (name, f"{name}t64"):
            if await self.is_installed(candidate):
                return True
        return bool(await self.installed_packages(f"*{name}*"))

    async def candidate_version(self, package: str) -> str:
        """Candidate version from ``apt-cache policy``.

        Returns:
            Version string, or "" when apt has no candidate

        """
        result = await self.runner.run("apt-cache", "policy", package)
        match = _CANDIDATE_RE.search(result.stdout)
        if not match or match.group(1) in ("", "(none)"):
            return ""
        return match.group(1)

    async def deb_package_name(self, deb_file: Path) -> str:
        """Package field of a local .deb, or "" if it cannot be read."""
        result = await self.runner.run(
            "dpkg-deb", "--field", str(deb_file), "Package"
        )
        return result.stdout.strip() if result.ok else ""

    # --- apt-get ---------------------------------------------------------

    async def update(self) -> None:
        """Refresh the package lists."""
        logger.info("Updating package lists...")
        await self.runner.check("apt-get", "update")

    async def install(self, *packages: str) -> None:
        """Install packages from the configured archives."""
        await self.runner.check("apt-get", "-y", "install", *packages)

    async def install_debs(self, *deb_files: Path) -> bool:
        """Install local .deb files in one dpkg batch.

        Dependency errors are expected here and left for fix_broken().

        Returns:
            True when dpkg exited cleanly

        """
        result = await self.runner.run(
            "dpkg", "-i", *(str(deb) for deb in deb_files)
        )
        if not result.ok:
            logger.warning(
                "⚠️  dpkg reported problems, fixing dependencies: %s",
                result.stderr,
            )
        return result.ok

    async def fix_broken(self) -> None:
        """Run ``apt-get -y --fix-broken install``."""
        await self.runner.check("apt-get", "-y", "--fix-broken", "install")

    async def upgrade(self, *packages: str) -> None:
        """Upgrade already installed packages only."""
        await self.runner.check(
            "apt-get", "-y", "install", "--only-upgrade", *packages
        )

    async def remove(self, package: str) -> bool:
        """Remove a package, handling broken dpkg states.

        A package stuck half-installed is force-removed with dpkg; a
        failing ``apt-get remove`` falls back to purge.

        Returns:
            False when the package was not installed

        Raises:
            CommandError: If every removal attempt fails

        """
        states = await self.package_states(package)
        state = states.get(package, ("", ""))[0]
        if not state.startswith("i"):
            logger.debug("Package %s is not installed", package)
            return False

        if state != DPKG_INSTALLED_STATE:
            logger.warning(
                "⚠️  Package %s is in broken state %s, forcing removal",
                package,
                state,
            )
            await self.runner.check(
                "dpkg", "--remove", "--force-remove-reinstreq", package
            )
            return True

        result = await self.runner.run("apt-get", "-y", "remove", package)
        if not result.ok:
            logger.warning("⚠️  Failed to remove %s, attempting purge", package)
            await self.runner.check("apt-get", "-y", "purge", package)
        return True

    async def remove_matching(self, pattern: str) -> list[str]:
        """Remove every installed package matching a dpkg glob.

        Returns:
            Names of removed packages

        """
        removed = []
        for package in await self.installed_packages(pattern):
            if await self.remove(package):
                removed.append(package)
        return removed

    async def cleanup(self) -> None:
        """autoremove and autoclean; failures are only logged."""
        for action in ("autoremove", "autoclean"):
            result = await self.runner.run("apt-get", "-y", action)
            if not result.ok:
                logger.warning("⚠️  apt-get %s failed: %s", action, result.stderr)

    # --- repositories ----------------------------------------------------

    def distro_codename(self) -> str:
        """VERSION_CODENAME from os-release, or "" if unavailable."""
        try:
            content = self.os_release.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("⚠️  Cannot read %s: %s", self.os_release, e)
            return ""

        values = {}
        for line in content.splitlines():
            key, sep, value = line.partition("=")
            if sep:
                values[key.strip()] = value.strip().strip('"')
        return values.get("VERSION_CODENAME") or values.get(
            "UBUNTU_CODENAME", ""
        )

    def render_repo_line(self, repo_line: str) -> str:
        """Substitute ``<DISTRO>`` with the host's codename.

        Raises:
            ConfigError: If the line needs a codename and none is known

        """
        if DISTRO_PLACEHOLDER not in repo_line:
            return repo_line
        codename = self.distro_codename()
        if not codename:
            msg = "Cannot determine distribution codename for <DISTRO>"
            raise ConfigError(msg, target=repo_line)
        logger.info("Detected distribution: %s", codename)
        return repo_line.replace(DISTRO_PLACEHOLDER, codename)

    async def install_signing_key(
        self, key_data: bytes, key_name: str, keyrings_dir: Path
    ) -> Path:
        """Write a repository signing key as a binary keyring.

        ASCII-armored keys are converted with ``gpg --dearmor``.

        Returns:
            Path of the written keyring

        """
        keyrings_dir.mkdir(parents=True, exist_ok=True)
        key_path = keyrings_dir / f"{key_name}.gpg"

        if key_data.lstrip().startswith(ARMORED_KEY_MARKER):
            logger.debug("Dearmoring signing key %s", key_name)
            result = await self.runner.check(
                "gpg", "--dearmor", input_data=key_data
            )
            key_data = result.output

        key_path.write_bytes(key_data)
        key_path.chmod(0o644)
        logger.debug("Signing key written to %s", key_path)
        return key_path

    @staticmethod
    def write_source(repo_line: str, repo_file: str, sources_dir: Path) -> Path:
        """Write a sources.list.d entry."""
        sources_dir.mkdir(parents=True, exist_ok=True)
        source_path = sources_dir / repo_file
        source_path.write_text(f"{repo_line}\n", encoding="utf-8")
        logger.debug("APT source written to %s", source_path)
        return source_path

    @staticmethod
    def write_preferences(preferences_file: str, content: str) -> Path:
        """Write an APT pinning preferences file."""
        path = Path(preferences_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content.rstrip("\n") + "\n", encoding="utf-8")
        return path

