"""Tarball helpers: pick the compression from the URL and extract with tar."""

from pathlib import Path

from debapps.infrastructure.process import CommandRunner
from debapps.logger import get_logger

logger = get_logger(__name__)

_COMPRESSION = (
    (".tar.xz", "J"),
    (".tar.bz2", "j"),
    (".tar.gz", "z"),
    (".tgz", "z"),
)
DEFAULT_SUFFIX = ".tar.gz"


def tarball_suffix(url: str) -> str:
    """File suffix of a tarball URL, defaulting to ``.tar.gz``."""
    path = url.split("?", 1)[0]
    for suffix, _ in _COMPRESSION:
        if path.endswith(suffix):
            return ".tar.gz" if suffix == ".tgz" else suffix
    return DEFAULT_SUFFIX


def tar_flags(tarball: Path | str) -> str:
    """tar flags for extracting the given archive, e.g. ``xJf``."""
    name = str(tarball)
    for suffix, flag in _COMPRESSION:
        if name.endswith(suffix):
            return f"x{flag}f"
    return "xzf"


async def extract_tarball(
    runner: CommandRunner,
    tarball: Path,
    dest: Path,
    strip_components: int = 0,
) -> None:
    """Extract tarball into dest.

    Raises:
        CommandError: If tar fails

    """
    dest.mkdir(parents=True, exist_ok=True)
    args = ["tar", f"-{tar_flags(tarball)}", str(tarball), "-C", str(dest)]
    if strip_components:
        args.append(f"--strip-components={strip_components}")
    logger.debug("Extracting %s to %s", tarball.name, dest)
    await runner.check(*args)
