"""Top-level package for debapps.

Installs and tracks desktop applications on Debian-based systems.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("debapps")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"
