"""Settings manager for the debapps INI configuration file."""

import configparser
from dataclasses import dataclass, field
from pathlib import Path

from debapps.config.paths import Paths
from debapps.constants import (
    CONFIG_VERSION,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TIMEOUT_SECONDS,
    DIRECTORY_KEYS,
    KEY_ASSUME_YES,
    KEY_CONFIG_VERSION,
    KEY_CONSOLE_LOG_LEVEL,
    KEY_LOG_LEVEL,
    KEY_RETRY_ATTEMPTS,
    KEY_TIMEOUT_SECONDS,
    SECTION_DEFAULT,
    SECTION_DIRECTORY,
    SECTION_NETWORK,
    SECTION_SYSTEM,
    SYSTEM_KEYS,
)
from debapps.logger import get_logger

logger = get_logger(__name__)

RawConfigDict = dict[str, str | dict[str, str]]

_SECTION_COMMENTS = {
    SECTION_DEFAULT: "# General behaviour and log levels\n",
    SECTION_NETWORK: "\n# Network retry and timeout (seconds)\n",
    SECTION_DIRECTORY: "\n# Directories owned by debapps\n",
    SECTION_SYSTEM: (
        "\n# System locations written by installers.\n"
        "# AppImage removal only touches paths under opt, share and bin.\n"
    ),
}


@dataclass(frozen=True)
class NetworkSettings:
    """Retry and timeout settings for HTTP requests."""

    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class DirectorySettings:
    """Directories owned by debapps."""

    cache: Path = Paths.CACHE_DIR
    data: Path = Paths.DATA_DIR
    logs: Path = Paths.LOGS_DIR
    tmp: Path = Paths.TMP_DIR


@dataclass(frozen=True)
class SystemPaths:
    """System locations that installers write to."""

    opt: Path = Path("/opt")
    share: Path = Path("/usr/share")
    applications: Path = Path("/usr/share/applications")
    icons: Path = Path("/usr/share/icons/hicolor")
    bin: Path = Path("/usr/sbin")
    apt_keyrings: Path = Path("/etc/apt/keyrings")
    apt_sources: Path = Path("/etc/apt/sources.list.d")

    @property
    def removal_roots(self) -> tuple[str, ...]:
        """Path prefixes that manifest-driven removal may delete under."""
        return tuple(
            f"{str(root).rstrip('/')}/"
            for root in (self.opt, self.share, self.bin)
        )


@dataclass(frozen=True)
class Settings:
    """Typed view of settings.conf."""

    config_version: str = CONFIG_VERSION
    log_level: str = DEFAULT_LOG_LEVEL
    console_log_level: str = DEFAULT_CONSOLE_LOG_LEVEL
    assume_yes: bool = False
    network: NetworkSettings = field(default_factory=NetworkSettings)
    directory: DirectorySettings = field(default_factory=DirectorySettings)
    system: SystemPaths = field(default_factory=SystemPaths)


class SettingsManager:
    """Load and save settings.conf."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize settings manager.

        Args:
            config_dir: Configuration directory path
                (defaults to Paths.CONFIG_DIR)

        """
        self.config_dir = config_dir or Paths.CONFIG_DIR
        self.settings_file = self.config_dir / "settings.conf"

    def get_defaults(self) -> RawConfigDict:
        """Get default configuration values as raw strings.

        Returns:
            Default configuration dictionary

        """
        directory = DirectorySettings(
            cache=self.config_dir / "cache",
            data=self.config_dir / "data",
            logs=self.config_dir / "logs",
        )
        system = SystemPaths()
        return {
            KEY_CONFIG_VERSION: CONFIG_VERSION,
            KEY_LOG_LEVEL: DEFAULT_LOG_LEVEL,
            KEY_CONSOLE_LOG_LEVEL: DEFAULT_CONSOLE_LOG_LEVEL,
            KEY_ASSUME_YES: "false",
            SECTION_NETWORK: {
                KEY_RETRY_ATTEMPTS: str(DEFAULT_RETRY_ATTEMPTS),
                KEY_TIMEOUT_SECONDS: str(DEFAULT_TIMEOUT_SECONDS),
            },
            SECTION_DIRECTORY: {
                key: str(getattr(directory, key)) for key in DIRECTORY_KEYS
            },
            SECTION_SYSTEM: {
                key: str(getattr(system, key)) for key in SYSTEM_KEYS
            },
        }

    def _create_parser(self, defaults: RawConfigDict) -> configparser.ConfigParser:
        """Create a ConfigParser pre-populated with defaults."""
        parser = configparser.ConfigParser(
            inline_comment_prefixes=("#", ";"),
            interpolation=None,
        )
        parser.read_dict(
            {
                SECTION_DEFAULT: {
                    key: value
                    for key, value in defaults.items()
                    if not isinstance(value, dict)
                }
            }
        )
        for section, values in defaults.items():
            if isinstance(values, dict):
                parser.add_section(section)
                for key, value in values.items():
                    parser.set(section, key, value)
        return parser

    def load(self) -> Settings:
        """Load settings, creating the file from defaults if missing.

        Returns:
            Loaded settings

        Raises:
            ValueError: If a numeric or boolean value cannot be parsed

        """
        defaults = self.get_defaults()
        parser = self._create_parser(defaults)

        if self.settings_file.exists():
            parser.read(self.settings_file, encoding="utf-8")
        else:
            try:
                self.save(parser)
            except OSError as e:
                logger.debug("Could not write default settings: %s", e)

        return self._to_settings(parser)

    def save(self, parser: configparser.ConfigParser) -> None:
        """Write the parser to settings.conf with section comments.

        Args:
            parser: Populated config parser

        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with self.settings_file.open("w", encoding="utf-8") as f:
            f.write("# debapps settings\n\n")
            f.write(_SECTION_COMMENTS[SECTION_DEFAULT])
            f.write(f"[{SECTION_DEFAULT}]\n")
            for key, value in parser.defaults().items():
                f.write(f"{key} = {value}\n")
            for section in (SECTION_NETWORK, SECTION_DIRECTORY, SECTION_SYSTEM):
                f.write(_SECTION_COMMENTS[section])
                f.write(f"[{section}]\n")
                for key, value in parser.items(section, raw=True):
                    if not parser.has_option(SECTION_DEFAULT, key):
                        f.write(f"{key} = {value}\n")

    @staticmethod
    def _to_settings(parser: configparser.ConfigParser) -> Settings:
        """Convert a populated parser into typed settings."""
        defaults = parser[SECTION_DEFAULT]
        network = parser[SECTION_NETWORK]
        directory = parser[SECTION_DIRECTORY]
        system = parser[SECTION_SYSTEM]

        return Settings(
            config_version=defaults.get(KEY_CONFIG_VERSION, CONFIG_VERSION),
            log_level=defaults.get(KEY_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper(),
            console_log_level=defaults.get(
                KEY_CONSOLE_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL
            ).upper(),
            assume_yes=defaults.getboolean(KEY_ASSUME_YES, fallback=False),
            network=NetworkSettings(
                retry_attempts=network.getint(
                    KEY_RETRY_ATTEMPTS, DEFAULT_RETRY_ATTEMPTS
                ),
                timeout_seconds=network.getint(
                    KEY_TIMEOUT_SECONDS, DEFAULT_TIMEOUT_SECONDS
                ),
            ),
            directory=DirectorySettings(
                **{
                    key: Paths.expand_path(directory[key])
                    for key in DIRECTORY_KEYS
                }
            ),
            system=SystemPaths(
                **{key: Paths.expand_path(system[key]) for key in SYSTEM_KEYS}
            ),
        )
