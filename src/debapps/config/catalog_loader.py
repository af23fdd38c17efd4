"""Catalog loader for the debapps application catalog.

Loads the catalog JSON (bundled or user supplied), validates it against the
catalog schema and parses it into an immutable Catalog.
"""

from pathlib import Path

import orjson

from debapps.config.paths import Paths
from debapps.config.schemas import ConfigValidator, SchemaValidationError
from debapps.constants import CATALOG_SCHEMA_VERSION
from debapps.domain.catalog import Catalog
from debapps.exceptions import ConfigError
from debapps.logger import get_logger

logger = get_logger(__name__)


class CatalogLoader:
    """Load and validate the application catalog."""

    def __init__(self, catalog_file: Path | None = None) -> None:
        """Initialize catalog loader.

        Args:
            catalog_file: Optional custom catalog file.
                Defaults to the bundled catalog.

        """
        self.catalog_file = catalog_file or Paths.CATALOG_FILE
        self.validator = ConfigValidator()

    def load(self) -> Catalog:
        """Load, validate and parse the catalog.

        Returns:
            Parsed catalog

        Raises:
            ConfigError: If the file is missing, not JSON, or invalid

        """
        name = self.catalog_file.name
        if not self.catalog_file.exists():
            msg = f"Catalog file not found: {self.catalog_file}"
            raise ConfigError(msg, target=name)

        try:
            data = orjson.loads(self.catalog_file.read_bytes())
        except orjson.JSONDecodeError as e:
            msg = f"Invalid JSON: {e}"
            raise ConfigError(msg, target=name) from e

        try:
            self.validator.validate_catalog(data, catalog_name=name)
        except SchemaValidationError as e:
            raise ConfigError(str(e), target=name) from e

        schema_version = data.get("schema_version", "")
        if schema_version != CATALOG_SCHEMA_VERSION:
            logger.warning(
                "⚠️  Catalog schema version %s (expected %s)",
                schema_version or "<missing>",
                CATALOG_SCHEMA_VERSION,
            )

        catalog = Catalog.from_dict(data)
        logger.debug(
            "Loaded %d apps from %s", len(catalog), self.catalog_file
        )
        return catalog
