"""JSON Schema validation for the application catalog.

Usage:
    from debapps.config.schemas import ConfigValidator, SchemaValidationError

    try:
        ConfigValidator().validate_catalog(data, "apps.json")
    except SchemaValidationError as e:
        logger.error("%s", e)
"""

from debapps.config.schemas.validator import (
    ConfigValidator,
    SchemaValidationError,
)

__all__ = ["ConfigValidator", "SchemaValidationError"]
