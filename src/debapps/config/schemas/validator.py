"""JSON Schema validation for the debapps application catalog."""

from pathlib import Path
from typing import Any

import orjson
from jsonschema import Draft7Validator, ValidationError
from jsonschema.exceptions import best_match

from debapps.logger import get_logger

logger = get_logger(__name__)

CATALOG_SCHEMA_PATH = Path(__file__).parent / "catalog.schema.json"

# categories.<n>.apps.<m>
_APP_PATH_DEPTH = 4


class SchemaValidationError(Exception):
    """Raised when a catalog document does not match the schema.

    Attributes:
        path: Dotted location of the offending value, or None for the root
        app_id: Id of the catalog app the error belongs to, when known

    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        app_id: str | None = None,
    ) -> None:
        self.path = path
        self.app_id = app_id
        super().__init__(message)


class ConfigValidator:
    """Validates catalog documents against the bundled JSON schema."""

    def __init__(self, schema_path: Path = CATALOG_SCHEMA_PATH) -> None:
        """Load the schema and build a Draft 7 validator.

        Raises:
            FileNotFoundError: If the schema file is missing
            ValueError: If the schema is not valid JSON

        """
        try:
            schema = orjson.loads(schema_path.read_bytes())
        except orjson.JSONDecodeError as e:
            msg = f"Invalid JSON in schema file {schema_path}: {e}"
            raise ValueError(msg) from e
        self._validator = Draft7Validator(schema)

    @staticmethod
    def _app_id_at(data: dict[str, Any], error: ValidationError) -> str | None:
        """Id of the app whose entry contains the error, if any."""
        parts = list(error.absolute_path)
        if len(parts) < _APP_PATH_DEPTH or parts[0] != "categories":
            return None
        try:
            app = data["categories"][parts[1]]["apps"][parts[3]]
        except (KeyError, IndexError, TypeError):
            return None
        return app.get("id") if isinstance(app, dict) else None

    @staticmethod
    def _describe(error: ValidationError) -> str:
        """Short readable text for one jsonschema error."""
        if error.validator == "required":
            missing = error.message.split("'")[1] if "'" in error.message else "?"
            return f"Missing required field: '{missing}'"
        if error.validator == "enum":
            allowed = ", ".join(str(v) for v in error.validator_value)
            return f"Invalid value {error.instance!r}, expected one of: {allowed}"
        if error.validator == "type":
            actual = type(error.instance).__name__
            return f"Expected type '{error.validator_value}', got '{actual}'"
        return error.message

    def validate_catalog(
        self, data: dict[str, Any], catalog_name: str | None = None
    ) -> None:
        """Validate a whole catalog document.

        Only the most relevant error is reported, prefixed with the catalog
        name and the app id it belongs to.

        Args:
            data: Parsed catalog JSON
            catalog_name: Optional name (file) for error messages

        Raises:
            SchemaValidationError: If validation fails

        """
        error = best_match(self._validator.iter_errors(data))
        if error is None:
            logger.debug("Catalog validation passed: %s", catalog_name or "-")
            return

        path = ".".join(str(p) for p in error.absolute_path) or None
        app_id = self._app_id_at(data, error)

        message = f"{self._describe(error)} (at '{path or 'root'}')"
        if app_id:
            message = f"app '{app_id}': {message}"
        if catalog_name:
            message = f"Invalid catalog '{catalog_name}': {message}"
        raise SchemaValidationError(message, path=path, app_id=app_id)
