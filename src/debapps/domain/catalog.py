"""In-memory application catalog.

Catalog.from_dict() is the only place raw catalog JSON is interpreted.
"""

from collections.abc import Iterator
from dataclasses import fields
from typing import Any

from debapps.domain.types import (
    SOURCE_CLASSES,
    AptRepositorySource,
    CatalogEntry,
    Category,
    DesktopEntrySpec,
    DetectionSpec,
    InstallMethod,
    PostInstall,
    Source,
    SourceType,
    SymlinkSpec,
)
from debapps.exceptions import ConfigError

REQUIRED_APP_FIELDS = ("id", "name", "install_method")


def _str_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


def parse_source(data: dict[str, Any] | None, app_id: str) -> Source | None:
    """Build the typed source variant for a catalog "source" object.

    Args:
        data: Raw source object (must contain "type")
        app_id: Owning app id, for error messages

    Returns:
        Source dataclass, or None when the entry declares no source

    Raises:
        ConfigError: If the type is unknown or a required key is missing

    """
    if not data:
        return None

    raw_type = data.get("type")
    try:
        source_type = SourceType(raw_type)
    except ValueError as e:
        msg = f"Unknown source type: {raw_type!r}"
        raise ConfigError(msg, target=app_id) from e

    source_cls = SOURCE_CLASSES[source_type]
    kwargs: dict[str, Any] = {}
    for source_field in fields(source_cls):
        if source_field.name in data and data[source_field.name] is not None:
            kwargs[source_field.name] = str(data[source_field.name])

    if source_cls is AptRepositorySource:
        preferences = data.get("preferences") or {}
        kwargs["preferences_file"] = str(preferences.get("file", ""))
        kwargs["preferences_content"] = str(preferences.get("content", ""))

    try:
        return source_cls(**kwargs)
    except TypeError as e:
        msg = f"Incomplete '{source_type.value}' source: {e}"
        raise ConfigError(msg, target=app_id) from e


def parse_post_install(data: dict[str, Any] | None) -> PostInstall:
    """Build PostInstall from the optional "post_install" object."""
    if not data:
        return PostInstall()

    symlink = data.get("symlink") or {}
    desktop = data.get("desktop_entry") or {}
    return PostInstall(
        symlink=(
            SymlinkSpec(source=symlink["source"], target=symlink["target"])
            if symlink.get("source") and symlink.get("target")
            else None
        ),
        desktop_entry=(
            DesktopEntrySpec(
                file=desktop["file"], content=desktop.get("content", "")
            )
            if desktop.get("file")
            else None
        ),
        fix_dependencies=bool(data.get("fix_dependencies", False)),
    )


def parse_entry(data: dict[str, Any], category: str = "") -> CatalogEntry:
    """Build a CatalogEntry from a raw app object.

    Raises:
        ConfigError: If required fields are missing or invalid

    """
    app_id = str(data.get("id", "")) or "<unknown>"
    for required in REQUIRED_APP_FIELDS:
        if not data.get(required):
            msg = f"Missing required field: {required}"
            raise ConfigError(msg, target=app_id)

    try:
        install_method = InstallMethod(data["install_method"])
    except ValueError as e:
        msg = f"Unknown install_method: {data['install_method']!r}"
        raise ConfigError(msg, target=app_id) from e

    detection = data.get("detection") or {}
    return CatalogEntry(
        id=app_id,
        name=str(data["name"]),
        install_method=install_method,
        source=parse_source(data.get("source"), app_id),
        detection=DetectionSpec(
            binaries=_str_tuple(detection.get("binaries")),
            apt_packages=_str_tuple(detection.get("apt_packages")),
            snap_packages=_str_tuple(detection.get("snap_packages")),
            flatpak_packages=_str_tuple(detection.get("flatpak_packages")),
            desktop_files=_str_tuple(detection.get("desktop_files")),
        ),
        description=str(data.get("description", "")),
        category=category,
        dependencies=_str_tuple(data.get("dependencies")),
        install_location=str(data.get("install_location", "")),
        warnings=_str_tuple(data.get("warnings")),
        flatpak_id=str(data.get("flatpak_id", "")),
        remove_conflicts=_str_tuple(data.get("remove_conflicts")),
        remove_pattern=str(data.get("remove_pattern", "")),
        post_install=parse_post_install(data.get("post_install")),
    )


class Catalog:
    """Immutable collection of catalog entries grouped by category."""

    def __init__(
        self,
        entries: dict[str, CatalogEntry],
        categories: list[Category] | None = None,
        schema_version: str = "",
    ) -> None:
        self._entries = entries
        self.categories = categories or []
        self.schema_version = schema_version

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Catalog":
        """Parse a whole catalog document.

        Raises:
            ConfigError: On a malformed entry or a duplicate app id

        """
        entries: dict[str, CatalogEntry] = {}
        categories: list[Category] = []

        for raw_category in data.get("categories", []):
            category_id = str(raw_category.get("id", ""))
            app_ids = []
            for raw_app in raw_category.get("apps", []):
                entry = parse_entry(raw_app, category=category_id)
                if entry.id in entries:
                    msg = "Duplicate app id in catalog"
                    raise ConfigError(msg, target=entry.id)
                entries[entry.id] = entry
                app_ids.append(entry.id)
            categories.append(
                Category(
                    id=category_id,
                    name=str(raw_category.get("name", category_id)),
                    description=str(raw_category.get("description", "")),
                    apps=tuple(app_ids),
                )
            )

        return cls(
            entries,
            categories,
            schema_version=str(data.get("schema_version", "")),
        )

    def get(self, app_id: str) -> CatalogEntry:
        """Return the entry for app_id.

        Raises:
            ConfigError: If the app is not in the catalog

        """
        try:
            return self._entries[app_id]
        except KeyError:
            msg = "App not found in catalog"
            raise ConfigError(msg, target=app_id) from None

    def get_category(self, category_id: str) -> Category:
        """Return a category by id.

        Raises:
            ConfigError: If the category does not exist

        """
        for category in self.categories:
            if category.id == category_id:
                return category
        msg = "Category not found"
        raise ConfigError(msg, target=category_id)

    def apps_in_category(self, category_id: str) -> list[CatalogEntry]:
        """Return entries belonging to a category, in catalog order."""
        category = self.get_category(category_id)
        return [self._entries[app_id] for app_id in category.apps]

    def search(self, keyword: str) -> list[CatalogEntry]:
        """Case-insensitive search over app names."""
        needle = keyword.lower()
        return [
            entry
            for entry in self._entries.values()
            if needle in entry.name.lower()
        ]

    def ids(self) -> list[str]:
        """Return every app id."""
        return list(self._entries)

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._entries

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
