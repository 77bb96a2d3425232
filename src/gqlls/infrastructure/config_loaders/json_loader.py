"""JSON GraphQL config loader."""

import asyncio
import json
from pathlib import Path
from typing import Any

from gqlls.core.entities.project_config import (
    DEFAULT_PROJECT_NAME,
    ProjectConfig,
    SchemaPointer,
)
from gqlls.core.errors import ConfigError, ConfigMissingError

DEFAULT_CONFIG_FILE_NAMES = ("graphql.config.json", ".graphqlrc.json", ".graphqlrc")


class JsonConfigLoader:
    """Loads graphql-config style JSON files.

    Supports the single project form::

        {"schema": "./schema.graphql", "documents": "./**.graphql"}

    and the multi-project form::

        {"projects": {"app": {"schema": "...", "documents": "..."}}}

    ``schema`` may be a string, a list of strings, or a list holding
    ``{"https://...": {"headers": {...}}}`` objects.
    """

    def __init__(self, file_names: tuple[str, ...] = DEFAULT_CONFIG_FILE_NAMES) -> None:
        """Initialize the loader.

        Args:
            file_names: Config file names, in lookup priority order.
        """
        self._file_names = file_names

    def find_config_file(self, root_dir: Path) -> Path | None:
        """Return the first existing config file in ``root_dir``."""
        for name in self._file_names:
            candidate = root_dir / name
            if candidate.is_file():
                return candidate
        return None

    def is_config_file(self, path: Path, root_dir: Path) -> bool:
        """Check if ``path`` is a config file for ``root_dir``."""
        return path.name in self._file_names and path.parent.resolve() == root_dir.resolve()

    async def load(self, root_dir: Path) -> list[ProjectConfig]:
        """Resolve the config file found in ``root_dir``.

        Args:
            root_dir: Directory the config file is looked up in.

        Returns:
            One ProjectConfig per project declared in the file.

        Raises:
            ConfigMissingError: If no config file exists or it is empty.
            ConfigError: If the file is malformed or incomplete.
        """
        config_path = self.find_config_file(root_dir)
        if config_path is None:
            raise ConfigMissingError(str(root_dir))

        try:
            text = await asyncio.to_thread(config_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read GraphQL config file {config_path}: {e}") from e
        if not text.strip():
            raise ConfigMissingError(str(root_dir))

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid GraphQL config file {config_path}: {e}") from e

        return self.parse(raw, root_dir, config_path)

    def parse(
        self,
        raw: Any,
        root_dir: Path,
        config_path: Path | None = None,
    ) -> list[ProjectConfig]:
        """Turn a decoded config object into project configs.

        Args:
            raw: The decoded JSON value.
            root_dir: The project root directory.
            config_path: The file the value came from.

        Returns:
            The project configs, in declaration order.

        Raises:
            ConfigError: If the value does not describe any usable project.
        """
        if not isinstance(raw, dict):
            raise ConfigError(f"GraphQL config in {config_path} must be a JSON object")

        projects = raw.get("projects")
        if projects is None:
            return [self._parse_project(DEFAULT_PROJECT_NAME, raw, root_dir, config_path)]

        if not isinstance(projects, dict) or not projects:
            raise ConfigError(f"'projects' in {config_path} must be a non-empty object")

        return [
            self._parse_project(name, project, root_dir, config_path)
            for name, project in projects.items()
        ]

    def _parse_project(
        self,
        name: str,
        raw: Any,
        root_dir: Path,
        config_path: Path | None,
    ) -> ProjectConfig:
        if not isinstance(raw, dict):
            raise ConfigError(f"Project '{name}' in {config_path} must be a JSON object")

        schema = raw.get("schema")
        if not schema:
            raise ConfigError(f"Project '{name}' in {config_path} has no 'schema' entry")

        documents = raw.get("documents") or []
        if isinstance(documents, str):
            documents = [documents]
        if not isinstance(documents, list) or not all(isinstance(d, str) for d in documents):
            raise ConfigError(
                f"'documents' of project '{name}' in {config_path} must be a glob or list of globs"
            )

        return ProjectConfig(
            name=name,
            root_dir=root_dir,
            schema=tuple(self._parse_schema(schema, name, config_path)),
            documents=tuple(documents),
            config_path=config_path,
            extensions=raw.get("extensions") or {},
        )

    def _parse_schema(
        self,
        schema: Any,
        name: str,
        config_path: Path | None,
    ) -> list[SchemaPointer]:
        entries = schema if isinstance(schema, list) else [schema]
        pointers: list[SchemaPointer] = []
        for entry in entries:
            if isinstance(entry, str):
                pointers.append(SchemaPointer(location=entry))
            elif isinstance(entry, dict):
                for location, options in entry.items():
                    options = options if isinstance(options, dict) else {}
                    headers = options.get("headers") or {}
                    if not isinstance(headers, dict):
                        raise ConfigError(
                            f"'headers' of schema {location!r} for project '{name}' "
                            f"in {config_path} must be an object"
                        )
                    pointers.append(
                        SchemaPointer(
                            location=location,
                            headers={str(k): str(v) for k, v in headers.items()},
                        )
                    )
            else:
                raise ConfigError(
                    f"Unsupported 'schema' entry for project '{name}' in {config_path}: {entry!r}"
                )
        if not pointers:
            raise ConfigError(f"Project '{name}' in {config_path} has no 'schema' entry")
        return pointers
