"""Project configuration entity."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gqlls.utils.globs import matches, relative_to
from gqlls.utils.hashing import hash_value

DEFAULT_PROJECT_NAME = "default"


@dataclass(frozen=True)
class SchemaPointer:
    """One entry of a project's ``schema`` setting.

    Attributes:
        location: A glob/path relative to the project root, or a URL.
        headers: HTTP headers sent when introspecting a URL.
    """

    location: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_remote(self) -> bool:
        """Check if the pointer is an HTTP(S) endpoint."""
        return self.location.startswith(("http://", "https://"))


@dataclass(frozen=True)
class ProjectConfig:
    """Resolved settings for one logical GraphQL project.

    Immutable snapshot produced by a config loader. A new instance is
    produced every time the config file is resolved again.
    """

    name: str
    root_dir: Path
    schema: tuple[SchemaPointer, ...]
    documents: tuple[str, ...] = ()
    config_path: Path | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """The project root identifier used to key per-project caches."""
        return f"{self.root_dir}-{self.name}"

    @property
    def remote_schema(self) -> SchemaPointer | None:
        """The first URL schema pointer, if any."""
        for pointer in self.schema:
            if pointer.is_remote:
                return pointer
        return None

    @property
    def is_remote_schema(self) -> bool:
        """Check if the schema is introspected from an endpoint."""
        return self.remote_schema is not None

    @property
    def schema_patterns(self) -> tuple[str, ...]:
        """Local schema globs (empty for remote schemas)."""
        if self.is_remote_schema:
            return ()
        return tuple(pointer.location for pointer in self.schema)

    def matches_schema(self, path: Path) -> bool:
        """Check if a file is one of the project's local schema files."""
        relative = relative_to(path, self.root_dir)
        return relative is not None and matches(relative, self.schema_patterns)

    def matches_documents(self, path: Path) -> bool:
        """Check if a file is matched by the project's documents globs."""
        relative = relative_to(path, self.root_dir)
        return relative is not None and matches(relative, self.documents)

    def generated_schema_path(self, base_dir: Path, file_name: str) -> Path:
        """Path of the generated SDL artifact for a remote schema.

        The directory is derived from the root directory and project name
        so that different workspaces never share an artifact.

        Args:
            base_dir: The configured generated-schema directory.
            file_name: The artifact file name.

        Returns:
            The absolute artifact path.
        """
        root_id = f"{self.root_dir.name or 'root'}-{hash_value(str(self.root_dir))[:8]}"
        return base_dir / root_id / "projects" / self.name / file_name
