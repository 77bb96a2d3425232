"""Schema state entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from graphql import DocumentNode, GraphQLSchema


class SchemaSourceKind(Enum):
    """Where a project's schema comes from.

    LOCAL: SDL files inside the project.
    REMOTE: Introspection of an HTTP endpoint.
    """

    LOCAL = "LOCAL"
    REMOTE = "REMOTE"


@dataclass(frozen=True)
class SchemaState:
    """The current usable schema for a project.

    Immutable: a rebuild produces a new instance that replaces the old one
    in a single assignment, so readers never see a half-built schema.

    Attributes:
        schema: The built graphql-core schema.
        source_kind: LOCAL or REMOTE.
        documents: Parsed SDL per file, in the order they were loaded. For
            remote schemas this is the generated artifact.
        fingerprint: Hash of the inputs the schema was built from.
        artifact_path: Generated SDL file, only set for remote schemas.
        built_at: When the schema was built.
    """

    schema: GraphQLSchema
    source_kind: SchemaSourceKind
    documents: tuple[tuple[Path, DocumentNode], ...] = ()
    fingerprint: str = ""
    artifact_path: Path | None = None
    built_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_remote(self) -> bool:
        """Check if the schema was introspected from an endpoint."""
        return self.source_kind == SchemaSourceKind.REMOTE

    @property
    def files(self) -> tuple[Path, ...]:
        """Files the schema was built from."""
        return tuple(path for path, _ in self.documents)
