"""Server configuration entity."""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ServerConfig:
    """Language server configuration.

    Settings that are not part of a project's GraphQL config file:
    where config files are looked up, where generated schema artifacts
    go, which files are considered GraphQL documents, and limits for
    the parse cache and introspection requests.
    """

    config_file_names: tuple[str, ...] = (
        "graphql.config.json",
        ".graphqlrc.json",
        ".graphqlrc",
    )
    generated_schema_dir: Path | None = None
    generated_schema_file_name: str = "generated-schema.graphql"

    # File classification
    graphql_extensions: tuple[str, ...] = (".graphql", ".gql", ".graphqls")
    embedded_extensions: tuple[str, ...] = (
        ".js",
        ".jsx",
        ".mjs",
        ".cjs",
        ".ts",
        ".tsx",
        ".vue",
        ".svelte",
        ".py",
    )
    ignored_dirs: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {"node_modules", ".git", ".hg", ".venv", "__pycache__", "dist"}
        )
    )

    # Caching
    parse_cache_size: int = 1000

    # Remote schemas
    fetch_timeout: float = 30.0

    def __post_init__(self) -> None:
        """Set the generated schema directory if not provided."""
        if self.generated_schema_dir is None:
            self.generated_schema_dir = (
                Path(tempfile.gettempdir()) / "graphql-language-service"
            )

    def is_graphql_file(self, path: str | Path) -> bool:
        """Check if a path is a plain GraphQL file."""
        return Path(path).suffix.lower() in self.graphql_extensions

    def is_supported_file(self, path: str | Path) -> bool:
        """Check if a path may contain GraphQL documents."""
        suffix = Path(path).suffix.lower()
        return suffix in self.graphql_extensions or suffix in self.embedded_extensions
