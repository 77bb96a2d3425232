"""Config loader interface."""

from pathlib import Path
from typing import Protocol

from gqlls.core.entities.project_config import ProjectConfig


class IConfigLoader(Protocol):
    """Contract for resolving GraphQL config files into projects.

    Loaders own the config file syntax; the rest of the server only sees
    resolved ProjectConfig snapshots.
    """

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
        ...

    def is_config_file(self, path: Path, root_dir: Path) -> bool:
        """Check if ``path`` is a config file for ``root_dir``.

        Args:
            path: The file to check.
            root_dir: The workspace root.

        Returns:
            True if a change to ``path`` affects the loaded config.
        """
        ...
