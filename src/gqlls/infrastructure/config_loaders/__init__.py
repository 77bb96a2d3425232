"""GraphQL config loaders."""

from gqlls.infrastructure.config_loaders.json_loader import JsonConfigLoader

__all__ = ["JsonConfigLoader"]
