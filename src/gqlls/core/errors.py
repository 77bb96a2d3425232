"""Exception hierarchy for gqlls.

Only configuration and schema failures are raised out of the services;
everything that happens while answering a request degrades to an empty
result or a diagnostic instead.
"""


class GqllsError(Exception):
    """Base class for all gqlls errors."""

    pass


class ConfigError(GqllsError):
    """Raised when a GraphQL config file cannot be turned into projects."""

    pass


class ConfigMissingError(ConfigError):
    """Raised when the config file is absent or empty."""

    def __init__(self, config_dir: str) -> None:
        super().__init__(
            "GraphQL Config file is not available in the provided config "
            f"directory: {config_dir}"
        )
        self.config_dir = config_dir


class SchemaFetchError(GqllsError):
    """Raised when a remote schema cannot be introspected."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch schema from {url}: {reason}")
        self.url = url
        self.reason = reason


class SchemaBuildError(GqllsError):
    """Raised when SDL cannot be parsed or built into a schema."""

    pass
