"""Schema resolution for projects.

Builds a SchemaState either from local SDL files or from an introspected
remote endpoint. Remote schemas are printed to SDL and written to a
generated artifact so that codegen tools and go-to-definition both have a
file to point at.
"""

import asyncio
import logging
from pathlib import Path

from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLSchema,
    Source,
    build_ast_schema,
    build_client_schema,
    concat_ast,
    parse,
    print_schema,
)
from pygls import uris

from gqlls.core.entities.project_config import ProjectConfig, SchemaPointer
from gqlls.core.entities.schema_state import SchemaSourceKind, SchemaState
from gqlls.core.entities.server_config import ServerConfig
from gqlls.core.errors import SchemaBuildError
from gqlls.core.interfaces.schema_fetcher import ISchemaFetcher
from gqlls.utils.globs import iter_matching_files
from gqlls.utils.hashing import hash_files, hash_text

logger = logging.getLogger(__name__)


class SchemaSource:
    """Resolves the schema of a project.

    ``resolve`` is idempotent: when its inputs have not changed it hands
    back the previous SchemaState instead of rebuilding.
    """

    def __init__(self, config: ServerConfig, fetcher: ISchemaFetcher) -> None:
        """Initialize the schema source.

        Args:
            config: Server configuration (artifact location, ignored dirs).
            fetcher: Fetcher used for remote introspection.
        """
        self._config = config
        self._fetcher = fetcher

    def artifact_path(self, project: ProjectConfig) -> Path:
        """Path of the generated SDL artifact for ``project``."""
        base_dir = self._config.generated_schema_dir
        if base_dir is None:
            raise SchemaBuildError("No directory is configured for generated schemas")
        return project.generated_schema_path(
            base_dir,
            self._config.generated_schema_file_name,
        )

    async def resolve(
        self,
        project: ProjectConfig,
        previous: SchemaState | None = None,
        force: bool = False,
    ) -> SchemaState:
        """Resolve the schema for a project.

        Args:
            project: The project configuration.
            previous: The schema currently in use, if any.
            force: Rebuild even if inputs look unchanged. For remote
                schemas this is the only way to fetch again.

        Returns:
            The current SchemaState (``previous`` if nothing changed).

        Raises:
            SchemaFetchError: If a remote schema cannot be fetched.
            SchemaBuildError: If the SDL or introspection result is invalid.
        """
        pointer = project.remote_schema
        if pointer is not None:
            return await self._resolve_remote(project, pointer, previous, force)
        return await self._resolve_local(project, previous, force)

    async def _resolve_local(
        self,
        project: ProjectConfig,
        previous: SchemaState | None,
        force: bool,
    ) -> SchemaState:
        # A project that switched from a URL to local files must not keep
        # the old artifact around.
        stale_artifact = self.artifact_path(project)
        try:
            await asyncio.to_thread(stale_artifact.unlink, missing_ok=True)
        except OSError as e:
            raise SchemaBuildError(f"Cannot remove generated schema {stale_artifact}: {e}") from e

        files = list(
            iter_matching_files(
                project.root_dir,
                project.schema_patterns,
                self._config.ignored_dirs,
            )
        )
        if not files:
            raise SchemaBuildError(
                f"No schema files matched {list(project.schema_patterns)} "
                f"in {project.root_dir}"
            )

        try:
            fingerprint = hash_files(files)
        except OSError as e:
            raise SchemaBuildError(f"Cannot read schema files of {project.key}: {e}") from e
        if (
            not force
            and previous is not None
            and previous.source_kind == SchemaSourceKind.LOCAL
            and previous.fingerprint == fingerprint
        ):
            return previous

        documents: list[tuple[Path, DocumentNode]] = []
        for path in files:
            try:
                text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise SchemaBuildError(f"Cannot read schema file {path}: {e}") from e
            documents.append((path, self._parse_sdl(text, path)))

        schema = self._build(concat_ast([document for _, document in documents]))
        logger.debug("Built local schema for %s from %d file(s)", project.key, len(files))
        return SchemaState(
            schema=schema,
            source_kind=SchemaSourceKind.LOCAL,
            documents=tuple(documents),
            fingerprint=fingerprint,
        )

    async def _resolve_remote(
        self,
        project: ProjectConfig,
        pointer: SchemaPointer,
        previous: SchemaState | None,
        force: bool,
    ) -> SchemaState:
        if not force and previous is not None and previous.is_remote:
            return previous

        data = await self._fetcher.fetch(pointer.location, pointer.headers)
        try:
            schema = build_client_schema(data)  # type: ignore[arg-type]
        except (GraphQLError, TypeError) as e:
            raise SchemaBuildError(
                f"Invalid introspection result from {pointer.location}: {e}"
            ) from e

        sdl = print_schema(schema)
        artifact = self.artifact_path(project)
        try:
            await asyncio.to_thread(self._write_artifact, artifact, sdl)
        except OSError as e:
            raise SchemaBuildError(f"Cannot write generated schema {artifact}: {e}") from e
        logger.debug("Wrote generated schema for %s to %s", project.key, artifact)

        return SchemaState(
            schema=schema,
            source_kind=SchemaSourceKind.REMOTE,
            documents=((artifact, self._parse_sdl(sdl, artifact)),),
            fingerprint=hash_text(sdl),
            artifact_path=artifact,
        )

    @staticmethod
    def _write_artifact(path: Path, sdl: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(sdl, encoding="utf-8")

    @staticmethod
    def _parse_sdl(text: str, path: Path) -> DocumentNode:
        try:
            return parse(Source(text, uris.from_fs_path(str(path)) or str(path)))
        except GraphQLError as e:
            raise SchemaBuildError(f"Invalid schema file {path}: {e.message}") from e

    @staticmethod
    def _build(document: DocumentNode) -> GraphQLSchema:
        try:
            return build_ast_schema(document)
        except (GraphQLError, TypeError) as e:
            raise SchemaBuildError(f"Invalid schema: {e}") from e
