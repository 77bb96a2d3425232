"""Fixtures shared by the core service tests."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from pygls import uris

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.entities.project_config import ProjectConfig, SchemaPointer
from gqlls.core.entities.server_config import ServerConfig
from gqlls.core.services.document_parser import split_document
from gqlls.core.services.project_cache import ProjectCache
from gqlls.core.services.schema_source import SchemaSource
from gqlls.infrastructure.backends.memory import InMemoryParseCache

SCHEMA = '''\
"""A thing with a bar."""
type Foo {
  "The bar of the foo."
  bar(upper: Boolean = false): String
  baz: Baz
}

type Baz {
  qux: Int
}

type Query {
  foo: Foo
  foos(first: Int): [Foo]
}
'''

FRAGMENTS = "fragment FooFields on Foo {\n  bar\n  baz { ...BazFields }\n}\n"
BAZ_FRAGMENTS = "fragment BazFields on Baz { qux }\n"


@pytest_asyncio.fixture
async def project(
    project_root: Path,
    server_config: ServerConfig,
    write_file: Callable[[str, str], Path],
) -> ProjectCache:
    """A built project with a schema file and two fragment files."""
    write_file("schema.graphql", SCHEMA)
    write_file("fragments.graphql", FRAGMENTS)
    write_file("baz.graphql", BAZ_FRAGMENTS)
    cache = ProjectCache(
        ProjectConfig(
            name="default",
            root_dir=project_root,
            schema=(SchemaPointer("schema.graphql"),),
            documents=("**/*.graphql",),
        ),
        SchemaSource(server_config, AsyncMock()),
        InMemoryParseCache(),
        server_config,
    )
    await cache.refresh_schema()
    await cache.rebuild_fragment_definitions()
    return cache


@pytest.fixture
def make_document(
    project_root: Path, server_config: ServerConfig
) -> Callable[[str, str], CachedDocument]:
    """Parse text as if it were the open document ``name``."""

    def make(name: str, text: str) -> CachedDocument:
        uri = uris.from_fs_path(str(project_root / name)) or name
        return CachedDocument(
            uri=uri, text=text, contents=split_document(text, uri, server_config)
        )

    return make
