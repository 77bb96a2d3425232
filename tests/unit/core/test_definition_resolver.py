"""Tests for DefinitionResolver."""

from collections.abc import Callable
from pathlib import Path

import pytest
from lsprotocol import types as lsp
from pygls import uris

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.services.definition_resolver import DefinitionResolver
from gqlls.core.services.project_cache import ProjectCache

MakeDocument = Callable[[str, str], CachedDocument]


def pos(line: int, character: int) -> lsp.Position:
    return lsp.Position(line=line, character=character)


def rng(start: tuple[int, int], end: tuple[int, int]) -> lsp.Range:
    return lsp.Range(start=pos(*start), end=pos(*end))


@pytest.fixture
def resolver() -> DefinitionResolver:
    return DefinitionResolver()


class TestDefinitionResolver:
    """Tests for resolving definitions."""

    @pytest.mark.asyncio
    async def test_fragment_spread_in_other_file(
        self,
        resolver: DefinitionResolver,
        project: ProjectCache,
        make_document: MakeDocument,
        project_root: Path,
    ) -> None:
        """Test a spread resolves to the fragment file and exact range."""
        document = make_document("query.graphql", "query { foo { ...FooFields } }")

        locations = resolver.resolve(document, pos(0, 20), project)

        assert locations == [
            lsp.Location(
                uri=uris.from_fs_path(str(project_root / "fragments.graphql")),
                range=rng((0, 0), (3, 1)),
            )
        ]

    @pytest.mark.asyncio
    async def test_local_fragment_wins(
        self, resolver: DefinitionResolver, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test a fragment declared in the same document resolves locally."""
        text = "query { foo { ...FooFields } }\n\nfragment FooFields on Foo { bar }"
        document = make_document("query.graphql", text)

        locations = resolver.resolve(document, pos(0, 20), project)

        assert locations == [lsp.Location(uri=document.uri, range=rng((2, 0), (2, 33)))]

    @pytest.mark.asyncio
    async def test_named_type(
        self,
        resolver: DefinitionResolver,
        project: ProjectCache,
        make_document: MakeDocument,
        project_root: Path,
    ) -> None:
        """Test a type condition resolves to the type definition."""
        document = make_document("frag.graphql", "fragment X on Baz { qux }")

        locations = resolver.resolve(document, pos(0, 15), project)

        assert locations == [
            lsp.Location(
                uri=uris.from_fs_path(str(project_root / "schema.graphql")),
                range=rng((7, 0), (9, 1)),
            )
        ]

    @pytest.mark.asyncio
    async def test_field_resolves_to_owner_type(
        self, resolver: DefinitionResolver, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test a field resolves to the definition of the type owning it."""
        document = make_document("query.graphql", "query { foo { bar } }")

        on_bar = resolver.resolve(document, pos(0, 15), project)
        on_foo = resolver.resolve(document, pos(0, 9), project)

        assert [loc.range for loc in on_bar] == [rng((0, 0), (5, 1))]
        assert [loc.range for loc in on_foo] == [rng((11, 0), (14, 1))]

    @pytest.mark.asyncio
    async def test_embedded_document(
        self,
        resolver: DefinitionResolver,
        project: ProjectCache,
        make_document: MakeDocument,
        project_root: Path,
    ) -> None:
        """Test positions inside a tagged template resolve in file coordinates."""
        text = "import gql from 'graphql-tag';\n\nconst Q = gql`query { foo { ...FooFields } }`;\n"
        document = make_document("queries.ts", text)

        locations = resolver.resolve(document, pos(2, 34), project)

        assert [loc.uri for loc in locations] == [
            uris.from_fs_path(str(project_root / "fragments.graphql"))
        ]

    @pytest.mark.asyncio
    async def test_unresolved_reference_is_empty(
        self, resolver: DefinitionResolver, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test unknown names yield an empty list, not an error."""
        document = make_document("query.graphql", "query { foo { ...Missing } }")

        assert resolver.resolve(document, pos(0, 19), project) == []

    @pytest.mark.asyncio
    async def test_position_outside_units(
        self, resolver: DefinitionResolver, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test positions outside every unit yield an empty list."""
        document = make_document("queries.ts", "const a = 1;\nconst Q = gql`query { foo }`;\n")

        assert resolver.resolve(document, pos(0, 3), project) == []

    @pytest.mark.asyncio
    async def test_unparsable_unit(
        self, resolver: DefinitionResolver, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test a unit that failed to parse yields an empty list."""
        document = make_document("query.graphql", "query { foo { ...FooFields ")

        assert resolver.resolve(document, pos(0, 20), project) == []

    @pytest.mark.asyncio
    async def test_idempotent(
        self, resolver: DefinitionResolver, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test resolving twice without changes gives identical results."""
        document = make_document("query.graphql", "query { foo { ...FooFields } }")

        first = resolver.resolve(document, pos(0, 20), project)
        second = resolver.resolve(document, pos(0, 20), project)

        assert first == second
        assert first
