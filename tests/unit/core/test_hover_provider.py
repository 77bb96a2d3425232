"""Tests for HoverProvider."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from lsprotocol import types as lsp

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.entities.project_config import ProjectConfig, SchemaPointer
from gqlls.core.services.hover_provider import HoverProvider
from gqlls.core.services.project_cache import ProjectCache
from gqlls.infrastructure.backends.memory import InMemoryParseCache

MakeDocument = Callable[[str, str], CachedDocument]


def pos(line: int, character: int) -> lsp.Position:
    return lsp.Position(line=line, character=character)


@pytest.fixture
def provider() -> HoverProvider:
    return HoverProvider()


class TestHoverProvider:
    """Tests for hover content."""

    @pytest.mark.asyncio
    async def test_field(
        self, provider: HoverProvider, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test a field shows its owner, arguments, type and description."""
        document = make_document("query.graphql", "query { foo { bar } }")

        text = provider.hover(document, pos(0, 15), project)

        assert text == (
            "```graphql\nFoo.bar(upper: Boolean): String\n```\n\nThe bar of the foo."
        )

    @pytest.mark.asyncio
    async def test_argument(
        self, provider: HoverProvider, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test an argument shows its type."""
        document = make_document("query.graphql", "query { foos(first: 1) { bar } }")

        text = provider.hover(document, pos(0, 14), project)

        assert text == "```graphql\nfirst: Int\n```"

    @pytest.mark.asyncio
    async def test_named_type(
        self, provider: HoverProvider, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test a type condition shows the type kind and description."""
        document = make_document("frag.graphql", "fragment X on Foo { bar }")

        text = provider.hover(document, pos(0, 15), project)

        assert text == "```graphql\ntype Foo\n```\n\nA thing with a bar."

    @pytest.mark.asyncio
    async def test_fragment_spread(
        self, provider: HoverProvider, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test a spread shows the fragment's type condition."""
        document = make_document("query.graphql", "query { foo { ...FooFields } }")

        text = provider.hover(document, pos(0, 20), project)

        assert text == "```graphql\nfragment FooFields on Foo\n```"

    @pytest.mark.asyncio
    async def test_directive(
        self, provider: HoverProvider, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test a directive shows its name and description."""
        document = make_document("query.graphql", "query { foo @include(if: true) { bar } }")

        text = provider.hover(document, pos(0, 15), project)

        assert text is not None
        assert text.startswith("```graphql\n@include\n```")

    @pytest.mark.asyncio
    async def test_nothing_under_cursor(
        self, provider: HoverProvider, project: ProjectCache, make_document: MakeDocument
    ) -> None:
        """Test punctuation and unknown names have no hover."""
        document = make_document("query.graphql", "query { foo { nop } }")

        assert provider.hover(document, pos(0, 6), project) is None
        assert provider.hover(document, pos(0, 15), project) is None

    def test_no_schema(
        self, provider: HoverProvider, project_root: Path, make_document: MakeDocument
    ) -> None:
        """Test nothing is shown before a schema is built."""
        project = ProjectCache(
            ProjectConfig(
                name="default", root_dir=project_root, schema=(SchemaPointer("s.graphql"),)
            ),
            AsyncMock(),
            InMemoryParseCache(),
        )
        document = make_document("query.graphql", "query { foo }")

        assert provider.hover(document, pos(0, 9), project) is None
