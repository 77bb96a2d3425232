"""Tests for SymbolProvider."""

from collections.abc import Callable

import pytest
from lsprotocol import types as lsp

from gqlls.core.entities.cached_document import CachedDocument
from gqlls.core.services.project_cache import ProjectCache
from gqlls.core.services.symbol_provider import SymbolProvider

MakeDocument = Callable[[str, str], CachedDocument]


@pytest.fixture
def provider() -> SymbolProvider:
    return SymbolProvider()


class TestDocumentSymbols:
    """Tests for document outlines."""

    def test_operations_and_fragments(
        self, provider: SymbolProvider, make_document: MakeDocument
    ) -> None:
        """Test operations and fragments are outlined with nested fields."""
        document = make_document(
            "query.graphql",
            "query GetFoo { foo { bar } }\n\nfragment F on Foo { bar }\n",
        )

        symbols = provider.document_symbols(document)

        assert [(s.name, s.kind) for s in symbols] == [
            ("GetFoo", lsp.SymbolKind.Method),
            ("F", lsp.SymbolKind.Function),
        ]
        (foo,) = symbols[0].children
        assert foo.name == "foo"
        assert [child.name for child in foo.children] == ["bar"]
        assert symbols[1].selection_range.start == lsp.Position(line=2, character=9)

    def test_anonymous_operation(
        self, provider: SymbolProvider, make_document: MakeDocument
    ) -> None:
        """Test anonymous operations get a placeholder name."""
        document = make_document("query.graphql", "{ foo }")

        (symbol,) = provider.document_symbols(document)

        assert symbol.name == "<anonymous query>"

    def test_unparsable_units_are_skipped(
        self, provider: SymbolProvider, make_document: MakeDocument
    ) -> None:
        """Test broken units contribute no symbols."""
        document = make_document("query.graphql", "query {")

        assert provider.document_symbols(document) == []


class TestWorkspaceSymbols:
    """Tests for workspace symbol search."""

    @pytest.mark.asyncio
    async def test_query_matches_case_insensitively(
        self, provider: SymbolProvider, project: ProjectCache
    ) -> None:
        """Test fragments come before types and matching ignores case."""
        symbols = provider.workspace_symbols("foo", [project])

        assert [(s.name, s.kind) for s in symbols] == [
            ("FooFields", lsp.SymbolKind.Function),
            ("Foo", lsp.SymbolKind.Class),
        ]
        assert all(s.container_name == "default" for s in symbols)

    @pytest.mark.asyncio
    async def test_empty_query_lists_everything(
        self, provider: SymbolProvider, project: ProjectCache
    ) -> None:
        """Test an empty query returns every fragment and type."""
        symbols = provider.workspace_symbols("", [project])

        assert [s.name for s in symbols] == ["BazFields", "FooFields", "Baz", "Foo", "Query"]
