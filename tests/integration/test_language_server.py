"""End-to-end scenarios through MessageProcessor."""

import json
from pathlib import Path

import httpx
import pytest
from graphql import build_schema, introspection_from_schema
from lsprotocol import types as lsp
from pygls import uris

from gqlls.core.entities.server_config import ServerConfig
from gqlls.infrastructure.fetchers.http import HttpSchemaFetcher
from gqlls.message_processor import MessageProcessor

RICK_AND_MORTY_SDL = '''
type Query {
  "Get a specific episode by ID"
  episode(id: ID!): Episode
  "Get the list of all episodes"
  episodes(page: Int, filter: FilterEpisode): Episodes
  "Get a specific character by ID"
  character(id: ID!): Character
}

input FilterEpisode {
  name: String
  episode: String
}

type Info {
  count: Int
  pages: Int
  next: Int
  prev: Int
}

type Episodes {
  info: Info
  results: [Episode]
}

type Episode {
  id: ID
  name: String
  air_date: String
  episode: String
  characters: [Character]!
  created: String
}

type Character {
  id: ID
  name: String
  status: String
  species: String
  episode: [Episode]!
  created: String
}
'''


def uri(path: Path) -> str:
    return uris.from_fs_path(str(path))


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def initialize_params(root: Path) -> lsp.InitializeParams:
    return lsp.InitializeParams(
        process_id=None,
        root_uri=uri(root),
        capabilities=lsp.ClientCapabilities(),
    )


def at(path: Path, line: int, character: int) -> lsp.TextDocumentPositionParams:
    return lsp.TextDocumentPositionParams(
        text_document=lsp.TextDocumentIdentifier(uri=uri(path)),
        position=lsp.Position(line=line, character=character),
    )


def span(start_line: int, start_char: int, end_line: int, end_char: int) -> lsp.Range:
    return lsp.Range(
        start=lsp.Position(line=start_line, character=start_char),
        end=lsp.Position(line=end_line, character=end_char),
    )


def changed(path: Path) -> lsp.DidChangeWatchedFilesParams:
    return lsp.DidChangeWatchedFilesParams(
        changes=[lsp.FileEvent(uri=uri(path), type=lsp.FileChangeType.Changed)]
    )


class TestLocalSchemaProject:
    """A project with a schema file inside the workspace."""

    @pytest.mark.asyncio
    async def test_definitions_follow_file_changes(
        self, server_config: ServerConfig, project_root: Path, tmp_path: Path
    ) -> None:
        """Test caches follow schema and document changes on disk."""
        schema = write(
            project_root / "schema.graphql",
            "type Query { foo: Foo }\n\ntype Foo { bar: String }",
        )
        query = write(project_root / "query.graphql", "query { bar ...B }")
        fragments = write(project_root / "fragments.graphql", "fragment B on Foo { bar }")
        write(
            project_root / "graphql.config.json",
            json.dumps({"schema": "./schema.graphql", "documents": "./**.graphql"}),
        )

        processor = MessageProcessor(server_config)
        await processor.handle_initialize_request(initialize_params(project_root))
        assert processor.is_initialized

        # Type reference inside a fragment resolves into the schema file.
        (location,) = await processor.handle_definition_request(at(fragments, 0, 16))
        assert location.uri == uri(schema)
        assert location.range.end == lsp.Position(line=2, character=24)

        # Fragment spread resolves into the file defining the fragment.
        (location,) = await processor.handle_definition_request(at(query, 0, 16))
        assert location.uri == uri(fragments)
        assert location.range == span(0, 0, 0, 25)

        # Local schemas never produce a generated artifact.
        assert not (tmp_path / "generated").exists()

        # The open fragments file is validated again after the schema changes.
        await processor.handle_did_open_or_save(
            lsp.DidOpenTextDocumentParams(
                text_document=lsp.TextDocumentItem(
                    uri=uri(fragments),
                    language_id="graphql",
                    version=1,
                    text="fragment B on Foo { bar }",
                )
            )
        )
        write(
            schema,
            "type Query { foo: Foo, test: Test }\n\n"
            " type Test { test: String }\n\n\n\n\n"
            "type Foo { bad: Int }",
        )
        results = await processor.handle_watched_files_changed(changed(schema))

        (project,) = list(processor.graphql_cache)
        assert "Test" in project.type_definitions
        assert project.type_definitions["Foo"].range.end == lsp.Position(line=7, character=21)
        (result,) = [r for r in results if r.uri == uri(fragments)]
        assert result.diagnostics[0].message.startswith(
            'Cannot query field "bar" on type "Foo".'
        )

        # Once closed, the file on disk is authoritative for fragments.
        await processor.handle_did_close(
            lsp.DidCloseTextDocumentParams(
                text_document=lsp.TextDocumentIdentifier(uri=uri(fragments))
            )
        )
        write(fragments, "fragment A on Foo { bar }\n\nfragment B on Test { test }")
        await processor.handle_watched_files_changed(changed(fragments))

        assert set(project.fragment_definitions) == {"A", "B"}
        (location,) = await processor.handle_definition_request(at(query, 0, 16))
        assert location.uri == uri(fragments)
        assert location.range == span(2, 0, 2, 27)

    @pytest.mark.asyncio
    async def test_recovers_once_config_is_written(
        self, server_config: ServerConfig, project_root: Path
    ) -> None:
        """Test a server started without config initializes when one is saved."""
        processor = MessageProcessor(server_config)
        await processor.handle_initialize_request(initialize_params(project_root))
        assert not processor.is_initialized
        assert processor.is_graphql_config_missing

        write(project_root / "schema.graphql", "type Query { hello: String }")
        config = write(
            project_root / "graphql.config.json",
            json.dumps({"schema": "./schema.graphql"}),
        )
        await processor.handle_did_open_or_save(
            lsp.DidSaveTextDocumentParams(
                text_document=lsp.TextDocumentIdentifier(uri=uri(config))
            )
        )

        assert processor.is_initialized
        assert not processor.is_graphql_config_missing
        schema = processor.graphql_cache.get_schema()
        assert schema is not None
        assert schema.schema.query_type is not None


class TestRemoteSchemaProject:
    """A project whose schema is introspected from an endpoint."""

    @pytest.mark.asyncio
    async def test_remote_schema(
        self, server_config: ServerConfig, project_root: Path, tmp_path: Path
    ) -> None:
        """Test introspection, artifact generation, diagnostics, hover and definitions."""
        requests: list[httpx.Request] = []
        introspection = dict(introspection_from_schema(build_schema(RICK_AND_MORTY_SDL)))

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"data": introspection})

        fetcher = HttpSchemaFetcher(transport=httpx.MockTransport(handler))
        query = write(project_root / "query.graphql", "query { episodes { results { id } } }")
        fragments = write(
            project_root / "fragments.graphql",
            "fragment Ep on Episode {\n  created\n}",
        )
        write(
            project_root / "graphql.config.json",
            json.dumps(
                {
                    "schema": "https://rickandmortyapi.com/graphql",
                    "documents": "./**.graphql",
                }
            ),
        )

        processor = MessageProcessor(server_config, schema_fetcher=fetcher)
        await processor.handle_initialize_request(initialize_params(project_root))

        assert processor.is_initialized
        assert len(requests) == 1
        artifacts = list((tmp_path / "generated").rglob("*.graphql"))
        assert len(artifacts) == 1
        assert len(artifacts[0].read_text(encoding="utf-8").splitlines()) > 10

        text = "query { episodes { results { ...Ep, nop } }  }"
        await processor.handle_did_open_or_save(
            lsp.DidOpenTextDocumentParams(
                text_document=lsp.TextDocumentItem(
                    uri=uri(query),
                    language_id="graphql",
                    version=1,
                    text="query { episodes { results { id } } }",
                )
            )
        )
        result = await processor.handle_did_change(
            lsp.DidChangeTextDocumentParams(
                text_document=lsp.VersionedTextDocumentIdentifier(uri=uri(query), version=2),
                content_changes=[lsp.TextDocumentContentChangeWholeDocument(text=text)],
            )
        )

        assert result is not None
        assert result.version == 2
        assert result.diagnostics[0].message == 'Cannot query field "nop" on type "Episode".'

        hover = await processor.handle_hover_request(at(query, 0, 10))
        assert isinstance(hover.contents, lsp.MarkupContent)
        assert "Get the list of all episodes" in hover.contents.value

        (location,) = await processor.handle_definition_request(at(query, 0, 33))
        assert location.uri == uri(fragments)
        assert location.range == span(0, 0, 2, 1)

        # Remote schemas are fetched again only on an explicit refresh.
        await processor.handle_watched_files_changed(changed(fragments))
        assert len(requests) == 1
        await processor.refresh_schema()
        assert len(requests) == 2
