"""Splitting files into GraphQL operation units.

Plain GraphQL files are one unit. Host language files (JavaScript,
TypeScript, Python, ...) contribute one unit per embedded template:

    const query = gql`query { user { id } }`;
    const frag = /* GraphQL */ `fragment F on User { id }`;
    QUERY = gql(\"\"\"query { user { id } }\"\"\")
"""

import re
from pathlib import Path

from graphql import GraphQLSyntaxError, Source, parse

from gqlls.core.entities.cached_document import OperationUnit
from gqlls.core.entities.server_config import ServerConfig
from gqlls.utils.positions import offsets_to_range

_TEMPLATE_BODY = r"`((?:[^`\\]|\\.)*)`"

_JS_PATTERNS = (
    re.compile(r"\b(?:gql|graphql)\s*(?:<[^>`]*>)?\s*\(?\s*" + _TEMPLATE_BODY, re.DOTALL),
    re.compile(r"/\*\s*GraphQL\s*\*/\s*" + _TEMPLATE_BODY, re.DOTALL | re.IGNORECASE),
)

_PY_PATTERN = re.compile(r"\bgql\(\s*[rR]?(\"\"\"|''')(.*?)\1", re.DOTALL)

_INTERPOLATION = re.compile(r"\$\{[^}]*\}")


def _blank(match: re.Match[str]) -> str:
    return "".join(char if char == "\n" else " " for char in match.group(0))


def parse_unit(query: str, offset: int, file_text: str, source_name: str) -> OperationUnit:
    """Parse one unit of GraphQL text.

    A syntax error is stored on the unit instead of being raised, so one
    broken template does not hide its siblings.

    Args:
        query: The unit text.
        offset: Where the unit starts in ``file_text``.
        file_text: The full text of the enclosing file.
        source_name: Name attached to the parsed source (the document URI).

    Returns:
        The parsed unit.
    """
    rng = offsets_to_range(file_text, offset, offset + len(query))
    try:
        document = parse(Source(query, source_name))
    except GraphQLSyntaxError as error:
        return OperationUnit(query=query, range=rng, offset=offset, error=error)
    return OperationUnit(query=query, range=rng, offset=offset, document=document)


def find_embedded(text: str, suffix: str) -> list[tuple[int, str]]:
    """Locate GraphQL templates embedded in host language source.

    Args:
        text: The file text.
        suffix: The file extension, used to pick the host language.

    Returns:
        ``(offset, query)`` pairs in file order. Interpolations are blanked
        out with whitespace so offsets stay aligned with the file.
    """
    found: dict[int, str] = {}
    if suffix == ".py":
        for match in _PY_PATTERN.finditer(text):
            found[match.start(2)] = match.group(2)
    else:
        for pattern in _JS_PATTERNS:
            for match in pattern.finditer(text):
                found.setdefault(match.start(1), _INTERPOLATION.sub(_blank, match.group(1)))
    return sorted(found.items())


def split_document(text: str, uri: str, config: ServerConfig) -> tuple[OperationUnit, ...]:
    """Split a file into parsed operation units.

    Args:
        text: The file text.
        uri: The document URI; its extension selects the splitting mode.
        config: Server configuration listing the supported extensions.

    Returns:
        The units in file order. Blank files and host files without
        embedded GraphQL produce no units.
    """
    suffix = Path(uri).suffix.lower()
    if suffix in config.embedded_extensions:
        return tuple(
            parse_unit(query, offset, text, uri)
            for offset, query in find_embedded(text, suffix)
            if query.strip()
        )

    if not text.strip():
        return ()
    return (parse_unit(text, 0, text, uri),)

