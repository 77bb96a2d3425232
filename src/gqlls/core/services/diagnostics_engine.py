"""Validation of cached documents against the project schema."""

import logging
import re
from collections.abc import Mapping, Sequence

from graphql import (
    ASTValidationRule,
    DocumentNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLError,
    GraphQLSchema,
    GraphQLSyntaxError,
    Location,
    NoUnusedFragmentsRule,
    Node,
    VariableDefinitionNode,
    specified_rules,
    validate,
)
from graphql.language import Visitor, visit
from lsprotocol import types as lsp

from gqlls.core.entities.cached_document import CachedDocument, OperationUnit
from gqlls.core.entities.definitions import FragmentDefinitionEntry
from gqlls.core.entities.schema_state import SchemaState
from gqlls.utils.positions import (
    location_to_range,
    position_to_offset,
    shift_position,
)

logger = logging.getLogger(__name__)

SYNTAX_SOURCE = "GraphQL: Syntax"
VALIDATION_SOURCE = "GraphQL: Validation"

# Fragments are routinely declared in one file and spread in another.
DEFAULT_RULES: tuple[type[ASTValidationRule], ...] = tuple(
    rule for rule in specified_rules if rule is not NoUnusedFragmentsRule
)


class _SpreadCollector(Visitor):
    def __init__(self) -> None:
        super().__init__()
        self.names: list[str] = []

    def enter_fragment_spread(self, node: FragmentSpreadNode, *_args: object) -> None:
        self.names.append(node.name.value)


def _spread_names(node: Node) -> list[str]:
    collector = _SpreadCollector()
    visit(node, collector)
    return collector.names


def _highlight(node: Node) -> Location | None:
    if isinstance(node, VariableDefinitionNode) and node.variable.loc is not None:
        return node.variable.loc
    name = getattr(node, "name", None)
    if isinstance(name, Node) and name.loc is not None:
        return name.loc
    return node.loc


_QUOTED = re.compile(r"'([^'\n]*)'")


def _message(error: GraphQLError) -> str:
    # graphql-js style quoting
    return _QUOTED.sub(r'"\1"', error.message)


def _is_name_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class DiagnosticsEngine:
    """Turns parse and validation errors into protocol diagnostics.

    Each unit of a document is checked on its own: a unit that failed to
    parse yields a single syntax diagnostic, the others are validated
    against the schema together with the fragments they pull in from
    other files.
    """

    def __init__(self, rules: Sequence[type[ASTValidationRule]] | None = None) -> None:
        """Initialize the engine.

        Args:
            rules: Validation rules. Defaults to the specified rules minus
                NoUnusedFragmentsRule.
        """
        self._rules = tuple(rules) if rules is not None else DEFAULT_RULES

    def validate(
        self,
        document: CachedDocument,
        schema_state: SchemaState | None,
        fragment_definitions: Mapping[str, FragmentDefinitionEntry],
        syntax_only: bool = False,
    ) -> list[lsp.Diagnostic]:
        """Validate every unit of a document.

        Args:
            document: The cached document.
            schema_state: The project's schema; None skips schema validation.
            fragment_definitions: Project fragments, keyed by name.
            syntax_only: Only report parse errors (used for schema files).

        Returns:
            The diagnostics; an empty list when the document has no problems.
        """
        diagnostics: list[lsp.Diagnostic] = []
        for unit in document.contents:
            if unit.error is not None:
                diagnostics.append(self._syntax_diagnostic(unit, unit.error))
                continue
            if syntax_only or schema_state is None or unit.document is None:
                continue
            diagnostics.extend(
                self._validate_unit(
                    unit, unit.document, schema_state.schema, fragment_definitions
                )
            )
        return diagnostics

    def _validate_unit(
        self,
        unit: OperationUnit,
        parsed: DocumentNode,
        schema: GraphQLSchema,
        fragment_definitions: Mapping[str, FragmentDefinitionEntry],
    ) -> list[lsp.Diagnostic]:
        external = self._external_fragments(parsed, fragment_definitions)
        document = DocumentNode(
            definitions=tuple(parsed.definitions) + tuple(external),
            loc=parsed.loc,
        )

        try:
            errors = validate(schema, document, self._rules)
        except TypeError as e:
            # The schema itself is invalid; schema files report that.
            logger.debug("Skipping validation against invalid schema: %s", e)
            return []

        source = parsed.loc.source if parsed.loc is not None else None
        diagnostics = []
        for error in errors:
            diagnostic = self._validation_diagnostic(unit, error, source)
            if diagnostic is not None:
                diagnostics.append(diagnostic)
        return diagnostics

    @staticmethod
    def _external_fragments(
        document: DocumentNode,
        fragment_definitions: Mapping[str, FragmentDefinitionEntry],
    ) -> list[FragmentDefinitionNode]:
        """Fragments spread (transitively) by ``document`` but defined elsewhere."""
        local = {
            definition.name.value
            for definition in document.definitions
            if isinstance(definition, FragmentDefinitionNode)
        }
        pending = _spread_names(document)
        seen: set[str] = set(local)
        external: list[FragmentDefinitionNode] = []
        while pending:
            name = pending.pop()
            if name in seen:
                continue
            seen.add(name)
            entry = fragment_definitions.get(name)
            if entry is None:
                continue
            external.append(entry.definition)
            pending.extend(_spread_names(entry.definition))
        return external

    @staticmethod
    def _syntax_diagnostic(unit: OperationUnit, error: GraphQLSyntaxError) -> lsp.Diagnostic:
        if error.locations:
            location = error.locations[0]
            local = lsp.Position(line=location.line - 1, character=location.column - 1)
        else:
            local = lsp.Position(line=0, character=0)

        # Highlight the offending token, or a single character.
        start = position_to_offset(unit.query, local)
        end = start
        while end < len(unit.query) and _is_name_char(unit.query[end]):
            end += 1
        end = max(end, min(start + 1, len(unit.query)))

        start_pos = shift_position(unit.range.start, local)
        end_pos = shift_position(
            unit.range.start,
            lsp.Position(line=local.line, character=local.character + (end - start)),
        )
        return lsp.Diagnostic(
            range=lsp.Range(start=start_pos, end=end_pos),
            message=_message(error),
            severity=lsp.DiagnosticSeverity.Error,
            source=SYNTAX_SOURCE,
        )

    @staticmethod
    def _validation_diagnostic(
        unit: OperationUnit,
        error: GraphQLError,
        source: object,
    ) -> lsp.Diagnostic | None:
        locations = [
            loc
            for loc in map(_highlight, error.nodes or ())
            if loc is not None and loc.source is source
        ]
        if locations:
            rng = location_to_range(locations[0], unit.range.start)
        elif error.nodes:
            # Entirely inside a fragment from another file.
            return None
        else:
            rng = lsp.Range(start=unit.range.start, end=unit.range.start)

        return lsp.Diagnostic(
            range=rng,
            message=_message(error),
            severity=lsp.DiagnosticSeverity.Error,
            source=VALIDATION_SOURCE,
        )
