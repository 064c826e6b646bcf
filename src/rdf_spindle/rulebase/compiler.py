"""
Rulebase Compiler.

Turns a rulebase expressed in the spindle rule vocabulary into a RuleStore.

Key design decisions:
- Each statement is dispatched on its predicate through a closed
  KnownPredicate enum; anything else is ignored
- Class, property and match nodes are scanned through a subject index
  built once per statement batch
- Per-statement problems (bad flag literals, unknown match types) are
  logged and skipped; only RuleResult.FAILED aborts the compile
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Mapping, Optional, Union

from rdflib import Graph

from rdf_spindle.coref import DEFAULT_MATCH_TYPES, MatchStrategy
from rdf_spindle.errors import RulebaseError
from rdf_spindle.rulebase.store import DEFAULT_SCORE, ExpectedKind, PredicateRule, RuleResult, RuleStore
from rdf_spindle.terms import Statement, StatementIndex, Term, statements_from_graph
from rdf_spindle.vocab import (
    OLO_INDEX,
    RDF_TYPE,
    RDFS_DOMAIN,
    RDFS_LITERAL,
    RDFS_RESOURCE,
    SPINDLE_CLASS,
    SPINDLE_COREF,
    SPINDLE_EXPECT,
    SPINDLE_EXPECT_TYPE,
    SPINDLE_EXPRESSED_AS,
    SPINDLE_INDEXED,
    SPINDLE_INVERSE,
    SPINDLE_INVERSE_PROPERTY,
    SPINDLE_PROMINENCE,
    SPINDLE_PROPERTY,
    SPINDLE_PROPERTY_MATCH,
    SPINDLE_PROXY_ONLY,
    XSD_BOOLEAN,
)

logger = logging.getLogger(__name__)

BUILTIN_SOURCE = "*builtin*"


class KnownPredicate(str, Enum):
    """Predicates which trigger a compiler rule."""
    TYPE = RDF_TYPE
    EXPRESSED_AS = SPINDLE_EXPRESSED_AS
    PROPERTY = SPINDLE_PROPERTY_MATCH
    INVERSE_PROPERTY = SPINDLE_INVERSE_PROPERTY
    COREF = SPINDLE_COREF
    OTHER = ""

    @classmethod
    def of(cls, uri: str) -> "KnownPredicate":
        try:
            return cls(uri)
        except ValueError:
            return cls.OTHER


# =============================================================================
# Literal Values
# =============================================================================

def int_value(term: Term) -> Optional[int]:
    """The integer value of a literal, or None if it is not one."""
    if not term.is_literal:
        return None
    try:
        return int(term.value.strip())
    except ValueError:
        return None


def bool_value(term: Term) -> Optional[bool]:
    """
    The value of an xsd:boolean literal, or None for any other term.

    Only the lexical form "true" is true; every other xsd:boolean is false.
    """
    if not term.is_literal or term.datatype != XSD_BOOLEAN:
        return None
    return term.value == "true"


# =============================================================================
# Compiler
# =============================================================================

class RuleCompiler:
    """
    Populates a RuleStore from rulebase statements.

    Example:
        compiler = RuleCompiler()
        compiler.add_file("rulebase.ttl")
        rules = compiler.finalize()
    """

    def __init__(
        self,
        store: Optional[RuleStore] = None,
        match_types: Optional[Mapping[str, MatchStrategy]] = None,
    ):
        self.store = store if store is not None else RuleStore()
        if match_types is not None:
            self.store.set_match_types(match_types)
        self._index: Optional[StatementIndex] = None
        self._handlers: Dict[KnownPredicate, Callable[[Statement], RuleResult]] = {
            KnownPredicate.TYPE: self._add_instance,
            KnownPredicate.EXPRESSED_AS: self._add_class_match,
            KnownPredicate.PROPERTY: self._add_property_match,
            KnownPredicate.INVERSE_PROPERTY: self._add_property_match,
            KnownPredicate.COREF: self._add_coref,
        }

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def add_statements(self, statements: Iterable[Statement], source: Optional[str] = None) -> int:
        """
        Compile a finite sequence of statements.

        Returns the number of statements which added or updated a rule.

        Raises:
            RulebaseError: if a statement could not be compiled
        """
        source = source or BUILTIN_SOURCE
        self._index = StatementIndex(statements)
        added = 0
        try:
            for st in self._index:
                result = self.add_statement(st)
                if result == RuleResult.FAILED:
                    raise RulebaseError(f"Failed to compile rulebase {source} at: {st}")
                if result == RuleResult.ADDED:
                    added += 1
        finally:
            self._index = None
        logger.debug(f"Compiled {added} rules from {source}")
        return added

    def add_graph(self, graph: Graph, source: Optional[str] = None) -> int:
        """Compile every triple of an rdflib graph."""
        return self.add_statements(statements_from_graph(graph), source)

    def add_turtle(self, text: str, source: Optional[str] = None) -> int:
        """Parse a Turtle document and compile it."""
        source = source or BUILTIN_SOURCE
        graph = Graph()
        try:
            graph.parse(data=text, format="turtle")
        except Exception as e:
            logger.critical(f"Failed to parse rulebase {source} as text/turtle: {e}")
            raise RulebaseError(f"Failed to parse rulebase {source}: {e}") from e
        return self.add_graph(graph, source)

    def add_file(self, path: Union[str, Path]) -> int:
        """Read a Turtle rulebase file and compile it."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.critical(f"Failed to open rulebase {path}: {e}")
            raise RulebaseError(f"Failed to open rulebase {path}: {e}") from e
        return self.add_turtle(text, str(path))

    def add_config(self, config) -> int:
        """Compile every rulebase file named by a SpindleConfig."""
        if not config.rulebase_paths:
            logger.info("No rulebase configured; using an empty rulebase")
            return 0
        return sum(self.add_file(path) for path in config.rulebase_paths)

    def finalize(self) -> RuleStore:
        """Finalize and return the store."""
        store = self.store.finalize()
        store.dump()
        return store

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def add_statement(self, statement: Statement) -> RuleResult:
        """
        Compile a single statement.

        Node scans only see the batch currently being compiled by
        add_statements(); called on its own, only the statement itself counts.
        """
        if not (statement.subject.is_iri and statement.predicate.is_iri):
            return RuleResult.SKIPPED
        handler = self._handlers.get(KnownPredicate.of(statement.predicate.value))
        if handler is None:
            return RuleResult.SKIPPED
        try:
            return handler(statement)
        except MemoryError:
            logger.critical(f"Out of memory while compiling {statement}")
            return RuleResult.FAILED

    def _about(self, node: Term, predicate: Optional[str] = None) -> Iterable[Statement]:
        if self._index is None:
            return []
        return self._index.about(node, predicate)

    # ex:Class a spindle:Class ; ex:prop a spindle:Property
    def _add_instance(self, st: Statement) -> RuleResult:
        if not st.object.is_iri:
            return RuleResult.SKIPPED
        if st.object.value == SPINDLE_CLASS:
            return self._add_class_node(st.subject)
        if st.object.value == SPINDLE_PROPERTY:
            return self._add_property_node(st.subject)
        return RuleResult.SKIPPED

    def _add_class_node(self, node: Term) -> RuleResult:
        rule = self.store.add_class(node.value)
        for st in self._about(node):
            if not st.predicate.is_iri:
                continue
            if st.predicate.value == OLO_INDEX:
                score = int_value(st.object)
                if score is not None and score > 0:
                    rule.score = score
            elif st.predicate.value == SPINDLE_PROMINENCE:
                prominence = int_value(st.object)
                if prominence:
                    rule.prominence = prominence
        return RuleResult.ADDED

    def _add_property_node(self, node: Term) -> RuleResult:
        rule = self.store.add_predicate(node.value)
        for st in self._about(node):
            if not st.predicate.is_iri:
                continue
            setter = _PROPERTY_SETTERS.get(st.predicate.value)
            if setter is not None:
                setter(rule, st.object)
        return RuleResult.ADDED

    # ex:Alias spindle:expressedAs ex:Class
    def _add_class_match(self, st: Statement) -> RuleResult:
        if not st.object.is_iri:
            return RuleResult.SKIPPED
        prominence = 0
        for pst in self._about(st.subject, SPINDLE_PROMINENCE):
            value = int_value(pst.object)
            if value is not None:
                prominence = value
                break
        self.store.add_class_alias(st.object.value, st.subject.value, prominence)
        return RuleResult.ADDED

    # ex:source spindle:property [ spindle:expressedAs ex:target ; ... ]
    def _add_property_match(self, st: Statement) -> RuleResult:
        if st.object.is_literal:
            return RuleResult.SKIPPED
        inverse = st.predicate.value == SPINDLE_INVERSE_PROPERTY
        source = st.subject.value
        priority = DEFAULT_SCORE
        prominence = 0
        has_domain = False
        rule: Optional[PredicateRule] = None
        for mst in self._about(st.object):
            if not mst.predicate.is_iri:
                continue
            pred = mst.predicate.value
            if pred == RDFS_DOMAIN:
                has_domain = True
            elif pred == OLO_INDEX:
                value = int_value(mst.object)
                if value is not None and value >= 0:
                    priority = value
            elif pred == SPINDLE_PROMINENCE:
                value = int_value(mst.object)
                if value:
                    prominence = value
            elif pred == SPINDLE_EXPRESSED_AS and mst.object.is_iri:
                rule = self.store.add_predicate(mst.object.value)
        if rule is None:
            return RuleResult.SKIPPED
        self.store.add_cached_predicate(source)
        if not has_domain:
            rule.add_match(source, None, priority, prominence, inverse)
            return RuleResult.ADDED
        for dst in self._about(st.object, RDFS_DOMAIN):
            if dst.object.is_iri:
                rule.add_match(source, dst.object.value, priority, prominence, inverse)
        return RuleResult.ADDED

    # ex:source spindle:coref spindle:resourceMatch
    def _add_coref(self, st: Statement) -> RuleResult:
        if self.store.match_types is None:
            return RuleResult.SKIPPED
        if not st.object.is_iri:
            logger.error(f"Co-reference match type for <{st.subject.value}> is not a resource")
            return RuleResult.SKIPPED
        return self.store.add_coref(st.subject.value, st.object.value)


# =============================================================================
# Property Setters
# =============================================================================

def _set_score(rule: PredicateRule, value: Term) -> None:
    score = int_value(value)
    if score is not None and score > 0:
        rule.score = score


def _set_prominence(rule: PredicateRule, value: Term) -> None:
    prominence = int_value(value)
    if prominence:
        rule.prominence = prominence


def _set_expect(rule: PredicateRule, value: Term) -> None:
    if not value.is_iri:
        return
    if value.value == RDFS_LITERAL:
        rule.expected = ExpectedKind.LITERAL
    elif value.value == RDFS_RESOURCE:
        rule.expected = ExpectedKind.URI
    else:
        logger.warning(f"Unexpected spindle:expect value <{value.value}> for <{rule.target}>")


def _set_expect_type(rule: PredicateRule, value: Term) -> None:
    if value.is_iri:
        rule.datatype = value.value


def _flag_setter(attr: str) -> Callable[[PredicateRule, Term], None]:
    def setter(rule: PredicateRule, value: Term) -> None:
        flag = bool_value(value)
        if flag is None:
            logger.warning(f"Ignoring non-xsd:boolean {attr} value {value} for <{rule.target}>")
            return
        setattr(rule, attr, flag)
    return setter


_PROPERTY_SETTERS: Dict[str, Callable[[PredicateRule, Term], None]] = {
    OLO_INDEX: _set_score,
    SPINDLE_PROMINENCE: _set_prominence,
    SPINDLE_EXPECT: _set_expect,
    SPINDLE_EXPECT_TYPE: _set_expect_type,
    SPINDLE_PROXY_ONLY: _flag_setter("proxy_only"),
    SPINDLE_INDEXED: _flag_setter("indexed"),
    SPINDLE_INVERSE: _flag_setter("inverse"),
}


def build_rulebase(
    config=None,
    match_types: Optional[Mapping[str, MatchStrategy]] = DEFAULT_MATCH_TYPES,
) -> RuleStore:
    """
    Compile the rulebase files named by a SpindleConfig into a finalized store.

    Without a config (or with no rulebase files) the result is an empty,
    valid store holding only the seeded cached predicates.
    """
    compiler = RuleCompiler(match_types=match_types)
    if config is not None:
        compiler.add_config(config)
    return compiler.finalize()
