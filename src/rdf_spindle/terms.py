"""
RDF Terms and Statements.

Value types for the RDF terms handled by the rulebase compiler and the
aggregation engine.

Key design decisions:
- Terms are frozen and hashable so they can key dicts and sets directly
- IRI identity is plain string equality; prefix tests are explicit
- rdflib is only touched at the edges (parsing rulebases and source graphs)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, Iterator, List, Optional

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.term import Node


# =============================================================================
# Term Representation
# =============================================================================

class TermKind(IntEnum):
    """RDF term kind enumeration."""
    IRI = 0
    LITERAL = 1
    BNODE = 2


@dataclass(frozen=True, slots=True)
class Term:
    """
    A single RDF term.

    Attributes:
        kind: The type of term (IRI, LITERAL, BNODE)
        value: IRI string, literal lexical form or blank node label
        datatype: Datatype IRI (typed literals only)
        lang: Language tag (language-tagged literals only)
    """
    kind: TermKind
    value: str
    datatype: Optional[str] = None
    lang: Optional[str] = None

    @classmethod
    def iri(cls, value: str) -> "Term":
        """Create an IRI term."""
        return cls(kind=TermKind.IRI, value=value)

    @classmethod
    def literal(
        cls,
        value: str,
        datatype: Optional[str] = None,
        lang: Optional[str] = None,
    ) -> "Term":
        """Create a literal term."""
        return cls(kind=TermKind.LITERAL, value=value, datatype=datatype, lang=lang)

    @classmethod
    def bnode(cls, label: str) -> "Term":
        """Create a blank node term."""
        return cls(kind=TermKind.BNODE, value=label)

    @property
    def is_iri(self) -> bool:
        return self.kind == TermKind.IRI

    @property
    def is_literal(self) -> bool:
        return self.kind == TermKind.LITERAL

    @property
    def is_bnode(self) -> bool:
        return self.kind == TermKind.BNODE

    def startswith(self, prefix: str) -> bool:
        """True if this is an IRI whose string form begins with prefix."""
        return self.kind == TermKind.IRI and self.value.startswith(prefix)

    def with_datatype(self, datatype: str) -> "Term":
        """Return this literal re-typed to datatype (dropping any language)."""
        return Term(kind=TermKind.LITERAL, value=self.value, datatype=datatype)

    def __str__(self) -> str:
        if self.kind == TermKind.IRI:
            return f"<{self.value}>"
        if self.kind == TermKind.BNODE:
            return f"_:{self.value}"
        if self.lang:
            return f'"{self.value}"@{self.lang}'
        if self.datatype:
            return f'"{self.value}"^^<{self.datatype}>'
        return f'"{self.value}"'


@dataclass(frozen=True, slots=True)
class Statement:
    """A (subject, predicate, object) triple."""
    subject: Term
    predicate: Term
    object: Term

    @classmethod
    def of(cls, subject: str, predicate: str, obj: Term) -> "Statement":
        """Shorthand for a statement with IRI subject and predicate."""
        return cls(Term.iri(subject), Term.iri(predicate), obj)

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."


# =============================================================================
# rdflib Conversion
# =============================================================================

def from_rdflib(node: Node) -> Term:
    """Convert an rdflib node to a Term."""
    if isinstance(node, URIRef):
        return Term.iri(str(node))
    if isinstance(node, BNode):
        return Term.bnode(str(node))
    if isinstance(node, Literal):
        return Term.literal(
            str(node),
            datatype=str(node.datatype) if node.datatype is not None else None,
            lang=node.language,
        )
    raise TypeError(f"Unsupported rdflib node type: {type(node).__name__}")


def to_rdflib(term: Term) -> Node:
    """Convert a Term to an rdflib node."""
    if term.kind == TermKind.IRI:
        return URIRef(term.value)
    if term.kind == TermKind.BNODE:
        return BNode(term.value)
    if term.lang:
        return Literal(term.value, lang=term.lang)
    if term.datatype:
        return Literal(term.value, datatype=URIRef(term.datatype))
    return Literal(term.value)


def statements_from_graph(graph: Graph) -> Iterator[Statement]:
    """Yield every triple of an rdflib graph as a Statement."""
    for s, p, o in graph:
        yield Statement(from_rdflib(s), from_rdflib(p), from_rdflib(o))


def statements_to_graph(statements: Iterable[Statement], graph: Optional[Graph] = None) -> Graph:
    """Add statements to an rdflib graph (a new one if none is given)."""
    if graph is None:
        graph = Graph()
    for st in statements:
        graph.add((to_rdflib(st.subject), to_rdflib(st.predicate), to_rdflib(st.object)))
    return graph


# =============================================================================
# Statement Index
# =============================================================================

class StatementIndex:
    """
    Subject-keyed index over a finite statement sequence.

    The rulebase compiler scans "all statements about node X" for every
    class, property and match node it meets; this keeps those scans cheap.
    """

    def __init__(self, statements: Iterable[Statement]):
        self._statements: List[Statement] = list(statements)
        self._by_subject: Dict[Term, List[Statement]] = {}
        for st in self._statements:
            self._by_subject.setdefault(st.subject, []).append(st)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self._statements)

    def __len__(self) -> int:
        return len(self._statements)

    def about(self, subject: Term, predicate: Optional[str] = None) -> List[Statement]:
        """Statements whose subject is subject, optionally filtered by predicate IRI."""
        found = self._by_subject.get(subject, [])
        if predicate is None:
            return list(found)
        return [st for st in found if st.predicate.kind == TermKind.IRI and st.predicate.value == predicate]
