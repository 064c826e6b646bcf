"""Tests for RDF terms, statements and rdflib conversion."""
import pytest
from rdflib import BNode, Graph, Literal, URIRef

from rdf_spindle.terms import (
    Statement,
    StatementIndex,
    Term,
    TermKind,
    from_rdflib,
    statements_from_graph,
    statements_to_graph,
    to_rdflib,
)
from rdf_spindle.vocab import RDF_TYPE, RDFS_LABEL, XSD_DECIMAL, XSD_INTEGER_TYPES, XSD_NS

EX = "http://example.com/ns#"


# ========== Term Tests ==========

class TestTerm:
    def test_constructors(self):
        assert Term.iri(EX + "a").kind == TermKind.IRI
        assert Term.literal("x").kind == TermKind.LITERAL
        assert Term.bnode("b0").kind == TermKind.BNODE

    def test_kind_predicates(self):
        assert Term.iri(EX + "a").is_iri
        assert Term.literal("x").is_literal
        assert Term.bnode("b0").is_bnode
        assert not Term.literal("x").is_iri

    def test_hashable_and_equal_by_value(self):
        assert Term.iri(EX + "a") == Term.iri(EX + "a")
        assert len({Term.literal("x", lang="en"), Term.literal("x", lang="en")}) == 1
        assert Term.literal("x", lang="en") != Term.literal("x", lang="fr")

    def test_startswith_only_for_iris(self):
        assert Term.iri(EX + "thing").startswith(EX)
        assert not Term.literal(EX + "thing").startswith(EX)

    def test_with_datatype_drops_language(self):
        term = Term.literal("1.5", lang="en").with_datatype(XSD_DECIMAL)
        assert term.datatype == XSD_DECIMAL
        assert term.lang is None
        assert term.value == "1.5"

    def test_str(self):
        assert str(Term.iri(EX + "a")) == f"<{EX}a>"
        assert str(Term.bnode("b0")) == "_:b0"
        assert str(Term.literal("x", lang="en")) == '"x"@en'
        assert str(Term.literal("1", datatype=XSD_DECIMAL)) == f'"1"^^<{XSD_DECIMAL}>'
        assert str(Term.literal("x")) == '"x"'

    def test_statement_of(self):
        st = Statement.of(EX + "s", RDFS_LABEL, Term.literal("x"))
        assert st.subject == Term.iri(EX + "s")
        assert st.predicate == Term.iri(RDFS_LABEL)
        assert str(st).endswith(" .")


# ========== rdflib Conversion Tests ==========

class TestRdflibConversion:
    def test_from_rdflib(self):
        assert from_rdflib(URIRef(EX + "a")) == Term.iri(EX + "a")
        assert from_rdflib(BNode("b1")) == Term.bnode("b1")
        assert from_rdflib(Literal("x", lang="en")) == Term.literal("x", lang="en")
        assert from_rdflib(Literal("5", datatype=URIRef(XSD_NS + "integer"))) == Term.literal(
            "5", datatype=XSD_NS + "integer"
        )

    def test_from_rdflib_rejects_unknown_nodes(self):
        with pytest.raises(TypeError):
            from_rdflib("not a node")

    def test_to_rdflib(self):
        assert to_rdflib(Term.iri(EX + "a")) == URIRef(EX + "a")
        assert to_rdflib(Term.literal("x", lang="en")) == Literal("x", lang="en")
        assert to_rdflib(Term.literal("1.5", datatype=XSD_DECIMAL)) == Literal(
            "1.5", datatype=URIRef(XSD_DECIMAL)
        )

    def test_graph_round_trip(self):
        graph = Graph()
        graph.parse(data=f"""
            @prefix ex: <{EX}> .
            ex:a a ex:Thing ; ex:name "A"@en .
        """, format="turtle")
        statements = list(statements_from_graph(graph))
        assert len(statements) == 2
        assert Statement.of(EX + "a", RDF_TYPE, Term.iri(EX + "Thing")) in statements

        copy = statements_to_graph(statements)
        assert len(copy) == 2
        assert set(copy) == set(graph)


# ========== StatementIndex Tests ==========

class TestStatementIndex:
    def test_about(self):
        a, b = Term.iri(EX + "a"), Term.iri(EX + "b")
        statements = [
            Statement(a, Term.iri(RDF_TYPE), Term.iri(EX + "Thing")),
            Statement(a, Term.iri(RDFS_LABEL), Term.literal("A")),
            Statement(b, Term.iri(RDFS_LABEL), Term.literal("B")),
        ]
        index = StatementIndex(statements)
        assert len(index) == 3
        assert list(index) == statements
        assert len(index.about(a)) == 2
        assert index.about(a, RDFS_LABEL) == [statements[1]]
        assert index.about(Term.iri(EX + "c")) == []


class TestVocab:
    def test_integer_family(self):
        assert XSD_NS + "unsignedByte" in XSD_INTEGER_TYPES
        assert XSD_DECIMAL not in XSD_INTEGER_TYPES
        assert len(XSD_INTEGER_TYPES) == 13
