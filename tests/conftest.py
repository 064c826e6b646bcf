"""Shared rulebase fixtures."""
import pytest

from rdf_spindle.aggregate import Aggregator
from rdf_spindle.config import SpindleConfig
from rdf_spindle.coref import DEFAULT_MATCH_TYPES
from rdf_spindle.rulebase import RuleCompiler


RULEBASE_TTL = """
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
@prefix olo: <http://purl.org/ontology/olo/core#> .
@prefix spindle: <http://bbcarchdev.github.io/ns/spindle#> .
@prefix geo: <http://www.w3.org/2003/01/geo/wgs84_pos#> .
@prefix dct: <http://purl.org/dc/terms/> .
@prefix foaf: <http://xmlns.com/foaf/0.1/> .
@prefix ex: <http://example.com/ns#> .

# Classes

ex:Person a spindle:Class ;
    olo:index 50 .

ex:Human spindle:expressedAs ex:Person .

foaf:Person spindle:expressedAs ex:Person ;
    spindle:prominence 5 .

ex:Thing a spindle:Class ;
    olo:index 500 .

ex:Place a spindle:Class ;
    olo:index 20 ;
    spindle:prominence 3 .

geo:SpatialThing spindle:expressedAs ex:Place .

# Labels and descriptions

rdfs:label a spindle:Property ;
    olo:index 1 ;
    spindle:expect rdfs:Literal ;
    spindle:indexed true .

ex:name spindle:property [
    spindle:expressedAs rdfs:label ;
    olo:index 0
] .

ex:fullName spindle:property [
    spindle:expressedAs rdfs:label ;
    olo:index 10 ;
    spindle:prominence 2
] .

dct:description a spindle:Property ;
    olo:index 2 ;
    spindle:expect rdfs:Literal .

ex:summary spindle:property [
    spindle:expressedAs dct:description ;
    olo:index 5
] .

# Geography

geo:lat a spindle:Property ;
    spindle:expect rdfs:Literal ;
    spindle:expectType xsd:decimal .

ex:latitude spindle:property [
    spindle:expressedAs geo:lat ;
    olo:index 1
] .

geo:long a spindle:Property ;
    spindle:expect rdfs:Literal ;
    spindle:expectType xsd:decimal .

ex:longitude spindle:property [
    spindle:expressedAs geo:long ;
    olo:index 1
] .

# Resources

foaf:depiction a spindle:Property ;
    spindle:expect rdfs:Resource .

ex:image spindle:property [
    spindle:expressedAs foaf:depiction ;
    olo:index 0 ;
    spindle:prominence 4
] .

ex:knows a spindle:Property ;
    spindle:expect rdfs:Resource ;
    spindle:proxyOnly true .

foaf:knows spindle:property [
    spindle:expressedAs ex:knows ;
    olo:index 5
] .

ex:homepage a spindle:Property ;
    spindle:expect rdfs:Resource .

foaf:homepage spindle:property [
    spindle:expressedAs ex:homepage ;
    olo:index 20
] .

foaf:page spindle:property [
    spindle:expressedAs ex:homepage ;
    olo:index 10 ;
    rdfs:domain ex:Person
] .

ex:partOf a spindle:Property ;
    spindle:expect rdfs:Resource ;
    spindle:inverse true .

ex:hasPart spindle:inverseProperty [
    spindle:expressedAs ex:partOf ;
    olo:index 5
] .

# Co-reference

owl:sameAs spindle:coref spindle:resourceMatch .
foaf:isPrimaryTopicOf spindle:coref spindle:wikipediaMatch .
"""


@pytest.fixture
def rulebase_ttl():
    return RULEBASE_TTL


@pytest.fixture
def rulebase_file(tmp_path):
    path = tmp_path / "rulebase.ttl"
    path.write_text(RULEBASE_TTL, encoding="utf-8")
    return path


@pytest.fixture
def rules():
    """The sample rulebase, compiled and finalized."""
    compiler = RuleCompiler(match_types=DEFAULT_MATCH_TYPES)
    compiler.add_turtle(RULEBASE_TTL)
    return compiler.finalize()


@pytest.fixture
def config():
    return SpindleConfig(root="http://proxy.example/")


@pytest.fixture
def aggregator(rules, config):
    return Aggregator(rules, config)
