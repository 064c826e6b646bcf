"""Tests for the aggregation REST API."""
import pytest
from fastapi.testclient import TestClient

from rdf_spindle import __version__
from rdf_spindle.errors import FusionError
from rdf_spindle.vocab import RDF_TYPE, RDFS_LABEL
from rdf_spindle.web import StatementModel, TermModel, create_app

EX = "http://example.com/ns#"
FOAF = "http://xmlns.com/foaf/0.1/"
XSD = "http://www.w3.org/2001/XMLSchema#"

PROXY = "http://proxy.example/things/abc#id"
ENTITY = "http://source.example/people/1"


@pytest.fixture
def client(aggregator):
    return TestClient(create_app(aggregator))


def request_body(*statements):
    return {"uri": PROXY, "refs": [ENTITY], "statements": list(statements)}


# ========== Model Tests ==========

class TestModels:
    def test_term_model(self):
        term = TermModel(type="literal", value="1.5", datatype=XSD + "decimal").to_term()
        assert term.is_literal
        assert term.datatype == XSD + "decimal"
        assert TermModel(value=EX + "a").to_term().is_iri

    def test_blank_subject(self):
        st = StatementModel(subject="_:b0", predicate=RDFS_LABEL, object={"type": "literal", "value": "x"})
        assert st.to_statement().subject.is_bnode


# ========== Rulebase Endpoint Tests ==========

class TestRulebaseEndpoints:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}

    def test_rules(self, client):
        response = client.get("/spindle/rules")
        assert response.status_code == 200
        data = response.json()
        assert data["classes"][0]["uri"] == EX + "Place"
        assert data["predicates"][0]["target"] == RDFS_LABEL

    def test_cached_predicates(self, client):
        data = client.get("/spindle/rules/cached-predicates").json()
        assert data["count"] == len(data["predicates"])
        assert RDF_TYPE in data["predicates"]

    def test_class_table(self, client):
        rows = client.get("/spindle/rules/classes").json()["rows"]
        assert rows[0]["class"] == EX + "Place"
        assert {"class", "score", "prominence", "alias", "alias_prominence"} == set(rows[0])

    def test_predicate_table(self, client):
        rows = client.get("/spindle/rules/predicates").json()["rows"]
        assert any(row["predicate"] == EX + "name" and row["priority"] == 0 for row in rows)


# ========== Aggregation Endpoint Tests ==========

class TestAggregateEndpoint:
    def test_aggregate(self, client):
        response = client.post("/spindle/aggregate", json=request_body(
            {"subject": ENTITY, "predicate": RDF_TYPE, "object": {"value": FOAF + "Person"}},
            {"subject": ENTITY, "predicate": EX + "fullName",
             "object": {"type": "literal", "value": "Ann", "lang": "en"}},
            {"subject": ENTITY, "predicate": EX + "image", "object": {"value": "http://img.example/a.jpg"}},
        ))
        assert response.status_code == 200
        data = response.json()
        assert data["class"] == EX + "Person"
        assert data["score"] == 39
        assert data["title_en"] == "Ann"
        assert data["graph"] == "http://proxy.example/"
        assert data["geo"] is None
        assert all(st["subject"] == PROXY for st in data["statements"])
        labels = [st for st in data["statements"] if st["predicate"] == RDFS_LABEL]
        assert labels == [{
            "subject": PROXY, "predicate": RDFS_LABEL, "object": "Ann", "datatype": None, "lang": "en",
        }]

    def test_aggregate_geo(self, client):
        data = client.post("/spindle/aggregate", json=request_body(
            {"subject": ENTITY, "predicate": EX + "latitude", "object": {"type": "literal", "value": "51.5"}},
            {"subject": ENTITY, "predicate": EX + "longitude", "object": {"type": "literal", "value": "-0.1"}},
        )).json()
        assert data["geo"] == {"lat": 51.5, "long": -0.1}

    def test_aggregate_without_statements(self, client):
        data = client.post("/spindle/aggregate", json=request_body()).json()
        assert data["class"] is None
        assert data["title"] == "/things/abc"

    def test_missing_uri(self, client):
        response = client.post("/spindle/aggregate", json={"refs": [ENTITY]})
        assert response.status_code == 422

    def test_fusion_failure(self, client, aggregator, monkeypatch):
        def fail(uri, refs, candidates):
            raise FusionError("out of memory")

        monkeypatch.setattr(aggregator, "aggregate", fail)
        response = client.post("/spindle/aggregate", json=request_body())
        assert response.status_code == 500
        assert "Aggregation failed" in response.json()["detail"]
