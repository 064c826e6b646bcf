"""Tests for the spindle-rules command line."""
import json

import pytest
from rdflib import Graph, URIRef

from rdf_spindle import __version__
from rdf_spindle.cli import build_parser, main
from rdf_spindle.config import CONFIG_ENV, RULEBASE_ENV

EX = "http://example.com/ns#"
PROXY = "http://proxy.example/things/abc#id"
ENTITY = "http://source.example/people/1"

SOURCE_TTL = """
@prefix ex: <http://example.com/ns#> .
@prefix foaf: <http://xmlns.com/foaf/0.1/> .

<http://source.example/people/1> a foaf:Person ;
    ex:name "Ann" ;
    ex:shoeSize "9" .
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.delenv(RULEBASE_ENV, raising=False)


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "source.ttl"
    path.write_text(SOURCE_TTL, encoding="utf-8")
    return path


class TestParser:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["--version"])
        assert exc.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# ========== dump Tests ==========

class TestDump:
    def test_dump_json(self, rulebase_file, capsys):
        assert main(["dump", str(rulebase_file)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["classes"][0]["uri"] == EX + "Place"
        assert data["match_types"]

    def test_dump_table(self, rulebase_file, capsys):
        assert main(["dump", str(rulebase_file), "--format", "table"]) == 0
        assert "alias_prominence" in capsys.readouterr().out

    def test_dump_from_config(self, rulebase_file, tmp_path, capsys):
        config = tmp_path / "spindle.json"
        config.write_text(json.dumps({"rulebase_paths": [str(rulebase_file)]}))
        assert main(["--config", str(config), "dump"]) == 0
        assert json.loads(capsys.readouterr().out)["classes"]

    def test_empty_rulebase(self, capsys):
        assert main(["dump"]) == 0
        assert json.loads(capsys.readouterr().out)["classes"] == []

    def test_missing_rulebase(self, tmp_path):
        assert main(["dump", str(tmp_path / "missing.ttl")]) == 1

    def test_bad_config(self, tmp_path):
        assert main(["--config", str(tmp_path / "missing.yaml"), "dump"]) == 2


# ========== aggregate Tests ==========

class TestAggregate:
    def test_json(self, rulebase_file, source_file, capsys):
        code = main([
            "aggregate", str(rulebase_file),
            "--uri", PROXY, "--refs", ENTITY, "--source", str(source_file),
        ])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["class"] == EX + "Person"
        assert data["title"] == "Ann"
        assert data["score"] == 45

    def test_turtle(self, rulebase_file, source_file, capsys):
        code = main([
            "aggregate", str(rulebase_file),
            "--uri", PROXY, "--refs", ENTITY, "--source", str(source_file), "--format", "turtle",
        ])
        assert code == 0
        graph = Graph()
        graph.parse(data=capsys.readouterr().out, format="turtle")
        assert (URIRef(PROXY), None, None) in graph

    def test_unparseable_source(self, rulebase_file, tmp_path):
        bad = tmp_path / "bad.ttl"
        bad.write_text("not turtle @@@")
        code = main(["aggregate", str(rulebase_file), "--uri", PROXY, "--source", str(bad)])
        assert code == 1


# ========== strip Tests ==========

class TestStrip:
    def test_strip(self, rulebase_file, source_file, capsys):
        assert main(["strip", str(rulebase_file), "--source", str(source_file)]) == 0
        graph = Graph()
        graph.parse(data=capsys.readouterr().out, format="turtle")
        assert len(graph) == 2
        assert (URIRef(ENTITY), URIRef(EX + "name"), None) in graph
        assert (URIRef(ENTITY), URIRef(EX + "shoeSize"), None) not in graph

    def test_source_required(self, rulebase_file):
        with pytest.raises(SystemExit):
            main(["strip", str(rulebase_file)])

    def test_unparseable_source(self, rulebase_file, tmp_path):
        bad = tmp_path / "bad.ttl"
        bad.write_text("not turtle @@@")
        assert main(["strip", str(rulebase_file), "--source", str(bad)]) == 1
