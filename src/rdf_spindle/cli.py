"""
Command-line interface: compile and inspect rulebases, aggregate proxies.

    spindle-rules dump rulebase.ttl
    spindle-rules strip rulebase.ttl --source source.ttl
    spindle-rules aggregate rulebase.ttl --uri http://example.com/p#id \\
        --refs http://a.example/1 http://b.example/2 --source source.ttl
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from rdflib import Graph

from rdf_spindle import __version__
from rdf_spindle.aggregate import Aggregator
from rdf_spindle.config import SpindleConfig, configure_logging, load_config
from rdf_spindle.coref import DEFAULT_MATCH_TYPES
from rdf_spindle.errors import SpindleError
from rdf_spindle.rulebase import RuleCompiler, RuleStore
from rdf_spindle.strip import strip_graph
from rdf_spindle.terms import statements_from_graph, statements_to_graph

logger = logging.getLogger(__name__)


def _load_rules(paths: List[str], config: SpindleConfig) -> RuleStore:
    compiler = RuleCompiler(match_types=DEFAULT_MATCH_TYPES)
    if paths:
        for path in paths:
            compiler.add_file(path)
    else:
        compiler.add_config(config)
    return compiler.finalize()


def cmd_dump(args, config: SpindleConfig) -> int:
    rules = _load_rules(args.rulebase, config)
    if args.format == "table":
        print(rules.class_frame())
        print(rules.predicate_frame())
    else:
        print(json.dumps(rules.dump(), indent=2))
    return 0


def cmd_aggregate(args, config: SpindleConfig) -> int:
    rules = _load_rules(args.rulebase, config)
    graph = Graph()
    for source in args.source:
        try:
            graph.parse(source)
        except Exception as e:
            logger.error(f"Failed to parse source data {source}: {e}")
            return 1
    refs = args.refs or [args.uri]
    entry = Aggregator(rules, config).aggregate(args.uri, refs, statements_from_graph(graph))
    if args.format == "turtle":
        print(statements_to_graph(entry.statements).serialize(format="turtle"))
    else:
        print(json.dumps(entry.to_dict(), indent=2))
    return 0


def cmd_strip(args, config: SpindleConfig) -> int:
    rules = _load_rules(args.rulebase, config)
    graph = Graph()
    for source in args.source:
        try:
            graph.parse(source)
        except Exception as e:
            logger.error(f"Failed to parse source data {source}: {e}")
            return 1
    print(strip_graph(graph, rules).serialize(format="turtle"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spindle-rules", description="Spindle rulebase tools")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=str, default=None, help="YAML or JSON configuration file")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default from configuration)")
    sub = parser.add_subparsers(dest="command", required=True)

    dump = sub.add_parser("dump", help="Compile rulebases and print the result")
    dump.add_argument("rulebase", nargs="*", help="Turtle rulebase files (default: from configuration)")
    dump.add_argument("--format", choices=("json", "table"), default="json")
    dump.set_defaults(func=cmd_dump)

    agg = sub.add_parser("aggregate", help="Aggregate one proxy from source data")
    agg.add_argument("rulebase", nargs="*", help="Turtle rulebase files (default: from configuration)")
    agg.add_argument("--uri", required=True, help="Canonical proxy URI")
    agg.add_argument("--refs", nargs="+", default=None, help="Co-referenced source URIs")
    agg.add_argument("--source", action="append", required=True, help="Source data file (repeatable)")
    agg.add_argument("--format", choices=("json", "turtle"), default="json")
    agg.set_defaults(func=cmd_aggregate)

    stp = sub.add_parser("strip", help="Keep only source triples whose predicates the rulebase caches")
    stp.add_argument("rulebase", nargs="*", help="Turtle rulebase files (default: from configuration)")
    stp.add_argument("--source", action="append", required=True, help="Source data file (repeatable)")
    stp.set_defaults(func=cmd_strip)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
    except SpindleError as e:
        configure_logging("ERROR")
        logger.error(str(e))
        return 2
    configure_logging(args.log_level or config.log_level)
    try:
        return args.func(args, config)
    except SpindleError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
