"""
rdf-spindle: rulebase-driven aggregation of co-referenced RDF entities.

A rulebase written in the spindle vocabulary is compiled once into a
RuleStore; each proxy build then resolves the entity's class and fuses
the best value for every target predicate out of its source statements.
"""

__version__ = "0.2.0"

from rdf_spindle.errors import (
    SpindleError,
    RulebaseError,
    RulebaseFrozenError,
    FusionError,
    InvalidLanguageTag,
    ConfigError,
)
from rdf_spindle.terms import Term, TermKind, Statement
from rdf_spindle.config import SpindleConfig, load_config
from rdf_spindle.coref import CorefSet, DEFAULT_MATCH_TYPES, extract_corefs
from rdf_spindle.rulebase import (
    RuleStore,
    RuleCompiler,
    RuleResult,
    ClassRule,
    PredicateRule,
    PredicateMatch,
    ExpectedKind,
    build_rulebase,
)
from rdf_spindle.aggregate import (
    Aggregator,
    ProxyEntry,
    ClassResolver,
    PropertyFuser,
    FusionResult,
    ProxyLocator,
    MappingProxyLocator,
    resolve_class,
)
from rdf_spindle.strip import keeps, strip, strip_graph
from rdf_spindle.web import create_aggregation_router, create_app

__all__ = [
    "SpindleError",
    "RulebaseError",
    "RulebaseFrozenError",
    "FusionError",
    "InvalidLanguageTag",
    "ConfigError",
    "Term",
    "TermKind",
    "Statement",
    "SpindleConfig",
    "load_config",
    "CorefSet",
    "DEFAULT_MATCH_TYPES",
    "extract_corefs",
    "RuleStore",
    "RuleCompiler",
    "RuleResult",
    "ClassRule",
    "PredicateRule",
    "PredicateMatch",
    "ExpectedKind",
    "build_rulebase",
    "Aggregator",
    "ProxyEntry",
    "ClassResolver",
    "PropertyFuser",
    "FusionResult",
    "ProxyLocator",
    "MappingProxyLocator",
    "resolve_class",
    "keeps",
    "strip",
    "strip_graph",
    # HTTP surface
    "create_aggregation_router",
    "create_app",
]
