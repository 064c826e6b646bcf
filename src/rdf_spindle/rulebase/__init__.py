"""
Rulebase: compiled class, predicate and co-reference rules.
"""

from rdf_spindle.rulebase.store import (
    DEFAULT_SCORE,
    ClassAlias,
    ClassRule,
    CorefRule,
    ExpectedKind,
    PredicateMatch,
    PredicateRule,
    RuleResult,
    RuleStore,
)
from rdf_spindle.rulebase.compiler import (
    KnownPredicate,
    RuleCompiler,
    build_rulebase,
)

__all__ = [
    "DEFAULT_SCORE",
    "ClassAlias",
    "ClassRule",
    "CorefRule",
    "ExpectedKind",
    "PredicateMatch",
    "PredicateRule",
    "RuleResult",
    "RuleStore",
    "KnownPredicate",
    "RuleCompiler",
    "build_rulebase",
]
