"""
Aggregation: class resolution and property fusion for proxy entries.
"""

from rdf_spindle.aggregate.entry import LiteralCandidate, PropertyMatchState, ProxyEntry
from rdf_spindle.aggregate.literals import coerce_datatype, is_integer_datatype, normalize_lang
from rdf_spindle.aggregate.classes import (
    CLASS_SCORE_CEILING,
    ClassMatch,
    ClassResolver,
    entity_types,
    resolve_class,
)
from rdf_spindle.aggregate.props import (
    FusionResult,
    MappingProxyLocator,
    PropertyFuser,
    ProxyLocator,
    fallback_title,
    statements_frame,
)
from rdf_spindle.aggregate.aggregator import Aggregator

__all__ = [
    "LiteralCandidate",
    "PropertyMatchState",
    "ProxyEntry",
    "coerce_datatype",
    "is_integer_datatype",
    "normalize_lang",
    "CLASS_SCORE_CEILING",
    "ClassMatch",
    "ClassResolver",
    "entity_types",
    "resolve_class",
    "FusionResult",
    "MappingProxyLocator",
    "PropertyFuser",
    "ProxyLocator",
    "fallback_title",
    "statements_frame",
    "Aggregator",
]
