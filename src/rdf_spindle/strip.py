"""
Source Data Stripping.

Prunes source statements down to the ones a rulebase can use: a statement
is kept only if its predicate is one of the rulebase's cached predicates.
Statements with a non-IRI predicate are always dropped.
"""

import logging
from typing import Iterable, List, Optional

from rdflib import Graph

from rdf_spindle.rulebase.store import RuleStore
from rdf_spindle.terms import Statement, statements_from_graph, statements_to_graph

logger = logging.getLogger(__name__)


def keeps(statement: Statement, rules: RuleStore) -> bool:
    """True if the rulebase needs this statement."""
    if not statement.predicate.is_iri:
        logger.debug("Ignoring statement with non-resource predicate")
        return False
    return rules.is_cached(statement.predicate.value)


def strip(statements: Iterable[Statement], rules: RuleStore) -> List[Statement]:
    """
    Return the statements whose predicates the rulebase caches, in input order.

    Example:
        kept = strip(statements_from_graph(graph), rules)
    """
    kept: List[Statement] = []
    dropped = 0
    for st in statements:
        if keeps(st, rules):
            logger.debug(f"Keeping a triple with predicate {st.predicate}")
            kept.append(st)
        else:
            dropped += 1
    logger.debug(f"Stripped {dropped} statements, kept {len(kept)}")
    return kept


def strip_graph(graph: Graph, rules: RuleStore, into: Optional[Graph] = None) -> Graph:
    """Strip an rdflib graph, returning a new graph holding the kept triples."""
    return statements_to_graph(strip(statements_from_graph(graph), rules), into)
