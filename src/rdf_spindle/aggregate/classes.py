"""
Class Resolution.

Picks the single best-fitting class rule for an entity from its declared
types, falling back to a URI-prefix test against its co-references.

Key design decisions:
- Lower scores win; on a tie the earliest-encountered match is kept
- The prefix fallback only runs when no declared type matched at all
- Every observed type (and every matched class) is reported back so the
  proxy can carry them as rdf:type statements
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from rdf_spindle.aggregate.entry import ProxyEntry
from rdf_spindle.rulebase.store import ClassRule, RuleStore
from rdf_spindle.terms import Statement, Term
from rdf_spindle.vocab import RDF_TYPE

logger = logging.getLogger(__name__)

# Worse than any real class score
CLASS_SCORE_CEILING = 1000


@dataclass
class ClassMatch:
    """
    The outcome of a successful class resolution.

    'alias' is the alias URI that matched a declared type; for a prefix
    fallback match it is None and 'root' holds the matching prefix.
    """
    class_uri: str
    score: int
    deduction: int
    alias: Optional[str] = None
    root: Optional[str] = None
    observed: List[str] = field(default_factory=list)


def _add_unique(items: List[str], value: str) -> None:
    if value not in items:
        items.append(value)


def entity_types(statements: Iterable[Statement], refs: Iterable[str]) -> List[str]:
    """The distinct rdf:type IRIs declared for any of refs, in first-seen order."""
    refs = set(refs)
    types: List[str] = []
    for st in statements:
        if (
            st.subject.is_iri
            and st.subject.value in refs
            and st.predicate.is_iri
            and st.predicate.value == RDF_TYPE
            and st.object.is_iri
        ):
            _add_unique(types, st.object.value)
    return types


class ClassResolver:
    """Resolves entity classes against a rulebase."""

    def __init__(self, rules: RuleStore):
        self.rules = rules

    def resolve(
        self,
        types: Iterable[str],
        refs: Iterable[str],
        observed: Optional[List[str]] = None,
    ) -> Optional[ClassMatch]:
        """
        Find the best class rule for an entity.

        Args:
            types: The entity's declared rdf:type IRIs
            refs: The entity's co-reference URIs (used by the prefix fallback)
            observed: If given, receives every type seen and every class matched

        Returns:
            ClassMatch, or None if nothing matched
        """
        if observed is None:
            observed = []
        refs = list(refs)
        best_score = CLASS_SCORE_CEILING
        best: Optional[ClassRule] = None
        best_alias = None

        for type_uri in dict.fromkeys(types):
            _add_unique(observed, type_uri)
            for rule in self.rules.classes:
                if rule.score > best_score:
                    continue
                alias = rule.alias(type_uri)
                if alias is None:
                    continue
                _add_unique(observed, rule.uri)
                if best is None or rule.score < best_score:
                    best, best_alias, best_score = rule, alias, rule.score

        if best is not None:
            deduction = best_alias.prominence or best.prominence
            return ClassMatch(best.uri, best_score, deduction, alias=best_alias.uri, observed=observed)

        # Co-reference root fallback: a textual prefix test, so it can
        # over-match when one URI is a string prefix of an unrelated one
        best_root = None
        for rule in self.rules.classes:
            if not rule.roots or rule.score > best_score:
                continue
            root = rule.match_root(refs)
            if root is None:
                continue
            _add_unique(observed, rule.uri)
            if best is None or rule.score < best_score:
                best, best_root, best_score = rule, root, rule.score

        if best is None:
            return None
        return ClassMatch(best.uri, best_score, best.prominence, root=best_root, observed=observed)

    def apply(
        self,
        entry: ProxyEntry,
        types: Iterable[str],
        multigraph: bool = False,
    ) -> Optional[ClassMatch]:
        """
        Resolve the class of a proxy entry and record it.

        Subtracts the class deduction from the entry's score and adds an
        rdf:type statement for every observed class; in multigraph mode the
        resolved class is also written to the root graph output.
        """
        observed: List[str] = []
        match = self.resolve(types, entry.refs, observed)
        entry.classes = observed
        if match is None:
            logger.warning(f"No class match for object <{entry.uri}>")
            for uri in observed:
                logger.info(f"<{uri}>")
            entry.class_uri = None
        else:
            logger.debug(f"==> Class is <{match.class_uri}>")
            entry.score -= match.deduction
            entry.class_uri = match.class_uri

        for uri in observed:
            logger.debug(f"--> Adding class <{uri}>")
            st = entry.add(RDF_TYPE, Term.iri(uri))
            if multigraph and uri == entry.class_uri:
                entry.root_statements.append(st)
        return match


def resolve_class(
    types: Iterable[str],
    refs: Iterable[str],
    rules: RuleStore,
) -> Optional[Tuple[str, int]]:
    """Resolve a class, returning just (class URI, score deduction)."""
    match = ClassResolver(rules).resolve(types, refs)
    if match is None:
        return None
    return match.class_uri, match.deduction
