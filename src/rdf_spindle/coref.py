"""
Co-reference Match Types.

A match type is a strategy invoked for every source statement whose
predicate the rulebase binds to it with spindle:coref. The host supplies
the table of known match types; DEFAULT_MATCH_TYPES mirrors the built-in
set (owl:sameAs-style resource matches and Wikipedia-to-DBpedia mapping).
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, TYPE_CHECKING

from rdf_spindle.vocab import SPINDLE_RESOURCE_MATCH, SPINDLE_WIKIPEDIA_MATCH
from rdf_spindle.terms import Statement

if TYPE_CHECKING:
    from rdf_spindle.rulebase.store import RuleStore


WIKIPEDIA_PREFIX = "http://en.wikipedia.org/wiki/"
DBPEDIA_PREFIX = "http://dbpedia.org/resource/"


@dataclass
class CorefSet:
    """An ordered, de-duplicated list of (left, right) co-reference pairs."""
    refs: List[Tuple[str, Optional[str]]] = field(default_factory=list)

    def add(self, left: str, right: Optional[str] = None) -> bool:
        """
        Add a pair (or a lone subject when right is None).

        Returns False if an equivalent pair is already present.
        """
        for l, r in self.refs:
            if l == left and (right is None or r == right):
                return False
        self.refs.append((left, right))
        return True

    def __iter__(self) -> Iterator[Tuple[str, Optional[str]]]:
        return iter(self.refs)

    def __len__(self) -> int:
        return len(self.refs)


MatchStrategy = Callable[[CorefSet, str, str], None]


def match_sameas(corefs: CorefSet, subject: str, obj: str) -> None:
    """The subject and object denote the same thing."""
    corefs.add(subject, obj)


def match_wikipedia(corefs: CorefSet, subject: str, obj: str) -> None:
    """An English Wikipedia page maps to the corresponding DBpedia resource."""
    if not obj.startswith(WIKIPEDIA_PREFIX):
        return
    corefs.add(subject, DBPEDIA_PREFIX + obj[len(WIKIPEDIA_PREFIX):])


DEFAULT_MATCH_TYPES: Dict[str, MatchStrategy] = {
    SPINDLE_RESOURCE_MATCH: match_sameas,
    SPINDLE_WIKIPEDIA_MATCH: match_wikipedia,
}


def extract_corefs(statements: Iterable[Statement], rules: "RuleStore") -> CorefSet:
    """Apply the rulebase's co-reference rules to a set of source statements."""
    corefs = CorefSet()
    for st in statements:
        if not (st.subject.is_iri and st.predicate.is_iri and st.object.is_iri):
            continue
        rule = rules.coref_rule(st.predicate.value)
        if rule is None:
            continue
        rule.strategy(corefs, st.subject.value, st.object.value)
    return corefs
