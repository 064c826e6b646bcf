"""
Proxy entries and per-predicate match state.

Key design decisions:
- ProxyEntry is per-request state; reset() discards everything derived
  so a host can retry a failed build from scratch
- A buffered candidate's priority is Optional: None means nothing is
  buffered, which keeps "no candidate yet" apart from "a priority-0
  candidate is stored"
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rdf_spindle.rulebase.store import PredicateRule
from rdf_spindle.terms import Statement, Term


@dataclass
class ProxyEntry:
    """
    The aggregated record for one co-referenced entity.

    Attributes:
        uri: Canonical URI of the proxy
        refs: Source URIs known to denote the same entity
        graph: Named graph the proxy statements belong to
        baseline: Score the entry starts from (and returns to on reset)
    """
    uri: str
    refs: List[str] = field(default_factory=list)
    graph: Optional[str] = None
    baseline: int = 50
    score: int = field(init=False, default=50)
    class_uri: Optional[str] = None
    classes: List[str] = field(default_factory=list)
    statements: List[Statement] = field(default_factory=list)
    root_statements: List[Statement] = field(default_factory=list)
    title: Optional[str] = None
    title_en: Optional[str] = None
    titles: Dict[str, str] = field(default_factory=dict)
    descriptions: Dict[str, str] = field(default_factory=dict)
    has_geo: bool = False
    lat: Optional[float] = None
    lon: Optional[float] = None

    def __post_init__(self):
        self.score = self.baseline

    def reset(self) -> None:
        """Discard all derived state, keeping identity, refs and graph."""
        self.score = self.baseline
        self.class_uri = None
        self.classes = []
        self.statements = []
        self.root_statements = []
        self.title = None
        self.title_en = None
        self.titles = {}
        self.descriptions = {}
        self.has_geo = False
        self.lat = None
        self.lon = None

    def add(self, predicate: str, obj: Term) -> Statement:
        st = Statement(Term.iri(self.uri), Term.iri(predicate), obj)
        self.statements.append(st)
        return st

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uri": self.uri,
            "refs": list(self.refs),
            "graph": self.graph,
            "class": self.class_uri,
            "classes": list(self.classes),
            "score": self.score,
            "title": self.title,
            "title_en": self.title_en,
            "titles": dict(self.titles),
            "descriptions": dict(self.descriptions),
            "geo": {"lat": self.lat, "long": self.lon} if self.has_geo else None,
            "statements": [str(st) for st in self.statements],
            "root_statements": [str(st) for st in self.root_statements],
        }


@dataclass
class LiteralCandidate:
    """The best literal seen so far for one language bucket."""
    literal: Term
    priority: int


@dataclass
class PropertyMatchState:
    """
    Transient fusion state for one PredicateRule.

    Holds either a single best value ('resource', which may also be a
    datatyped literal) or the best literal per normalized language tag.
    """
    rule: PredicateRule
    resource: Optional[Term] = None
    priority: Optional[int] = None
    prominence: int = 0
    literals: Dict[str, LiteralCandidate] = field(default_factory=dict)

    def _prominence(self, match_prominence: int) -> int:
        return match_prominence or self.rule.prominence

    def beats_buffered(self, priority: int) -> bool:
        """True if a candidate of this priority would replace the buffered one."""
        return self.priority is None or priority < self.priority

    def offer_resource(self, value: Term, priority: int, prominence: int) -> bool:
        """Buffer a single-slot candidate if it is strictly better. Returns True if stored."""
        if not self.beats_buffered(priority):
            return False
        self.resource = value
        self.priority = priority
        self.prominence = self._prominence(prominence)
        return True

    def offer_literal(self, lang: str, value: Term, priority: int, prominence: int) -> bool:
        """Buffer a literal in its language bucket if it is strictly better. Returns True if stored."""
        current = self.literals.get(lang)
        if current is not None and current.priority <= priority:
            return False
        self.literals[lang] = LiteralCandidate(value, priority)
        self.prominence = self._prominence(prominence)
        return True

    @property
    def empty(self) -> bool:
        return self.resource is None and not self.literals

    def strings(self) -> Dict[str, str]:
        """The lexical form of each buffered literal, by language bucket."""
        return {lang: cand.literal.value for lang, cand in self.literals.items()}
