"""
Compiled Rulebase Storage.

Provides the in-memory representation of a compiled rulebase:
- ClassRule: a canonical class and the aliases which map onto it
- PredicateRule: a canonical target predicate and its candidate matches
- Cached predicates: predicates which must survive pruning of source data
- CorefRule: a predicate bound to a co-reference match type

A RuleStore is populated once (every add_* call is idempotent or
merge-on-duplicate), finalized, and then shared read-only between any
number of concurrent aggregation runs.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set, Tuple

import polars as pl

from rdf_spindle.coref import MatchStrategy
from rdf_spindle.errors import RulebaseFrozenError
from rdf_spindle.vocab import OWL_SAME_AS, RDF_TYPE

logger = logging.getLogger(__name__)

# Score assigned to classes, predicates and matches with no olo:index
DEFAULT_SCORE = 100


class ExpectedKind(str, Enum):
    """The kind of object a target predicate accepts."""
    UNKNOWN = "unknown"
    URI = "uri"
    LITERAL = "literal"


class RuleResult(IntEnum):
    """Outcome of compiling a single rulebase statement."""
    FAILED = -1
    SKIPPED = 0
    ADDED = 1


# =============================================================================
# Class Rules
# =============================================================================

@dataclass
class ClassAlias:
    """A class URI which, when encountered, maps to its owning ClassRule."""
    uri: str
    prominence: int = 0


@dataclass
class ClassRule:
    """
    Mapping data for a class.

    'uri' is the class applied to the proxy; 'aliases' always starts with
    the class itself. 'score' orders competing classes (lower wins) and
    'prominence' is subtracted from the proxy's score. 'roots' are URI
    prefixes used by the co-reference fallback when no type matches.
    """
    uri: str
    score: int = DEFAULT_SCORE
    prominence: int = 0
    aliases: List[ClassAlias] = field(default_factory=list)
    roots: List[str] = field(default_factory=list)
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.alias(self.uri) is None:
            self.aliases.insert(0, ClassAlias(self.uri))

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RulebaseFrozenError(f"Class rule <{self.uri}> has been finalized and cannot be modified")

    def freeze(self) -> None:
        """Order aliases (the class itself first, then by URI) and refuse further additions."""
        own = [a for a in self.aliases if a.uri == self.uri]
        others = sorted((a for a in self.aliases if a.uri != self.uri), key=lambda a: a.uri)
        self.aliases = own + others
        self._frozen = True

    def alias(self, uri: str) -> Optional[ClassAlias]:
        for entry in self.aliases:
            if entry.uri == uri:
                return entry
        return None

    def add_alias(self, uri: str, prominence: int = 0) -> RuleResult:
        """Add an alias; an existing alias only has a non-zero prominence applied."""
        self._check_mutable()
        existing = self.alias(uri)
        if existing is not None:
            if prominence:
                existing.prominence = prominence
            return RuleResult.SKIPPED
        self.aliases.append(ClassAlias(uri, prominence))
        return RuleResult.ADDED

    def add_root(self, root: str) -> RuleResult:
        self._check_mutable()
        if root in self.roots:
            return RuleResult.SKIPPED
        self.roots.append(root)
        return RuleResult.ADDED

    def match_root(self, refs: List[str]) -> Optional[str]:
        """
        Return the first root which is a string prefix of any ref.

        This is a textual prefix test, not an IRI comparison: a root of
        "http://example.com/thing" also matches "http://example.com/things/1".
        """
        for root in self.roots:
            for ref in refs:
                if ref.startswith(root):
                    return root
        return None


# =============================================================================
# Predicate Rules
# =============================================================================

@dataclass
class PredicateMatch:
    """
    A single source predicate which feeds a target predicate.

    Matching may be restricted to proxies of one class ('only_for').
    Priority 0 means 'always add'; otherwise 1..n, lower wins.
    """
    predicate: str
    only_for: Optional[str] = None
    priority: int = DEFAULT_SCORE
    prominence: int = 0
    inverse: bool = False

    @property
    def key(self) -> Tuple[str, Optional[str], bool]:
        return (self.predicate, self.only_for, self.inverse)

    def applies(self, predicate: str, inverse: bool, class_uri: Optional[str]) -> bool:
        if self.inverse != inverse:
            return False
        if self.only_for is not None and self.only_for != class_uri:
            return False
        return self.predicate == predicate


@dataclass
class PredicateRule:
    """
    Mapping data for a target predicate.

    If 'expected' is LITERAL, 'datatype' optionally names the datatype
    candidate literals must conform to. If 'expected' is URI and
    'proxy_only' is set, only candidates whose objects have their own proxy
    are used, and the proxy is substituted for the original URI.
    """
    target: str
    expected: ExpectedKind = ExpectedKind.UNKNOWN
    datatype: Optional[str] = None
    proxy_only: bool = False
    indexed: bool = False
    inverse: bool = False
    score: int = DEFAULT_SCORE
    prominence: int = 0
    matches: List[PredicateMatch] = field(default_factory=list)
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RulebaseFrozenError(f"Predicate rule <{self.target}> has been finalized and cannot be modified")

    def freeze(self) -> None:
        """Order matches by their key and refuse further additions."""
        self.matches.sort(key=lambda m: (m.predicate, m.only_for or "", m.inverse))
        self._frozen = True

    def add_match(
        self,
        predicate: str,
        only_for: Optional[str] = None,
        priority: int = DEFAULT_SCORE,
        prominence: int = 0,
        inverse: bool = False,
    ) -> RuleResult:
        """Add a match, overwriting priority and prominence of an identical key."""
        self._check_mutable()
        key = (predicate, only_for, inverse)
        for match in self.matches:
            if match.key == key:
                match.priority = priority
                match.prominence = prominence
                return RuleResult.ADDED
        self.matches.append(PredicateMatch(predicate, only_for, priority, prominence, inverse))
        return RuleResult.ADDED

    def find_match(self, predicate: str, inverse: bool, class_uri: Optional[str]) -> Optional[PredicateMatch]:
        """
        The match which applies to a candidate statement.

        A match restricted to the proxy's class is preferred over an
        unrestricted one; after that the lowest priority wins. At most one
        match exists per (predicate, class, inverse), so the choice never
        depends on the order matches were added in.
        """
        best: Optional[PredicateMatch] = None
        for match in self.matches:
            if not match.applies(predicate, inverse, class_uri):
                continue
            if best is None or (match.only_for is None, match.priority) < (best.only_for is None, best.priority):
                best = match
        return best


# =============================================================================
# Co-reference Rules
# =============================================================================

@dataclass
class CorefRule:
    """A candidate predicate bound to a co-reference match type."""
    predicate: str
    match_type: str
    strategy: MatchStrategy


# =============================================================================
# Rule Store
# =============================================================================

class RuleStore:
    """
    The compiled rulebase.

    Rules are keyed by URI. finalize() orders classes and predicates by
    score and URI, freezes the store and every rule in it.
    """

    def __init__(self, match_types: Optional[Mapping[str, MatchStrategy]] = None):
        self._classes: Dict[str, ClassRule] = {}
        self._predicates: Dict[str, PredicateRule] = {}
        self._cached: Set[str] = set()
        self._corefs: Dict[str, CorefRule] = {}
        self._match_types: Optional[Dict[str, MatchStrategy]] = (
            dict(match_types) if match_types is not None else None
        )
        self._by_source: Dict[str, List[PredicateRule]] = {}
        self._finalized = False
        # Always cache these predicates
        self.add_cached_predicate(RDF_TYPE)
        self.add_cached_predicate(OWL_SAME_AS)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def classes(self) -> List[ClassRule]:
        return list(self._classes.values())

    @property
    def predicates(self) -> List[PredicateRule]:
        return list(self._predicates.values())

    @property
    def cached_predicates(self) -> List[str]:
        return sorted(self._cached)

    @property
    def corefs(self) -> List[CorefRule]:
        return list(self._corefs.values())

    @property
    def match_types(self) -> Optional[Dict[str, MatchStrategy]]:
        return self._match_types

    def class_rule(self, uri: str) -> Optional[ClassRule]:
        return self._classes.get(uri)

    def predicate_rule(self, uri: str) -> Optional[PredicateRule]:
        return self._predicates.get(uri)

    def coref_rule(self, uri: str) -> Optional[CorefRule]:
        return self._corefs.get(uri)

    def is_cached(self, uri: str) -> bool:
        return uri in self._cached

    def matches_for(
        self,
        predicate: str,
        inverse: bool,
        class_uri: Optional[str],
    ) -> Iterator[Tuple[PredicateRule, PredicateMatch]]:
        """
        Yield (rule, match) for every predicate rule fed by a candidate.

        At most one match is yielded per rule, chosen by PredicateRule.find_match.
        """
        if self._finalized:
            candidates = self._by_source.get(predicate, [])
        else:
            candidates = self._predicates.values()
        for rule in candidates:
            match = rule.find_match(predicate, inverse, class_uri)
            if match is not None:
                yield rule, match

    # -------------------------------------------------------------------------
    # Population
    # -------------------------------------------------------------------------

    def _check_mutable(self) -> None:
        if self._finalized:
            raise RulebaseFrozenError("Rulebase has been finalized and cannot be modified")

    def set_match_types(self, match_types: Optional[Mapping[str, MatchStrategy]]) -> None:
        """Install the host's table of co-reference match types."""
        self._check_mutable()
        self._match_types = dict(match_types) if match_types is not None else None

    def add_cached_predicate(self, uri: str) -> RuleResult:
        self._check_mutable()
        if uri in self._cached:
            return RuleResult.SKIPPED
        self._cached.add(uri)
        return RuleResult.ADDED

    def add_class(self, uri: str) -> ClassRule:
        """Return the rule for a class, creating it with defaults if new."""
        self._check_mutable()
        rule = self._classes.get(uri)
        if rule is None:
            rule = ClassRule(uri)
            self._classes[uri] = rule
        return rule

    def add_class_alias(self, class_uri: str, alias_uri: str, prominence: int = 0) -> RuleResult:
        return self.add_class(class_uri).add_alias(alias_uri, prominence)

    def add_class_root(self, class_uri: str, root: str) -> RuleResult:
        return self.add_class(class_uri).add_root(root)

    def add_predicate(self, uri: str) -> PredicateRule:
        """Return the rule for a target predicate, creating it if new."""
        self._check_mutable()
        self.add_cached_predicate(uri)
        rule = self._predicates.get(uri)
        if rule is None:
            rule = PredicateRule(uri)
            self._predicates[uri] = rule
        return rule

    def add_predicate_match(
        self,
        target: str,
        predicate: str,
        only_for: Optional[str] = None,
        priority: int = DEFAULT_SCORE,
        prominence: int = 0,
        inverse: bool = False,
    ) -> RuleResult:
        return self.add_predicate(target).add_match(predicate, only_for, priority, prominence, inverse)

    def add_coref(self, predicate: str, match_type: str) -> RuleResult:
        """
        Bind a candidate predicate to a registered match type.

        Without a match-type table every binding is ignored; an unknown
        match type is logged and ignored.
        """
        self._check_mutable()
        if self._match_types is None:
            return RuleResult.SKIPPED
        strategy = self._match_types.get(match_type)
        if strategy is None:
            logger.warning(f"Co-reference match type <{match_type}> is not supported")
            return RuleResult.SKIPPED
        self.add_cached_predicate(predicate)
        existing = self._corefs.get(predicate)
        if existing is not None:
            existing.match_type = match_type
            existing.strategy = strategy
        else:
            self._corefs[predicate] = CorefRule(predicate, match_type, strategy)
        return RuleResult.ADDED

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def finalize(self) -> "RuleStore":
        """
        Sort rules, build the source-predicate index and freeze.

        Classes and predicates are ordered by score, then URI, so the order
        is the same however the rulebase statements were iterated.
        """
        if self._finalized:
            return self
        self._classes = {
            rule.uri: rule for rule in sorted(self._classes.values(), key=lambda r: (r.score, r.uri))
        }
        self._predicates = {
            rule.target: rule for rule in sorted(self._predicates.values(), key=lambda r: (r.score, r.target))
        }
        self._corefs = {uri: self._corefs[uri] for uri in sorted(self._corefs)}
        for rule in self._classes.values():
            rule.freeze()
        for rule in self._predicates.values():
            rule.freeze()
        by_source: Dict[str, List[PredicateRule]] = {}
        for rule in self._predicates.values():
            for source in dict.fromkeys(m.predicate for m in rule.matches):
                by_source.setdefault(source, []).append(rule)
        self._by_source = by_source
        self._finalized = True
        logger.debug(
            f"Rulebase finalized: {len(self._classes)} classes, "
            f"{len(self._predicates)} predicates, {len(self._cached)} cached predicates, "
            f"{len(self._corefs)} co-reference rules"
        )
        return self

    # -------------------------------------------------------------------------
    # Dumping
    # -------------------------------------------------------------------------

    def dump(self) -> Dict[str, Any]:
        """Log the rulebase at DEBUG level and return it as a plain dict."""
        cached = self.cached_predicates
        logger.debug(f"Cached predicates set ({len(cached)} entries):")
        for i, uri in enumerate(cached):
            logger.debug(f"{i}: <{uri}>")

        logger.debug(f"Classes rule-base ({len(self._classes)} entries):")
        classes = []
        for rule in self._classes.values():
            logger.debug(f"{rule.score}: <{rule.uri}>")
            for alias in rule.aliases:
                logger.debug(f"  +--> <{alias.uri}>")
            classes.append({
                "uri": rule.uri,
                "score": rule.score,
                "prominence": rule.prominence,
                "aliases": [{"uri": a.uri, "prominence": a.prominence} for a in rule.aliases],
                "roots": list(rule.roots),
            })

        logger.debug(f"Predicates rule-base ({len(self._predicates)} entries):")
        predicates = []
        for rule in self._predicates.values():
            flags = " [proxy-only]" if rule.proxy_only else ""
            if rule.datatype:
                logger.debug(f"{rule.score}: <{rule.target}> ({rule.expected.value} <{rule.datatype}>){flags}")
            else:
                logger.debug(f"{rule.score}: <{rule.target}> ({rule.expected.value}){flags}")
            for match in rule.matches:
                if match.only_for:
                    logger.debug(f"  +--> {match.priority}: <{match.predicate}> (for <{match.only_for}>)")
                else:
                    logger.debug(f"  +--> {match.priority}: <{match.predicate}>")
            predicates.append({
                "target": rule.target,
                "expected": rule.expected.value,
                "datatype": rule.datatype,
                "proxy_only": rule.proxy_only,
                "indexed": rule.indexed,
                "inverse": rule.inverse,
                "score": rule.score,
                "prominence": rule.prominence,
                "matches": [
                    {
                        "predicate": m.predicate,
                        "only_for": m.only_for,
                        "priority": m.priority,
                        "prominence": m.prominence,
                        "inverse": m.inverse,
                    }
                    for m in rule.matches
                ],
            })

        corefs = [{"predicate": c.predicate, "match_type": c.match_type} for c in self._corefs.values()]
        if self._match_types is not None:
            logger.debug("Match types:")
            for i, uri in enumerate(self._match_types):
                logger.debug(f"{i}: <{uri}>")

        return {
            "cached_predicates": cached,
            "classes": classes,
            "predicates": predicates,
            "corefs": corefs,
            "match_types": list(self._match_types) if self._match_types is not None else None,
        }

    def class_frame(self) -> pl.DataFrame:
        """One row per class alias, in rule order."""
        columns: Dict[str, list] = {
            "class": [], "score": [], "prominence": [], "alias": [], "alias_prominence": [],
        }
        for rule in self._classes.values():
            for alias in rule.aliases:
                columns["class"].append(rule.uri)
                columns["score"].append(rule.score)
                columns["prominence"].append(rule.prominence)
                columns["alias"].append(alias.uri)
                columns["alias_prominence"].append(alias.prominence)
        return pl.DataFrame(columns, schema={
            "class": pl.Utf8,
            "score": pl.Int64,
            "prominence": pl.Int64,
            "alias": pl.Utf8,
            "alias_prominence": pl.Int64,
        })

    def predicate_frame(self) -> pl.DataFrame:
        """One row per predicate match (a null-match row for rules without any)."""
        columns: Dict[str, list] = {
            "target": [], "expected": [], "datatype": [], "score": [], "predicate": [],
            "only_for": [], "priority": [], "prominence": [], "inverse": [],
        }
        for rule in self._predicates.values():
            matches: List[Optional[PredicateMatch]] = list(rule.matches) or [None]
            for match in matches:
                columns["target"].append(rule.target)
                columns["expected"].append(rule.expected.value)
                columns["datatype"].append(rule.datatype)
                columns["score"].append(rule.score)
                columns["predicate"].append(match.predicate if match else None)
                columns["only_for"].append(match.only_for if match else None)
                columns["priority"].append(match.priority if match else None)
                columns["prominence"].append(
                    (match.prominence or rule.prominence) if match else rule.prominence
                )
                columns["inverse"].append(match.inverse if match else None)
        return pl.DataFrame(columns, schema={
            "target": pl.Utf8,
            "expected": pl.Utf8,
            "datatype": pl.Utf8,
            "score": pl.Int64,
            "predicate": pl.Utf8,
            "only_for": pl.Utf8,
            "priority": pl.Int64,
            "prominence": pl.Int64,
            "inverse": pl.Boolean,
        })
