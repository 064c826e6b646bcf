"""
Property Fusion.

Picks the best value (or, for plain literals, the best value per
language) for every target predicate of the rulebase, out of all the
candidate statements which mention one of an entity's co-references.

Key design decisions:
- A statement whose subject is a co-reference is matched forwards; one
  whose object is a co-reference is matched inversely (rdf:type never is)
- Priority-0 resource matches are written immediately; everything else
  is buffered and replaced only by a strictly better (lower) priority
- Each fusion run keeps its state in a private _FusionRun, so one
  PropertyFuser can serve any number of concurrent requests
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Protocol

import polars as pl

from rdf_spindle.aggregate.entry import PropertyMatchState, ProxyEntry
from rdf_spindle.aggregate.literals import coerce_datatype, normalize_lang
from rdf_spindle.errors import FusionError, InvalidLanguageTag
from rdf_spindle.rulebase.store import ExpectedKind, PredicateMatch, RuleStore
from rdf_spindle.terms import Statement, Term
from rdf_spindle.vocab import DCTERMS_DESCRIPTION, GEO_LAT, GEO_LONG, RDF_TYPE, RDFS_LABEL, XSD_DECIMAL

logger = logging.getLogger(__name__)


# =============================================================================
# Proxy Location
# =============================================================================

class ProxyLocator(Protocol):
    """Looks up the proxy (if any) which a source URI has been aggregated into."""

    def locate(self, uri: str) -> Optional[str]:
        ...


class MappingProxyLocator:
    """A ProxyLocator backed by a plain source-URI to proxy-URI mapping."""

    def __init__(self, proxies: Mapping[str, str]):
        self._proxies = dict(proxies)

    def locate(self, uri: str) -> Optional[str]:
        return self._proxies.get(uri)


# =============================================================================
# Fusion
# =============================================================================

@dataclass
class FusionResult:
    """
    The merged output of one fusion run.

    'score_delta' is the total prominence to subtract from the proxy score.
    'root_statements' are the indexed statements duplicated into the root
    graph (multigraph mode only).
    """
    statements: List[Statement] = field(default_factory=list)
    root_statements: List[Statement] = field(default_factory=list)
    score_delta: int = 0
    title: Optional[str] = None
    title_en: Optional[str] = None
    titles: Dict[str, str] = field(default_factory=dict)
    descriptions: Dict[str, str] = field(default_factory=dict)
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def has_geo(self) -> bool:
        return self.lat is not None and self.lon is not None


class _FusionRun:
    """Mutable state for fusing the candidates of a single proxy."""

    def __init__(self, fuser: "PropertyFuser", uri: str, class_uri: Optional[str]):
        self.fuser = fuser
        self.uri = uri
        self.class_uri = class_uri
        self.subject = Term.iri(uri)
        self.states: Dict[str, PropertyMatchState] = {
            rule.target: PropertyMatchState(rule) for rule in fuser.rules.predicates
        }
        self.result = FusionResult()

    def emit(self, predicate: str, obj: Term) -> Statement:
        st = Statement(self.subject, Term.iri(predicate), obj)
        self.result.statements.append(st)
        return st

    def test(self, st: Statement, inverse: bool) -> None:
        obj = st.subject if inverse else st.object
        for rule, match in self.fuser.rules.matches_for(st.predicate.value, inverse, self.class_uri):
            state = self.states[rule.target]
            if rule.expected == ExpectedKind.URI:
                if obj.is_iri:
                    self.candidate_uri(state, match, obj)
            elif rule.expected == ExpectedKind.LITERAL:
                if obj.is_literal:
                    self.candidate_literal(state, match, obj)

    def candidate_uri(self, state: PropertyMatchState, match: PredicateMatch, obj: Term) -> None:
        rule = state.rule
        if match.priority and not state.beats_buffered(match.priority):
            return
        value = obj
        if rule.proxy_only:
            located = self.fuser.locator.locate(obj.value) if self.fuser.locator else None
            if not located or located == self.uri:
                return
            value = Term.iri(located)
        if match.priority == 0:
            logger.debug(f"==> Property <{rule.target}>")
            self.emit(rule.target, value)
            self.result.score_delta += match.prominence or rule.prominence
            return
        state.offer_resource(value, match.priority, match.prominence)

    def candidate_literal(self, state: PropertyMatchState, match: PredicateMatch, obj: Term) -> None:
        """
        Offer a literal candidate.

        Without a datatype the literal competes in its language bucket.
        With one it is coerced and competes for the single slot, like a
        buffered resource: priority 0 is not written immediately here, so
        among several priority-0 datatyped literals the first one holds.
        """
        rule = state.rule
        if rule.datatype is None:
            try:
                lang = normalize_lang(obj.lang)
            except InvalidLanguageTag as e:
                logger.warning(f"Ignoring literal for <{rule.target}>: {e}")
                return
            if state.offer_literal(lang, obj, match.priority, match.prominence):
                if rule.target == self.fuser.title_predicate:
                    if lang == "en":
                        self.result.title_en = obj.value
                    elif lang == "":
                        self.result.title = obj.value
            return
        if not state.beats_buffered(match.priority):
            return
        value = coerce_datatype(obj, rule.datatype)
        if value is None:
            return
        state.offer_resource(value, match.priority, match.prominence)

    def materialize(self) -> FusionResult:
        result = self.result
        for state in self.states.values():
            rule = state.rule
            result.score_delta += state.prominence
            if rule.target == RDFS_LABEL:
                result.titles = state.strings()
            elif rule.target == DCTERMS_DESCRIPTION:
                result.descriptions = state.strings()
            if state.empty:
                continue
            logger.debug(f"==> Property <{rule.target}>")
            duplicate = self.fuser.multigraph and rule.indexed and not rule.inverse
            if state.resource is not None:
                self.record_geo(rule.target, state.resource)
                values = [state.resource]
            else:
                values = [cand.literal for cand in state.literals.values()]
            for value in values:
                st = self.emit(rule.target, value)
                if duplicate:
                    result.root_statements.append(st)
        return result

    def record_geo(self, target: str, value: Term) -> None:
        """
        Read coordinates from the single-slot winner of geo:lat or geo:long.

        Only a value typed xsd:decimal counts, which in practice means the
        target declares spindle:expectType xsd:decimal. Language-bucketed
        literals never supply coordinates.
        """
        if target not in (GEO_LAT, GEO_LONG):
            return
        if not value.is_literal or value.datatype != XSD_DECIMAL:
            return
        try:
            number = float(value.value)
        except ValueError:
            logger.warning(f"Ignoring non-numeric <{target}> value {value}")
            return
        if target == GEO_LAT:
            self.result.lat = number
        else:
            self.result.lon = number


class PropertyFuser:
    """
    Fuses candidate statements into proxy property values.

    Example:
        fuser = PropertyFuser(rules, title_predicate=RDFS_LABEL)
        result = fuser.fuse(proxy_uri, candidates, refs, class_uri)
    """

    def __init__(
        self,
        rules: RuleStore,
        locator: Optional[ProxyLocator] = None,
        title_predicate: Optional[str] = RDFS_LABEL,
        multigraph: bool = False,
    ):
        self.rules = rules
        self.locator = locator
        self.title_predicate = title_predicate
        self.multigraph = multigraph

    def fuse(
        self,
        uri: str,
        candidates: Iterable[Statement],
        refs: Iterable[str],
        class_uri: Optional[str] = None,
    ) -> FusionResult:
        """
        Fuse candidate statements for the proxy 'uri'.

        Raises:
            FusionError: if the run could not complete
        """
        refs = set(refs)
        run = _FusionRun(self, uri, class_uri)
        try:
            for st in candidates:
                if not st.predicate.is_iri:
                    continue
                if st.subject.is_iri and st.subject.value in refs:
                    run.test(st, inverse=False)
                elif (
                    st.object.is_iri
                    and st.object.value in refs
                    and st.predicate.value != RDF_TYPE
                ):
                    run.test(st, inverse=True)
            return run.materialize()
        except MemoryError as e:
            logger.critical(f"Out of memory while fusing properties of <{uri}>")
            raise FusionError(f"Failed to fuse properties of <{uri}>") from e

    def apply(self, entry: ProxyEntry, candidates: Iterable[Statement], root: str = "") -> FusionResult:
        """
        Fuse candidates into a proxy entry.

        Updates the entry's statements, score, titles, descriptions and
        geo fields; if no untagged or English title won, a title is derived
        from the entry URI relative to 'root'.
        """
        result = self.fuse(entry.uri, candidates, entry.refs, entry.class_uri)
        entry.statements.extend(result.statements)
        entry.root_statements.extend(result.root_statements)
        entry.score -= result.score_delta
        entry.titles = dict(result.titles)
        entry.descriptions = dict(result.descriptions)
        if result.has_geo:
            entry.has_geo = True
            entry.lat = result.lat
            entry.lon = result.lon
        if result.title is not None:
            entry.title = result.title
        if result.title_en is not None:
            entry.title_en = result.title_en
        if entry.title is None and entry.title_en is None:
            entry.title = fallback_title(entry.uri, root)
        return result


def fallback_title(uri: str, root: str) -> str:
    """
    Derive a title from a proxy URI.

    The root prefix is stripped, keeping a leading '/' if the remainder
    starts a path segment, and any '#fragment' is dropped:
    fallback_title("http://host/abc#id", "http://host/") == "/abc"
    """
    start = 0
    if root and uri.startswith(root):
        start = len(root)
        if not uri[start:].startswith("/"):
            start -= 1
            if uri[start] != "/":
                start = 0
    return uri[start:].split("#", 1)[0]


def statements_frame(statements: Iterable[Statement]) -> pl.DataFrame:
    """Render statements as a DataFrame, one row per statement."""
    rows = [
        {
            "subject": str(st.subject) if not st.subject.is_iri else st.subject.value,
            "predicate": st.predicate.value,
            "object": st.object.value,
            "datatype": st.object.datatype,
            "lang": st.object.lang,
        }
        for st in statements
    ]
    return pl.DataFrame(rows, schema={
        "subject": pl.Utf8,
        "predicate": pl.Utf8,
        "object": pl.Utf8,
        "datatype": pl.Utf8,
        "lang": pl.Utf8,
    })
