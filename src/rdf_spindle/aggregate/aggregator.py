"""
Aggregation facade: class resolution followed by property fusion.
"""

import logging
from typing import Iterable, List, Optional

from rdf_spindle.aggregate.classes import ClassResolver, entity_types
from rdf_spindle.aggregate.entry import ProxyEntry
from rdf_spindle.aggregate.props import PropertyFuser, ProxyLocator
from rdf_spindle.config import SpindleConfig
from rdf_spindle.errors import FusionError
from rdf_spindle.rulebase.store import RuleStore
from rdf_spindle.terms import Statement

logger = logging.getLogger(__name__)


class Aggregator:
    """
    Builds proxy entries from co-referenced source statements.

    The rulebase must be finalized; the aggregator itself holds no
    per-request state, so aggregate() may be called concurrently.
    """

    def __init__(
        self,
        rules: RuleStore,
        config: Optional[SpindleConfig] = None,
        locator: Optional[ProxyLocator] = None,
    ):
        if not rules.finalized:
            raise FusionError("Rulebase must be finalized before aggregation")
        self.rules = rules
        self.config = config or SpindleConfig()
        self.locator = locator
        self.classes = ClassResolver(rules)
        self.props = PropertyFuser(
            rules,
            locator=locator,
            title_predicate=self.config.title_predicate,
            multigraph=self.config.multigraph,
        )

    def graph_for(self, uri: str) -> str:
        """The named graph holding a proxy's statements."""
        if self.config.multigraph:
            return uri.split("#", 1)[0]
        return self.config.root_graph_uri

    def new_entry(self, uri: str, refs: Iterable[str]) -> ProxyEntry:
        return ProxyEntry(
            uri=uri,
            refs=list(refs),
            graph=self.graph_for(uri),
            baseline=self.config.score_baseline,
        )

    def build(self, entry: ProxyEntry, candidates: Iterable[Statement]) -> ProxyEntry:
        """Resolve and fuse into an existing entry, discarding any previous state."""
        candidates: List[Statement] = list(candidates)
        entry.reset()
        self.classes.apply(entry, entity_types(candidates, entry.refs), self.config.multigraph)
        self.props.apply(entry, candidates, self.config.root)
        logger.debug(f"Proxy <{entry.uri}> built with score {entry.score}")
        return entry

    def aggregate(self, uri: str, refs: Iterable[str], candidates: Iterable[Statement]) -> ProxyEntry:
        """
        Build the proxy entry for 'uri' from candidate source statements.

        Args:
            uri: Canonical proxy URI
            refs: Co-referenced source URIs
            candidates: Source statements mentioning any of refs

        Raises:
            FusionError: if the build could not complete
        """
        return self.build(self.new_entry(uri, refs), candidates)
