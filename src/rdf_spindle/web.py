"""
Aggregation API Router.

Provides REST endpoints over a compiled rulebase:
- Rulebase inspection (dump, class and predicate tables, cached predicates)
- Proxy aggregation from posted source statements
"""

import asyncio
import logging
from typing import Literal, Optional

from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel, Field
import polars as pl

from rdf_spindle import __version__
from rdf_spindle.aggregate import Aggregator, ProxyEntry, statements_frame
from rdf_spindle.errors import FusionError
from rdf_spindle.terms import Statement, Term

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models
# =============================================================================

class TermModel(BaseModel):
    """An RDF object term."""
    type: Literal["uri", "literal", "bnode"] = Field(default="uri", description="Term kind")
    value: str = Field(..., description="IRI, lexical form or blank node label")
    datatype: Optional[str] = Field(None, description="Literal datatype IRI")
    lang: Optional[str] = Field(None, description="Literal language tag")

    def to_term(self) -> Term:
        if self.type == "literal":
            return Term.literal(self.value, datatype=self.datatype, lang=self.lang)
        if self.type == "bnode":
            return Term.bnode(self.value)
        return Term.iri(self.value)


class StatementModel(BaseModel):
    """A source statement; subjects starting with '_:' are blank nodes."""
    subject: str = Field(..., description="Subject IRI or _:label")
    predicate: str = Field(..., description="Predicate IRI")
    object: TermModel

    def to_statement(self) -> Statement:
        if self.subject.startswith("_:"):
            subject = Term.bnode(self.subject[2:])
        else:
            subject = Term.iri(self.subject)
        return Statement(subject, Term.iri(self.predicate), self.object.to_term())


class AggregateRequest(BaseModel):
    """Request to build a proxy from co-referenced source statements."""
    uri: str = Field(..., description="Canonical proxy URI")
    refs: list[str] = Field(default_factory=list, description="Co-referenced source URIs")
    statements: list[StatementModel] = Field(default_factory=list, description="Candidate source statements")


class GeoModel(BaseModel):
    lat: float
    long: float


class ProxyResponse(BaseModel):
    """An aggregated proxy."""
    uri: str
    graph: Optional[str] = None
    class_uri: Optional[str] = Field(None, alias="class")
    classes: list[str] = Field(default_factory=list)
    score: int
    title: Optional[str] = None
    title_en: Optional[str] = None
    titles: dict[str, str] = Field(default_factory=dict)
    descriptions: dict[str, str] = Field(default_factory=dict)
    geo: Optional[GeoModel] = None
    statements: list[dict] = Field(default_factory=list)
    root_statements: list[dict] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_entry(cls, entry: ProxyEntry) -> "ProxyResponse":
        return cls(
            uri=entry.uri,
            graph=entry.graph,
            class_uri=entry.class_uri,
            classes=entry.classes,
            score=entry.score,
            title=entry.title,
            title_en=entry.title_en,
            titles=entry.titles,
            descriptions=entry.descriptions,
            geo=GeoModel(lat=entry.lat, long=entry.lon) if entry.has_geo else None,
            statements=dataframe_to_records(statements_frame(entry.statements)),
            root_statements=dataframe_to_records(statements_frame(entry.root_statements)),
        )


def dataframe_to_records(df: pl.DataFrame) -> list[dict]:
    """Convert Polars DataFrame to list of dicts for JSON serialization."""
    return [dict(row) for row in df.iter_rows(named=True)]


# =============================================================================
# Router
# =============================================================================

def create_aggregation_router(aggregator: Aggregator) -> APIRouter:
    """
    Create the aggregation API router.

    Args:
        aggregator: Aggregator holding a finalized rulebase

    Returns:
        APIRouter mounted under /spindle
    """
    router = APIRouter(prefix="/spindle", tags=["Aggregation"])
    rules = aggregator.rules

    @router.get("/rules")
    async def get_rules():
        """The compiled rulebase, in score order."""
        return rules.dump()

    @router.get("/rules/cached-predicates")
    async def get_cached_predicates():
        """Predicates which must survive pruning of source data."""
        cached = rules.cached_predicates
        return {"count": len(cached), "predicates": cached}

    @router.get("/rules/classes")
    async def get_class_table():
        """One row per class alias."""
        return {"rows": dataframe_to_records(rules.class_frame())}

    @router.get("/rules/predicates")
    async def get_predicate_table():
        """One row per predicate match."""
        return {"rows": dataframe_to_records(rules.predicate_frame())}

    @router.post("/aggregate")
    async def aggregate(request: AggregateRequest):
        """Build a proxy from posted source statements."""
        candidates = [st.to_statement() for st in request.statements]
        try:
            entry = await asyncio.to_thread(aggregator.aggregate, request.uri, request.refs, candidates)
        except FusionError as e:
            logger.error(f"Aggregation of <{request.uri}> failed: {e}")
            raise HTTPException(status_code=500, detail=f"Aggregation failed: {str(e)}")
        return ProxyResponse.from_entry(entry).model_dump(by_alias=True)

    return router


def create_app(aggregator: Aggregator) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        aggregator: Aggregator holding a finalized rulebase

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="rdf-spindle API",
        description="Rulebase-driven aggregation of co-referenced RDF entities",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.aggregator = aggregator
    app.include_router(create_aggregation_router(aggregator))

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app
