#!/usr/bin/env python3
"""FastAPI application for the OSM geospatial index."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from core.config import GeoIndexConfig
from core.exceptions import (
    DocumentException,
    GeometryException,
    IndexAlreadyExists,
    IndexNotFound,
    IndexTimeout,
    IndexUnavailable,
    InvalidMapping,
    QueryException,
)
from core.logging import configure_logging, get_logger
from entity.builder import NodeDocumentBuilder
from entity.document import EntityType
from search.admin import IndexAdminService
from search.backend import SearchResponse
from search.evaluator import SpatialQueryEvaluator
from search.query import TagTerm
from search.store import DocumentStore
from search.writer import IndexWriter
from spatial.projector import default_projector

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan."""
    config = GeoIndexConfig()
    configure_logging(config.log_level)

    logger.info("api.starting", database_path=config.database_path)
    store = DocumentStore(config.database_path)
    await store.initialize()

    app.state.config = config
    app.state.store = store

    yield

    logger.info("api.stopping")
    await store.close()


# Create FastAPI app
app = FastAPI(
    title="OSM GeoIndex",
    description="Geospatial document index for OpenStreetMap nodes",
    version="0.1.0",
    lifespan=lifespan,
)


# Request/Response Models
class CreateIndexRequest(BaseModel):
    """Request to create an index."""

    shards: Optional[int] = None
    replicas: Optional[int] = None
    mapping: Optional[dict] = None


class NodeIn(BaseModel):
    """Node to index."""

    id: int
    lat: float
    lon: float
    tags: dict[str, str] = Field(default_factory=dict)


class HitOut(BaseModel):
    """One search hit."""

    id: str
    source: dict
    sort: list[float] = Field(default_factory=list)


class SearchOut(BaseModel):
    """Search response."""

    total: int
    hits: list[HitOut]


def _search_out(response: SearchResponse) -> SearchOut:
    return SearchOut(
        total=response.total,
        hits=[
            HitOut(id=hit.id, source=hit.document.to_source(), sort=list(hit.sort))
            for hit in response.hits
        ],
    )


def _tag_filter(tag: Optional[str]) -> Optional[TagTerm]:
    if not tag:
        return None
    key, sep, value = tag.partition("=")
    return TagTerm(key, value if sep else None)


# Error mapping
_STATUS_BY_ERROR = [
    (GeometryException, 400),
    (DocumentException, 400),
    (QueryException, 400),
    (InvalidMapping, 400),
    (IndexNotFound, 404),
    (IndexAlreadyExists, 409),
    (IndexUnavailable, 503),
    (IndexTimeout, 504),
]


def _register_error_handler(error_type: type[Exception], status_code: int) -> None:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info("api.request_failed", path=request.url.path, error=str(exc), status=status_code)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    app.add_exception_handler(error_type, handler)


for _error_type, _status in _STATUS_BY_ERROR:
    _register_error_handler(_error_type, _status)


# REST Endpoints
@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {"name": "OSM GeoIndex", "version": "0.1.0", "status": "running"}


@app.put("/indices/{name}", status_code=201)
async def create_index(name: str, request: CreateIndexRequest):
    """Create an index (node mapping by default)."""
    mapping = await IndexAdminService(app.state.store).create_index(
        name, request.shards, request.replicas, request.mapping
    )
    return {"index": name, "mapping": mapping.to_dict()}


@app.delete("/indices/{name}")
async def delete_index(name: str):
    """Drop an index and its documents."""
    await IndexAdminService(app.state.store).delete_index(name)
    return {"index": name, "deleted": True}


@app.post("/indices/{name}/nodes")
async def index_nodes(name: str, nodes: list[NodeIn]):
    """Bulk index nodes; every node is validated before anything is written."""
    documents = [
        NodeDocumentBuilder.create().id(node.id).location(node.lat, node.lon).add_tags(node.tags).build()
        for node in nodes
    ]
    written = await IndexWriter(app.state.store).index(name, *documents)
    return {"index": name, "indexed": written}


@app.post("/indices/{name}/refresh")
async def refresh_index(name: str):
    """Make written nodes searchable."""
    await IndexWriter(app.state.store).refresh(name)
    return {"index": name, "refreshed": True}


@app.get("/indices/{name}/nodes/{node_id}")
async def get_node(name: str, node_id: int):
    """Realtime get of a node source."""
    response = await app.state.store.get(name, EntityType.NODE, node_id)
    if not response.exists:
        raise HTTPException(status_code=404, detail=f"Node {node_id} not found in {name}")
    return {"id": response.id, "source": response.source}


@app.delete("/indices/{name}/nodes/{node_id}")
async def delete_node(name: str, node_id: int):
    """Delete a node; visible to search after the next refresh."""
    deleted = await app.state.store.delete(name, EntityType.NODE, node_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Node {node_id} not found in {name}")
    return {"id": str(node_id), "deleted": True}


@app.get("/indices/{name}/search/shape", response_model=SearchOut)
async def search_shape(
    name: str,
    lat: float,
    lon: float,
    distance_m: float = 0.0,
    tag: Optional[str] = None,
    size: Optional[int] = None,
):
    """Nodes whose shape intersects the square around (lat, lon)."""
    evaluator = SpatialQueryEvaluator(app.state.store, name)
    response = await evaluator.intersecting(
        default_projector.square(lat, lon, distance_m),
        base=_tag_filter(tag),
        size=size,
        timeout=app.state.config.request_timeout,
    )
    return _search_out(response)


@app.get("/indices/{name}/search/radius", response_model=SearchOut)
async def search_radius(
    name: str,
    lat: float,
    lon: float,
    distance: float,
    unit: str = "m",
    sort: bool = False,
    tag: Optional[str] = None,
    size: Optional[int] = None,
):
    """Nodes within ``distance`` of (lat, lon), optionally nearest first."""
    evaluator = SpatialQueryEvaluator(app.state.store, name)
    response = await evaluator.within(
        (lat, lon),
        distance,
        unit,
        base=_tag_filter(tag),
        sort=sort,
        size=size,
        timeout=app.state.config.request_timeout,
    )
    return _search_out(response)


if __name__ == "__main__":
    import uvicorn

    settings = GeoIndexConfig()
    uvicorn.run(
        "api:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
