"""Pytest configuration and shared fixtures."""

import pytest

from entity.builder import NodeDocumentBuilder
from entity.document import NodeDocument
from search.admin import IndexAdminService
from search.evaluator import SpatialQueryEvaluator
from search.store import DocumentStore
from search.writer import IndexWriter

INDEX_NAME = "shape-test"
NODE_MAPPING_JSON = '{"properties":{"centroid":{"type":"geo_point"},"shape":{"type":"geo_shape"}}}'

# Two traffic signals roughly 300m apart
SIGNAL_ID = 1854801716
SIGNAL_LAT, SIGNAL_LON = 48.675652, 2.384955
NEARBY_ID = 1854801717
NEARBY_LAT, NEARBY_LON = 48.676455, 2.380899


def make_node(node_id: int, lat: float, lon: float, **tags: str) -> NodeDocument:
    """Build a node with the given tags (highway=traffic_signals by default)."""
    builder = NodeDocumentBuilder.create().id(node_id).location(lat, lon)
    builder.add_tags(tags or {"highway": "traffic_signals"})
    return builder.build()


@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path."""
    return str(tmp_path / "test_geoindex.db")


@pytest.fixture
async def store(temp_db_path):
    """Create and initialize a document store for testing."""
    document_store = DocumentStore(db_path=temp_db_path)
    await document_store.initialize()
    yield document_store
    await document_store.close()


@pytest.fixture
async def node_index(store):
    """Create the node index with geo mappings."""
    await IndexAdminService(store).create_index(INDEX_NAME, 1, 0, NODE_MAPPING_JSON)
    return INDEX_NAME


@pytest.fixture
def writer(store):
    """Index writer without retries."""
    return IndexWriter(store, retries=0)


@pytest.fixture
def evaluator(store, node_index):
    """Spatial query evaluator bound to the node index."""
    return SpatialQueryEvaluator(store, node_index, retries=0)


@pytest.fixture
def signal_node():
    """The traffic signal node."""
    return make_node(SIGNAL_ID, SIGNAL_LAT, SIGNAL_LON)


@pytest.fixture
def nearby_node():
    """A second traffic signal about 300m away."""
    return make_node(NEARBY_ID, NEARBY_LAT, NEARBY_LON)
