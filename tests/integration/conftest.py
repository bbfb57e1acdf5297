"""
Integration test configuration and fixtures.

Provides the 1000-record dataset used by the end-to-end export scenarios,
served from the in-memory backend, and an optional real Elasticsearch
connection (set ELASTICSEARCH_URL to enable those tests).
"""

import os
import uuid

import pytest
import pytest_asyncio

from async_search_export.backends import InMemoryBackend

DATASET_SIZE = 1000


def dataset_document(i: int) -> dict:
    """Build the i-th dataset record (1-based)."""
    return {
        "aaa": f"test {i}",
        "bbb": i,
        "ccc": "2012-01-01:00:00.000Z",
        "eee": {
            "fff": f"TEST {i}",
            "ggg": i,
            "hhh": "2013-01-01:00:00.000Z",
        },
    }


def pytest_collection_modifyitems(config, items):
    """Mark everything in this directory as an integration test."""
    for item in items:
        if "integration" in str(item.path):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def dataset_backend():
    """In-memory backend holding index 'dataset' with 1000 'item' records."""
    backend = InMemoryBackend()
    for i in range(1, DATASET_SIZE + 1):
        backend.index_document("dataset", dataset_document(i), doc_id=str(i), doc_type="item")
    return backend


@pytest_asyncio.fixture
async def es_client():
    """AsyncElasticsearch client, or skip when no cluster is configured."""
    url = os.environ.get("ELASTICSEARCH_URL")
    if not url:
        pytest.skip("ELASTICSEARCH_URL is not set")

    from elasticsearch import AsyncElasticsearch

    client = AsyncElasticsearch(url)
    try:
        yield client
    finally:
        await client.close()


@pytest_asyncio.fixture
async def es_dataset(es_client):
    """Create a uniquely named index holding the dataset, dropped afterwards."""
    index = f"dataset_{uuid.uuid4().hex[:8]}"
    operations = []
    for i in range(1, DATASET_SIZE + 1):
        operations.append({"index": {"_index": index, "_id": str(i)}})
        operations.append(dataset_document(i))

    await es_client.bulk(operations=operations, refresh=True)
    try:
        yield index
    finally:
        await es_client.indices.delete(index=index, ignore_unavailable=True)
