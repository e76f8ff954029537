"""Shared fixtures for vector store tests.

IMPORTANT: We force ENVIRONMENT=testing BEFORE importing any package modules.
Otherwise the settings model would have already chosen .env instead of .env.test
at class definition time (model_config env_file decision).
"""

import os
from typing import List
from unittest.mock import AsyncMock

# Ensure test environment flag is present before importing package modules
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from langchain_core.embeddings import Embeddings
from qdrant_client.http import models

from qdrant_vectorstore.core.config import get_settings
from qdrant_vectorstore.vectorstores.factory import clear_vector_store_cache


class FakeEmbeddings(Embeddings):
    """Deterministic embeddings that record every call"""

    def __init__(self, size: int = 4):
        self.size = size
        self.query_calls: List[str] = []
        self.document_calls: List[List[str]] = []

    def _vector(self, text: str) -> List[float]:
        return [1.0] * (self.size - 1) + [float(len(text))]

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self.document_calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> List[float]:
        self.query_calls.append(text)
        return self._vector(text)


@pytest.fixture(autouse=True)
def reset_caches():
    """Start every test with fresh settings and no cached store."""
    get_settings.cache_clear()
    clear_vector_store_cache()
    yield
    get_settings.cache_clear()
    clear_vector_store_cache()


@pytest.fixture
def embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()


@pytest.fixture
def mock_client():
    """AsyncQdrantClient double with an existing 'documents' collection"""
    client = AsyncMock()
    client.get_collections.return_value = models.CollectionsResponse(
        collections=[models.CollectionDescription(name="documents")]
    )
    client.query_points.return_value = models.QueryResponse(points=[])
    return client
