"""
Vector Store Module

Qdrant-backed implementation of the LangChain vector store interface.
"""

from .exceptions import (
    QdrantRemoteError,
    VectorStoreConfigurationError,
    VectorStoreError,
    VectorStoreInvalidArgumentError,
)
from .factory import create_vector_store, get_vector_store
from .qdrant import QdrantVectorStore

__all__ = [
    "QdrantVectorStore",
    "QdrantRemoteError",
    "VectorStoreConfigurationError",
    "VectorStoreError",
    "VectorStoreInvalidArgumentError",
    "create_vector_store",
    "get_vector_store",
]
