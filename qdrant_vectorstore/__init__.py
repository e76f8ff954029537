"""
Qdrant Vector Store

LangChain vector store adapter for the Qdrant vector database.
"""

from .vectorstores import (
    QdrantRemoteError,
    QdrantVectorStore,
    VectorStoreConfigurationError,
    VectorStoreError,
    VectorStoreInvalidArgumentError,
    create_vector_store,
    get_vector_store,
)

__all__ = [
    "QdrantVectorStore",
    "QdrantRemoteError",
    "VectorStoreConfigurationError",
    "VectorStoreError",
    "VectorStoreInvalidArgumentError",
    "create_vector_store",
    "get_vector_store",
]
