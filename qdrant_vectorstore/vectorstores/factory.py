"""
Vector Store Factory

Factory functions for creating Qdrant vector store instances
based on configuration settings.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from langchain_core.embeddings import Embeddings

from ..core.config import get_settings
from .qdrant import QdrantVectorStore

logger = logging.getLogger(__name__)


def create_vector_store(
    embeddings: Optional[Embeddings] = None, config: Optional[Dict[str, Any]] = None
) -> QdrantVectorStore:
    """
    Create a Qdrant vector store instance.

    Args:
        embeddings: Embeddings provider (sentence-transformers model from settings if None)
        config: Optional constructor keyword arguments (uses settings if None)

    Returns:
        Vector store instance

    Raises:
        VectorStoreConfigurationError: If connection details are missing
        ImportError: If sentence-transformers is needed but not installed
    """
    if config is None:
        config = _get_config_from_settings()

    if embeddings is None:
        try:
            from .embeddings import SentenceTransformerEmbeddings
        except ImportError as e:
            raise ImportError(
                f"Embedding dependencies not available: {e}. "
                "Pass an Embeddings instance or install with: "
                "pip install qdrant-vectorstore[embeddings]"
            ) from e
        embeddings = SentenceTransformerEmbeddings(
            get_settings().vector_embedding_model
        )

    return QdrantVectorStore(embeddings, **config)


@lru_cache(maxsize=1)
def get_vector_store() -> Optional[QdrantVectorStore]:
    """
    Get the configured vector store instance.

    This function is cached to ensure singleton behavior.

    Returns:
        Vector store instance or None if no Qdrant URL is configured
    """
    settings = get_settings()

    if not settings.is_qdrant_configured:
        logger.info("Qdrant URL is not configured; vector store disabled")
        return None

    store = create_vector_store()
    logger.info(f"Created Qdrant vector store for '{settings.qdrant_url}'")
    return store


def _get_config_from_settings() -> Dict[str, Any]:
    """Extract vector store configuration from settings"""
    settings = get_settings()

    return {
        "url": settings.qdrant_url,
        "api_key": settings.qdrant_api_key,
        "collection_name": settings.qdrant_collection_name,
        "content_payload_key": settings.qdrant_content_payload_key,
        "metadata_payload_key": settings.qdrant_metadata_payload_key,
        "distance": settings.vector_distance,
    }


def clear_vector_store_cache():
    """Clear the cached store instance (useful for testing)"""
    get_vector_store.cache_clear()
    logger.debug("Cleared vector store cache")
