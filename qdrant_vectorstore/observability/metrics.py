"""Prometheus metrics for vector store operations.

Metrics are registered on the default ``prometheus_client`` registry, so any
exporter the host application already runs picks them up.
"""

from prometheus_client import Counter, Histogram

# Vector store operation metrics
vector_similarity_search_seconds = Histogram(
    "vector_similarity_search_seconds",
    "Time spent on vector similarity search",
    ["backend", "collection"],
)

vector_query_requests_total = Counter(
    "vector_query_requests_total",
    "Total number of vector query requests",
    ["backend", "collection", "status"],
)

vector_ingest_batch_seconds = Histogram(
    "vector_ingest_batch_seconds",
    "Time spent on batch document ingestion",
    ["backend", "collection"],
)

vector_documents_ingested_total = Counter(
    "vector_documents_ingested_total",
    "Total number of documents ingested",
    ["backend", "collection"],
)

vector_documents_deleted_total = Counter(
    "vector_documents_deleted_total",
    "Total number of points deleted by id",
    ["backend", "collection"],
)


def record_vector_search(
    backend: str, collection: str, duration_seconds: float, success: bool = True
) -> None:
    """Record vector similarity search metrics.

    Args:
        backend: Vector store backend (qdrant)
        collection: Collection name
        duration_seconds: Time taken for the search
        success: Whether the search was successful
    """
    vector_similarity_search_seconds.labels(
        backend=backend, collection=collection
    ).observe(duration_seconds)
    status = "success" if success else "error"
    vector_query_requests_total.labels(
        backend=backend, collection=collection, status=status
    ).inc()


def record_vector_ingestion(
    backend: str, collection: str, document_count: int, duration_seconds: float
) -> None:
    """Record vector document ingestion metrics.

    Args:
        backend: Vector store backend (qdrant)
        collection: Collection name
        document_count: Number of documents ingested
        duration_seconds: Time taken for ingestion
    """
    vector_ingest_batch_seconds.labels(backend=backend, collection=collection).observe(
        duration_seconds
    )
    vector_documents_ingested_total.labels(
        backend=backend, collection=collection
    ).inc(document_count)


def record_vector_deletion(backend: str, collection: str, document_count: int) -> None:
    """Record the number of points deleted by id."""
    vector_documents_deleted_total.labels(backend=backend, collection=collection).inc(
        document_count
    )
