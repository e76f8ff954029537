"""
Qdrant Vector Store

LangChain ``VectorStore`` backed by a remote Qdrant collection.
Embeddings come from a LangChain ``Embeddings`` provider; storage, indexing
and similarity search are delegated to Qdrant through ``AsyncQdrantClient``.
"""

import json
import logging
import time
import uuid
from contextlib import contextmanager
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import numpy as np
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_core.vectorstores import VectorStore
from langchain_core.vectorstores.utils import maximal_marginal_relevance
from qdrant_client import AsyncQdrantClient
from qdrant_client.http import models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from ..core.config import get_settings
from ..observability.metrics import (
    record_vector_deletion,
    record_vector_ingestion,
    record_vector_search,
)
from .exceptions import (
    QdrantRemoteError,
    VectorStoreConfigurationError,
    VectorStoreInvalidArgumentError,
)
from .filters import FilterLike, to_qdrant_filter

logger = logging.getLogger(__name__)

BACKEND = "qdrant"
DELETE_BATCH_SIZE = 1000
DEFAULT_FETCH_K = 20

DISTANCE_MAP = {
    "cosine": models.Distance.COSINE,
    "euclidean": models.Distance.EUCLID,
    "dot": models.Distance.DOT,
}


def _remote_error_detail(error: UnexpectedResponse) -> Optional[str]:
    """Pull ``status.error`` out of a Qdrant error body, if there is one."""
    if not error.content:
        return None
    try:
        body = json.loads(error.content)
    except (TypeError, ValueError):
        if isinstance(error.content, bytes):
            return error.content.decode("utf-8", errors="replace")
        return str(error.content)

    status = body.get("status") if isinstance(body, dict) else None
    if isinstance(status, dict):
        return status.get("error")
    return None


class QdrantVectorStore(VectorStore):
    """
    Qdrant implementation of the LangChain vector store interface.

    Each document is stored as one point whose payload holds the page
    content under ``content_payload_key``, the metadata under
    ``metadata_payload_key`` and any per-document custom payload fields.

    All operations are asynchronous. Connection details not passed
    explicitly are read from settings (``QDRANT_URL``, ``QDRANT_API_KEY``,
    ``QDRANT_COLLECTION_NAME``, ...).
    """

    def __init__(
        self,
        embeddings: Embeddings,
        *,
        client: Optional[AsyncQdrantClient] = None,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        collection_name: Optional[str] = None,
        collection_config: Optional[Dict[str, Any]] = None,
        content_payload_key: Optional[str] = None,
        metadata_payload_key: Optional[str] = None,
        distance: Optional[str] = None,
    ):
        settings = get_settings()

        url = url or settings.qdrant_url
        api_key = api_key or settings.qdrant_api_key
        if client is None and not url:
            raise VectorStoreConfigurationError(
                "Qdrant client or url address must be set."
            )

        self._embeddings = embeddings
        self.collection_name = collection_name or settings.qdrant_collection_name
        self.collection_config = collection_config
        self.content_payload_key = (
            content_payload_key or settings.qdrant_content_payload_key
        )
        self.metadata_payload_key = (
            metadata_payload_key or settings.qdrant_metadata_payload_key
        )
        if self.content_payload_key == self.metadata_payload_key:
            raise VectorStoreConfigurationError(
                f"Content and metadata payload keys must differ "
                f"(both are '{self.content_payload_key}')"
            )

        distance = distance or settings.vector_distance
        if distance not in DISTANCE_MAP:
            raise VectorStoreConfigurationError(
                f"Unsupported distance metric: {distance}. "
                f"Supported metrics: {', '.join(DISTANCE_MAP)}"
            )
        self.distance = DISTANCE_MAP[distance]

        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self._owns_client = client is None
        if client is None:
            client_kwargs = {"url": url}
            if api_key:
                client_kwargs["api_key"] = api_key
            client = AsyncQdrantClient(**client_kwargs)
            self.logger.debug(f"Created async Qdrant client for URL: {url}")
        self.client = client

        self.logger.info(
            f"Initialized Qdrant vector store for collection '{self.collection_name}'"
        )

    @property
    def embeddings(self) -> Embeddings:
        return self._embeddings

    # ------------------------------------------------------------------
    # Remote error handling
    # ------------------------------------------------------------------

    @contextmanager
    def _handle_remote_errors(self, operation: str):
        """Wrap qdrant-client failures into QdrantRemoteError."""
        try:
            yield
        except UnexpectedResponse as e:
            detail = _remote_error_detail(e)
            message = f"{e.status_code} {e.reason_phrase}: {detail}"
            self.logger.error(
                f"Qdrant {operation} failed on collection '{self.collection_name}': {message}"
            )
            raise QdrantRemoteError(
                message,
                operation=operation,
                status_code=e.status_code,
                reason=e.reason_phrase,
                details={"collection": self.collection_name, "error": detail},
            ) from e
        except ResponseHandlingException as e:
            message = f"Undefined error code {e.source}"
            self.logger.error(
                f"Qdrant {operation} failed on collection '{self.collection_name}': {message}"
            )
            raise QdrantRemoteError(
                message,
                operation=operation,
                details={"collection": self.collection_name},
            ) from e

    # ------------------------------------------------------------------
    # Collection management
    # ------------------------------------------------------------------

    async def aensure_collection(self) -> bool:
        """
        Ensure the collection exists, creating it if necessary.

        Without an explicit ``collection_config`` the vector size is taken
        from a probe embedding and the configured distance is used.

        Returns:
            True if collection was created, False if it already existed
        """
        with self._handle_remote_errors("get_collections"):
            response = await self.client.get_collections()

        collection_names = [collection.name for collection in response.collections]
        if self.collection_name in collection_names:
            self.logger.debug(f"Collection '{self.collection_name}' already exists")
            return False

        collection_config = self.collection_config
        if collection_config is None:
            probe = await self.embeddings.aembed_query("test")
            collection_config = {
                "vectors_config": models.VectorParams(
                    size=len(probe),
                    distance=self.distance,
                )
            }
            self.logger.info(f"Auto-detected embedding dimension: {len(probe)}")

        with self._handle_remote_errors("create_collection"):
            await self.client.create_collection(
                collection_name=self.collection_name,
                **collection_config,
            )

        self.logger.info(f"Created Qdrant collection '{self.collection_name}'")
        return True

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def aadd_documents(
        self,
        documents: List[Document],
        *,
        ids: Optional[Sequence[str]] = None,
        custom_payload: Optional[Sequence[Dict[str, Any]]] = None,
        **kwargs: Any,
    ) -> List[str]:
        """Embed the documents and store them as points.

        Args:
            documents: Documents to add
            ids: Optional point ids (override ``Document.id``)
            custom_payload: Optional extra payload fields, one mapping per document

        Returns:
            List of ids of the stored points
        """
        texts = [document.page_content for document in documents]
        vectors = await self.embeddings.aembed_documents(texts)
        return await self.aadd_vectors(
            vectors, documents, ids=ids, custom_payload=custom_payload
        )

    async def aadd_texts(
        self,
        texts: Iterable[str],
        metadatas: Optional[List[dict]] = None,
        *,
        ids: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> List[str]:
        documents = [
            Document(page_content=text, metadata=metadatas[i] if metadatas else {})
            for i, text in enumerate(texts)
        ]
        return await self.aadd_documents(documents, ids=ids, **kwargs)

    async def aadd_vectors(
        self,
        vectors: List[List[float]],
        documents: List[Document],
        *,
        ids: Optional[Sequence[Union[str, int]]] = None,
        custom_payload: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> List[str]:
        """
        Store precomputed vectors, one point per vector/document pair.

        ``vectors`` and ``documents`` must have the same length.

        Returns:
            List of ids of the stored points
        """
        if len(vectors) == 0:
            return []

        reserved = {self.content_payload_key, self.metadata_payload_key}
        if custom_payload:
            for extra in custom_payload:
                clashing = reserved.intersection(extra or {})
                if clashing:
                    raise VectorStoreInvalidArgumentError(
                        f"Custom payload cannot use reserved keys: {sorted(clashing)}"
                    )

        await self.aensure_collection()

        points = []
        for idx, embedding in enumerate(vectors):
            document = documents[idx]
            point_id = ids[idx] if ids else None
            if point_id is None:
                point_id = document.id
            if point_id is None:
                point_id = str(uuid.uuid4())
            payload = {
                self.content_payload_key: document.page_content,
                self.metadata_payload_key: document.metadata,
            }
            if custom_payload and idx < len(custom_payload) and custom_payload[idx]:
                payload.update(custom_payload[idx])

            points.append(
                models.PointStruct(id=point_id, vector=embedding, payload=payload)
            )

        start_time = time.time()
        with self._handle_remote_errors("upsert"):
            await self.client.upsert(
                collection_name=self.collection_name,
                points=points,
                wait=True,
            )
        record_vector_ingestion(
            BACKEND, self.collection_name, len(points), time.time() - start_time
        )

        self.logger.info(
            f"Added {len(points)} documents to Qdrant collection '{self.collection_name}'"
        )
        return [str(point.id) for point in points]

    async def adelete(
        self,
        ids: Optional[List[str]] = None,
        *,
        filter: Optional[FilterLike] = None,
        **kwargs: Any,
    ) -> Optional[bool]:
        """
        Delete points by id or by filter.

        Exactly one of ``ids`` and ``filter`` must be given. Ids are sent in
        chunks of ``DELETE_BATCH_SIZE``; a failing chunk stops the rest.

        Returns:
            True once every delete request was acknowledged
        """
        if ids is not None and filter is not None:
            raise VectorStoreInvalidArgumentError(
                "Provide either ids or filter, not both."
            )
        if ids is None and filter is None:
            raise VectorStoreInvalidArgumentError(
                "Either ids or filter must be provided."
            )

        if ids is not None:
            for i in range(0, len(ids), DELETE_BATCH_SIZE):
                batch_ids = list(ids[i : i + DELETE_BATCH_SIZE])
                with self._handle_remote_errors("delete"):
                    await self.client.delete(
                        collection_name=self.collection_name,
                        points_selector=models.PointIdsList(points=batch_ids),
                        wait=True,
                        ordering=models.WriteOrdering.WEAK,
                    )
                record_vector_deletion(BACKEND, self.collection_name, len(batch_ids))
            self.logger.info(
                f"Deleted {len(ids)} points from Qdrant collection '{self.collection_name}'"
            )
            return True

        qdrant_filter = to_qdrant_filter(filter, self.metadata_payload_key)
        if qdrant_filter is None:
            raise VectorStoreInvalidArgumentError(
                "Filter must contain at least one condition"
            )
        with self._handle_remote_errors("delete"):
            await self.client.delete(
                collection_name=self.collection_name,
                points_selector=models.FilterSelector(filter=qdrant_filter),
                wait=True,
                ordering=models.WriteOrdering.WEAK,
            )
        self.logger.info(
            f"Deleted points matching filter from Qdrant collection '{self.collection_name}'"
        )
        return True

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _document_from_point(self, point: models.ScoredPoint) -> Document:
        payload = point.payload or {}
        return Document(
            id=str(point.id),
            page_content=payload.get(self.content_payload_key) or "",
            metadata=payload.get(self.metadata_payload_key) or {},
        )

    async def _aquery(
        self,
        vector: Sequence[float],
        limit: int,
        filter: Optional[FilterLike],
        with_vectors: bool,
    ) -> List[models.ScoredPoint]:
        await self.aensure_collection()

        start_time = time.time()
        success = False
        try:
            with self._handle_remote_errors("search"):
                response = await self.client.query_points(
                    collection_name=self.collection_name,
                    query=list(vector),
                    limit=limit,
                    query_filter=to_qdrant_filter(filter, self.metadata_payload_key),
                    with_payload=[self.metadata_payload_key, self.content_payload_key],
                    with_vectors=with_vectors,
                )
            success = True
        finally:
            record_vector_search(
                BACKEND, self.collection_name, time.time() - start_time, success=success
            )

        self.logger.debug(
            f"Found {len(response.points)} points in collection '{self.collection_name}'"
        )
        return response.points

    async def asimilarity_search_vector_with_score(
        self,
        embedding: Optional[Sequence[float]],
        k: int = 4,
        filter: Optional[FilterLike] = None,
    ) -> List[Tuple[Document, float]]:
        """
        Search by vector, returning documents with their Qdrant scores.

        Results keep the order returned by Qdrant. An empty or missing
        vector returns an empty list without contacting the server.
        """
        if embedding is None or len(embedding) == 0:
            return []

        points = await self._aquery(embedding, k, filter, with_vectors=False)
        return [(self._document_from_point(point), point.score) for point in points]

    async def asimilarity_search_with_score(
        self,
        query: str,
        k: int = 4,
        filter: Optional[FilterLike] = None,
        **kwargs: Any,
    ) -> List[Tuple[Document, float]]:
        embedding = await self.embeddings.aembed_query(query)
        return await self.asimilarity_search_vector_with_score(embedding, k, filter)

    async def asimilarity_search_by_vector(
        self,
        embedding: List[float],
        k: int = 4,
        filter: Optional[FilterLike] = None,
        **kwargs: Any,
    ) -> List[Document]:
        results = await self.asimilarity_search_vector_with_score(embedding, k, filter)
        return [document for document, _ in results]

    async def asimilarity_search(
        self,
        query: str,
        k: int = 4,
        filter: Optional[FilterLike] = None,
        **kwargs: Any,
    ) -> List[Document]:
        results = await self.asimilarity_search_with_score(query, k, filter)
        return [document for document, _ in results]

    async def amax_marginal_relevance_search_by_vector(
        self,
        embedding: List[float],
        k: int = 4,
        fetch_k: int = DEFAULT_FETCH_K,
        lambda_mult: float = 0.5,
        filter: Optional[FilterLike] = None,
        **kwargs: Any,
    ) -> List[Document]:
        """
        Return documents selected by maximal marginal relevance.

        Fetches ``fetch_k`` neighbours with their vectors and lets
        ``maximal_marginal_relevance`` pick ``k`` of them. ``lambda_mult``
        goes from 0 (maximum diversity) to 1 (maximum relevance). Documents
        are returned in selection order.
        """
        points = await self._aquery(embedding, fetch_k, filter, with_vectors=True)
        embedding_list = [point.vector for point in points]
        mmr_indexes = maximal_marginal_relevance(
            np.array(embedding, dtype=np.float32),
            embedding_list,
            lambda_mult=lambda_mult,
            k=k,
        )
        return [self._document_from_point(points[idx]) for idx in mmr_indexes]

    async def amax_marginal_relevance_search(
        self,
        query: str,
        k: int = 4,
        fetch_k: int = DEFAULT_FETCH_K,
        lambda_mult: float = 0.5,
        filter: Optional[FilterLike] = None,
        **kwargs: Any,
    ) -> List[Document]:
        if not query:
            return []

        query_embedding = await self.embeddings.aembed_query(query)
        return await self.amax_marginal_relevance_search_by_vector(
            query_embedding,
            k=k,
            fetch_k=fetch_k,
            lambda_mult=lambda_mult,
            filter=filter,
        )

    def _select_relevance_score_fn(self) -> Callable[[float], float]:
        # Qdrant reports similarities for cosine and dot, distances for euclid
        if self.distance == models.Distance.EUCLID:
            return self._euclidean_relevance_score_fn
        return lambda score: score

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    async def afrom_texts(
        cls,
        texts: List[str],
        embedding: Embeddings,
        metadatas: Optional[Union[List[dict], dict]] = None,
        *,
        ids: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> "QdrantVectorStore":
        """Create a store and upload ``texts``.

        ``metadatas`` is either one mapping per text or a single mapping
        shared by all of them.
        """
        documents = []
        for i, text in enumerate(texts):
            metadata = metadatas[i] if isinstance(metadatas, list) else metadatas
            documents.append(Document(page_content=text, metadata=metadata or {}))
        return await cls.afrom_documents(documents, embedding, ids=ids, **kwargs)

    @classmethod
    async def afrom_documents(
        cls,
        documents: List[Document],
        embedding: Embeddings,
        **kwargs: Any,
    ) -> "QdrantVectorStore":
        """Create a store and upload ``documents``.

        Accepts ``ids`` and ``custom_payload`` in addition to the
        constructor keyword arguments.
        """
        ids = kwargs.pop("ids", None)
        custom_payload = kwargs.pop("custom_payload", None)
        instance = cls(embedding, **kwargs)
        await instance.aadd_documents(documents, ids=ids, custom_payload=custom_payload)
        return instance

    @classmethod
    async def afrom_existing_collection(
        cls, embedding: Embeddings, **kwargs: Any
    ) -> "QdrantVectorStore":
        """Create a store for a collection, creating it if it is missing."""
        instance = cls(embedding, **kwargs)
        await instance.aensure_collection()
        return instance

    async def aclose(self) -> None:
        """Close the Qdrant client if this store created it"""
        if self._owns_client:
            await self.client.close()
            self.logger.debug("Closed Qdrant client")

    # ------------------------------------------------------------------
    # Synchronous interface
    # ------------------------------------------------------------------

    def similarity_search(
        self, query: str, k: int = 4, **kwargs: Any
    ) -> List[Document]:
        raise NotImplementedError(
            "QdrantVectorStore is async-only; use asimilarity_search instead"
        )

    @classmethod
    def from_texts(
        cls,
        texts: List[str],
        embedding: Embeddings,
        metadatas: Optional[List[dict]] = None,
        *,
        ids: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> "QdrantVectorStore":
        raise NotImplementedError(
            "QdrantVectorStore is async-only; use afrom_texts instead"
        )
