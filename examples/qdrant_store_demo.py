#!/usr/bin/env python3
"""
Example script demonstrating the Qdrant vector store.

Requires a running Qdrant instance and the embeddings extra:

    docker run -p 6333:6333 qdrant/qdrant
    pip install -e ".[embeddings]"
    QDRANT_URL=http://localhost:6333 python examples/qdrant_store_demo.py
"""

import asyncio

from langchain_core.documents import Document

from qdrant_vectorstore.core.logging_config import setup_logging
from qdrant_vectorstore.vectorstores.factory import create_vector_store


async def main():
    setup_logging()
    store = create_vector_store()

    print("\n" + "=" * 60)
    print("Adding documents")
    print("=" * 60)
    ids = await store.aadd_documents(
        [
            Document(page_content="Qdrant is a vector database", metadata={"topic": "db"}),
            Document(page_content="Cats sleep most of the day", metadata={"topic": "pets"}),
            Document(page_content="Vector search finds similar items", metadata={"topic": "db"}),
        ]
    )
    print(f"Stored ids: {ids}")

    print("\n" + "=" * 60)
    print("Similarity search")
    print("=" * 60)
    for document, score in await store.asimilarity_search_with_score(
        "what is a vector database?", k=2
    ):
        print(f"{score:.3f}  {document.page_content}")

    print("\n" + "=" * 60)
    print("Maximal marginal relevance search (topic=db)")
    print("=" * 60)
    for document in await store.amax_marginal_relevance_search(
        "vector database", k=2, filter={"topic": "db"}
    ):
        print(f"-  {document.page_content}")

    await store.adelete(ids)
    print("\n✓ Demo documents deleted")
    await store.aclose()


if __name__ == "__main__":
    asyncio.run(main())
