"""
Sentence-Transformers Embeddings

Local embeddings provider used by the settings-based factory when no
LangChain ``Embeddings`` instance is supplied.
"""

import logging
from typing import List, Optional

from langchain_core.embeddings import Embeddings
from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class SentenceTransformerEmbeddings(Embeddings):
    """LangChain embeddings wrapper around a sentence-transformers model"""

    def __init__(self, model_name: str):
        self.model_name = model_name
        self._model: Optional[SentenceTransformer] = None

    def _get_model(self) -> SentenceTransformer:
        """Get or create embedding model"""
        if self._model is None:
            self._model = SentenceTransformer(self.model_name)
            logger.info(f"Loaded embedding model: {self.model_name}")

        return self._model

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        return self._get_model().encode(texts, convert_to_tensor=False).tolist()

    def embed_query(self, text: str) -> List[float]:
        return self._get_model().encode([text], convert_to_tensor=False)[0].tolist()
