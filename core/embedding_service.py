# core/embedding_service.py

import logging
from typing import List, Optional
from huggingface_hub import InferenceClient
from langchain_core.embeddings import Embeddings
from langchain_openai import OpenAIEmbeddings
from .config import settings, Settings
from .exceptions import EmbeddingError

logger = logging.getLogger(__name__)

class HuggingFaceInferenceEmbeddings(Embeddings):
    """LangChain embeddings backed by the Hugging Face Inference API (feature extraction)."""

    def __init__(self, model: str, token: Optional[str] = None):
        self.model = model
        self.client = InferenceClient(token=token)

    def embed_query(self, text: str) -> List[float]:
        vector = self.client.feature_extraction(text, model=self.model)
        # Sentence-transformer models return [dim]; token models return [1, dim]
        if vector.ndim > 1:
            vector = vector.reshape(-1, vector.shape[-1]).mean(axis=0)
        return vector.astype(float).tolist()

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_query(t) for t in texts]

def build_embeddings(config: Settings = settings) -> Embeddings:
    """Picks the embedding backend named in settings."""
    if config.embedding_provider == "huggingface":
        return HuggingFaceInferenceEmbeddings(config.embedding_model, token=config.huggingfacehub_api_token)
    if config.embedding_provider == "openai":
        return OpenAIEmbeddings(api_key=config.final_embedding_api_key, model=config.embedding_model)
    raise ValueError(f"Unknown embedding provider: {config.embedding_provider}")

class EmbeddingService:
    """Turns free text into a fixed-length vector. Failures are fatal for the request."""

    def __init__(self, embeddings: Optional[Embeddings] = None):
        self.embeddings = embeddings or build_embeddings()

    def generate_embedding(self, text: str) -> List[float]:
        try:
            vector = self.embeddings.embed_query(text)
        except Exception as e:
            logger.error(f"---EMBEDDING: Failed to embed text: {e}---")
            raise EmbeddingError(str(e)) from e
        logger.debug(f"---EMBEDDING: Generated vector of dimension {len(vector)}---")
        return list(vector)
