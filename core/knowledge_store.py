# core/knowledge_store.py

import logging
from typing import List, Optional, Sequence
import numpy as np
from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from .config import settings
from .models import KnowledgeRecord, RetrievalContext
from .knowledge_filters import build_mongo_filter, record_matches
from .exceptions import KnowledgeStoreError

logger = logging.getLogger(__name__)

def rank_by_l2_distance(records: Sequence[KnowledgeRecord], query_embedding: Sequence[float],
                        limit: int) -> List[KnowledgeRecord]:
    """
    Orders records by Euclidean distance to the query, closest first, and keeps `limit`.
    Equal distances keep the input order.
    """
    if not records or limit <= 0:
        return []
    query = np.asarray(query_embedding, dtype=float)
    try:
        matrix = np.asarray([r.embedding for r in records], dtype=float)
        distances = np.linalg.norm(matrix - query, axis=1)
    except ValueError as e:
        raise KnowledgeStoreError(f"Embedding dimension mismatch: {e}") from e
    order = np.argsort(distances, kind="stable")[:limit]
    return [records[i] for i in order]

class InMemoryKnowledgeStore:
    """Knowledge collection held in a list. Used for tests and local experiments."""

    def __init__(self, records: Optional[List[KnowledgeRecord]] = None):
        self.records = list(records or [])

    def add_records(self, records: List[KnowledgeRecord]) -> int:
        self.records.extend(records)
        return len(records)

    def existing_chunk_ids(self) -> set:
        return {r.chunk_id for r in self.records if r.chunk_id}

    def search(self, query_embedding: Sequence[float], context: RetrievalContext,
               limit: int) -> List[KnowledgeRecord]:
        candidates = [r for r in self.records if record_matches(r, context)]
        return rank_by_l2_distance(candidates, query_embedding, limit)

class MongoKnowledgeStore:
    """
    Knowledge collection in MongoDB.
    The hard filters run inside MongoDB; only surviving records are ranked.
    """

    def __init__(self, db=None, db_name: Optional[str] = None):
        if db is None:
            self.client = MongoClient(settings.final_mongo_uri)
            db = self.client[db_name or settings.db_name]
        self.db = db
        self.knowledge_collection = self.db["pepper_knowledge"]
        logger.info("---KNOWLEDGE STORE: Connected to MongoDB---")

    def add_records(self, records: List[KnowledgeRecord]) -> int:
        if not records:
            return 0
        try:
            self.knowledge_collection.insert_many([r.model_dump(mode="json") for r in records])
        except PyMongoError as e:
            raise KnowledgeStoreError(f"Insert failed: {e}") from e
        logger.info(f"---KNOWLEDGE STORE: Inserted {len(records)} records---")
        return len(records)

    def existing_chunk_ids(self) -> set:
        try:
            return set(self.knowledge_collection.distinct("chunk_id")) - {None}
        except PyMongoError as e:
            raise KnowledgeStoreError(f"Reading chunk ids failed: {e}") from e

    def search(self, query_embedding: Sequence[float], context: RetrievalContext,
               limit: int) -> List[KnowledgeRecord]:
        query = build_mongo_filter(context)
        try:
            # Natural order keeps ties stable between identical queries
            cursor = self.knowledge_collection.find(query, {"_id": 0})
            candidates = [KnowledgeRecord(**doc) for doc in cursor]
        except PyMongoError as e:
            raise KnowledgeStoreError(f"Knowledge query failed: {e}") from e
        except ValidationError as e:
            raise KnowledgeStoreError(f"Malformed knowledge record: {e}") from e
        logger.info(f"---KNOWLEDGE STORE: {len(candidates)} records passed filters---")
        return rank_by_l2_distance(candidates, query_embedding, limit)
