import os
import sys
import glob
import json
import hashlib
import logging
from typing import List
from core.embedding_service import EmbeddingService
from core.knowledge_store import MongoKnowledgeStore
from core.models import KnowledgeRecord

logger = logging.getLogger(__name__)

def generate_chunk_id(title: str, content: str) -> str:
    """Stable hash ID for a knowledge record."""
    return hashlib.md5(f"{title}\n{content}".encode('utf-8')).hexdigest()

def load_records(path: str) -> List[dict]:
    """
    Reads knowledge records from a JSON file, or every *.json file under a directory.
    Each file holds a list of objects with at least `title` and `content`.
    """
    if os.path.isdir(path):
        files = sorted(glob.glob(os.path.join(path, "**/*.json"), recursive=True))
    else:
        files = [path]

    raw = []
    for file_path in files:
        logger.info(f"Loading {file_path}...")
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = [data]
        raw.extend(data)
    return raw

def ingest(path: str, store, embedding_service: EmbeddingService) -> int:
    """Embeds and inserts records not already present. Returns how many were added."""
    raw_records = load_records(path)
    if not raw_records:
        logger.info(f"No knowledge records found in {path}")
        return 0

    existing_ids = store.existing_chunk_ids()
    new_records = []
    for item in raw_records:
        item = dict(item)
        item.pop("embedding", None)
        chunk_id = item.get("chunk_id") or generate_chunk_id(item["title"], item["content"])
        if chunk_id in existing_ids:
            continue
        existing_ids.add(chunk_id)
        item["chunk_id"] = chunk_id
        item["embedding"] = embedding_service.generate_embedding(item["content"])
        new_records.append(KnowledgeRecord(**item))

    if not new_records:
        logger.info("--- INGESTION: No new records to add (duplicates skipped) ---")
        return 0

    logger.info(f"--- INGESTION: Adding {len(new_records)} of {len(raw_records)} records ---")
    return store.add_records(new_records)

if __name__ == "__main__":
    from dotenv import load_dotenv
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    if len(sys.argv) != 2:
        print("Usage: python ingest_knowledge.py <file.json | directory>")
        sys.exit(1)

    added = ingest(sys.argv[1], MongoKnowledgeStore(), EmbeddingService())
    print(f"--- INGESTION COMPLETE: {added} records added ---")
