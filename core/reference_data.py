# core/reference_data.py

import logging
from typing import Optional
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from .config import settings
from .exceptions import KnowledgeStoreError

logger = logging.getLogger(__name__)

class ReferenceDataManager:
    """Point lookups for districts and pepper varieties."""

    def __init__(self, db=None, db_name: Optional[str] = None):
        if db is None:
            self.client = MongoClient(settings.final_mongo_uri)
            db = self.client[db_name or settings.db_name]
        self.db = db
        self.districts_collection = self.db["districts"]
        self.varieties_collection = self.db["pepper_varieties"]
        logger.info("---REFERENCE DATA: Connected to MongoDB---")

    def _find_name(self, collection, key: str, value) -> Optional[str]:
        try:
            data = collection.find_one({key: value}, {"name": 1})
        except PyMongoError as e:
            raise KnowledgeStoreError(f"Lookup of {key}={value} failed: {e}") from e
        if data:
            return data.get("name") or None
        return None

    def get_district_name(self, district_id: int) -> Optional[str]:
        return self._find_name(self.districts_collection, "district_id", district_id)

    def get_variety_name(self, variety_id: str) -> Optional[str]:
        return self._find_name(self.varieties_collection, "variety_id", variety_id)
