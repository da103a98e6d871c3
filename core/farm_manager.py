# core/farm_manager.py

import logging
from typing import Optional
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from .models import FarmProfile
from .config import settings
from .exceptions import KnowledgeStoreError

logger = logging.getLogger(__name__)

class FarmManager:
    """Read access to the farm registry in MongoDB."""

    def __init__(self, db=None, db_name: Optional[str] = None):
        if db is None:
            self.client = MongoClient(settings.final_mongo_uri)
            db = self.client[db_name or settings.db_name]
        self.db = db
        self.farms_collection = self.db["farms"]
        logger.info("---FARM MANAGER: Connected to MongoDB---")

    def get_farm(self, farm_id: str) -> Optional[FarmProfile]:
        """Returns the farm, or None when it is not registered."""
        try:
            data = self.farms_collection.find_one({"farm_id": farm_id})
        except PyMongoError as e:
            raise KnowledgeStoreError(f"Farm lookup failed for {farm_id}: {e}") from e
        if data:
            data.pop("_id", None)
            return FarmProfile(**data)
        return None

