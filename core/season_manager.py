# core/season_manager.py

import logging
from datetime import datetime, timezone
from typing import List, Optional
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from .config import settings
from .exceptions import KnowledgeStoreError
from .models import Season

logger = logging.getLogger(__name__)

class SeasonManager:
    """Handles all database operations for harvest seasons."""
    def __init__(self, db=None, db_name: Optional[str] = None):
        if db is None:
            self.client = MongoClient(settings.final_mongo_uri)
            db = self.client[db_name or settings.db_name]
        self.db = db
        self.seasons_collection = self.db["harvest_seasons"]
        logger.info("---SEASON MANAGER: Connected to MongoDB---")

    def add_season(self, season: Season) -> Season:
        if (season.end_year, season.end_month) < (season.start_year, season.start_month):
            raise ValueError("Season must not end before it starts.")
        try:
            self.seasons_collection.insert_one(season.model_dump())
        except PyMongoError as e:
            raise KnowledgeStoreError(f"Saving season failed for farm {season.farm_id}: {e}") from e
        logger.info(f"---SEASON MANAGER: Saved season '{season.season_name}' for farm {season.farm_id}---")
        return season

    def list_seasons(self, farm_id: str) -> List[Season]:
        """Seasons for a farm, most recent start first."""
        try:
            cursor = self.seasons_collection.find({"farm_id": farm_id}, {"_id": 0}).sort(
                [("start_year", -1), ("start_month", -1)]
            )
            return [Season(**s) for s in cursor]
        except PyMongoError as e:
            raise KnowledgeStoreError(f"Listing seasons failed for farm {farm_id}: {e}") from e

    def get_current_season(self, farm_id: str, now: Optional[datetime] = None) -> Optional[Season]:
        now = now or datetime.now(timezone.utc)
        for season in self.list_seasons(farm_id):
            if season.contains(now):
                return season
        return None
