# core/context_resolver.py

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from core.farm_manager import FarmManager
from core.models import FarmContext

logger = logging.getLogger(__name__)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def months_between(start: datetime, now: datetime) -> int:
    """Whole calendar months from start to now, ignoring the day of month. Never negative."""
    start_date = start.date()
    months = (now.year - start_date.year) * 12 + (now.month - start_date.month)
    return max(months, 0)

class ContextResolver:
    """
    Derives the retrieval context of a request from the active farm.
    District and variety stay as reference ids here; the retrieval service
    turns them into names.
    """
    def __init__(self, farm_manager: FarmManager, clock: Callable[[], datetime] = utc_now):
        self.farm_manager = farm_manager
        self.clock = clock

    def resolve(self, farm_id: Optional[str]) -> FarmContext:
        if not farm_id:
            return FarmContext()

        farm = self.farm_manager.get_farm(farm_id)
        if farm is None:
            logger.info(f"---CONTEXT: Farm {farm_id} not found, using empty context---")
            return FarmContext()

        plant_age_months = None
        if farm.farm_start_date:
            plant_age_months = months_between(farm.farm_start_date, self.clock())

        context = FarmContext(
            district_id=farm.district_id,
            variety_id=farm.chosen_variety_id,
            plant_age_months=plant_age_months,
        )
        logger.info(f"---CONTEXT: Farm {farm_id} -> {context.model_dump()}---")
        return context
