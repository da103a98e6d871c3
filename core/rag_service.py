import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence
from core.context_resolver import utc_now
from core.models import KnowledgeRecord, RetrievalContext, LOCAL_VARIETY
from core.reference_data import ReferenceDataManager

logger = logging.getLogger(__name__)

MAX_RESULTS = 5

class KnowledgeRetrievalService:
    """Hard-filtered nearest-neighbour search over the pepper knowledge collection."""

    def __init__(self, store, reference_data: ReferenceDataManager,
                 clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.reference_data = reference_data
        self.clock = clock

    def resolve_context(self, district_id: Optional[int], variety_id: Optional[str],
                        plant_age_months: Optional[int]) -> RetrievalContext:
        """Map reference ids to the names knowledge records are tagged with."""
        district_name = None
        if district_id is not None:
            district_name = self.reference_data.get_district_name(district_id)

        variety_name = None
        if variety_id:
            variety_name = self.reference_data.get_variety_name(variety_id)

        # Unknown or missing variety always means the local variety
        if not variety_name:
            variety_name = LOCAL_VARIETY

        return RetrievalContext(
            district_name=district_name,
            variety_name=variety_name,
            plant_age_months=plant_age_months,
            current_month=self.clock().month,
        )

    def search(self, query_embedding: Sequence[float], district_id: Optional[int] = None,
               variety_id: Optional[str] = None, plant_age_months: Optional[int] = None,
               k: int = MAX_RESULTS) -> List[KnowledgeRecord]:
        """Filter first, rank by L2 distance second, keep at most k (never more than 5)."""
        context = self.resolve_context(district_id, variety_id, plant_age_months)
        logger.info(f"---RAG: Searching with context {context.model_dump()}---")

        results = self.store.search(query_embedding, context, min(k, MAX_RESULTS))

        logger.info(f"---RAG: Retrieved {len(results)} knowledge records---")
        for i, r in enumerate(results):
            logger.debug(f"[{i+1}] {r.title} (confidence: {r.confidence_level.value})")
        return results
