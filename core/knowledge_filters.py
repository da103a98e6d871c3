# core/knowledge_filters.py
"""
Hard filters deciding which knowledge records apply to a retrieval context.

Each agronomic axis has a predicate over a single record and a matching
MongoDB clause, so the same rule can be checked in memory and pushed into the
database query. A record constraint that is unset never excludes the record;
only a present constraint that the context fails to satisfy does.

Plant age bounds are the exception on the context side: a record declaring
an age bound is excluded when the farm's plant age is unknown.

Season windows are an inclusive numeric range. A window wrapping the year end
(month_start > month_end) never matches.
"""

from functools import reduce
from typing import Callable, Dict, List, Any
from .models import KnowledgeRecord, RetrievalContext

RecordFilter = Callable[[KnowledgeRecord, RetrievalContext], bool]

def district_matches(record: KnowledgeRecord, context: RetrievalContext) -> bool:
    return record.district is None or record.district == context.district_name

def variety_matches(record: KnowledgeRecord, context: RetrievalContext) -> bool:
    return record.variety is None or record.variety == context.variety_name

def plant_age_min_matches(record: KnowledgeRecord, context: RetrievalContext) -> bool:
    if record.plant_age_min is None:
        return True
    return context.plant_age_months is not None and record.plant_age_min <= context.plant_age_months

def plant_age_max_matches(record: KnowledgeRecord, context: RetrievalContext) -> bool:
    if record.plant_age_max is None:
        return True
    return context.plant_age_months is not None and record.plant_age_max >= context.plant_age_months

def season_matches(record: KnowledgeRecord, context: RetrievalContext) -> bool:
    if record.month_start is None or record.month_end is None:
        return True
    return record.month_start <= context.current_month <= record.month_end

KNOWLEDGE_FILTERS: List[RecordFilter] = [
    district_matches,
    variety_matches,
    plant_age_min_matches,
    plant_age_max_matches,
    season_matches,
]

def record_matches(record: KnowledgeRecord, context: RetrievalContext,
                   filters: List[RecordFilter] = KNOWLEDGE_FILTERS) -> bool:
    """Logical AND of every filter."""
    return reduce(lambda ok, f: ok and f(record, context), filters, True)

# --- MongoDB renditions ---
# {"field": None} matches both a missing field and an explicit null.

def district_clause(context: RetrievalContext) -> Dict[str, Any]:
    return {"$or": [{"district": None}, {"district": context.district_name}]}

def variety_clause(context: RetrievalContext) -> Dict[str, Any]:
    return {"$or": [{"variety": None}, {"variety": context.variety_name}]}

def plant_age_min_clause(context: RetrievalContext) -> Dict[str, Any]:
    if context.plant_age_months is None:
        return {"plant_age_min": None}
    return {"$or": [{"plant_age_min": None}, {"plant_age_min": {"$lte": context.plant_age_months}}]}

def plant_age_max_clause(context: RetrievalContext) -> Dict[str, Any]:
    if context.plant_age_months is None:
        return {"plant_age_max": None}
    return {"$or": [{"plant_age_max": None}, {"plant_age_max": {"$gte": context.plant_age_months}}]}

def season_clause(context: RetrievalContext) -> Dict[str, Any]:
    return {"$or": [
        {"month_start": None},
        {"month_end": None},
        {"month_start": {"$lte": context.current_month}, "month_end": {"$gte": context.current_month}},
    ]}

MONGO_CLAUSES = [
    district_clause,
    variety_clause,
    plant_age_min_clause,
    plant_age_max_clause,
    season_clause,
]

def build_mongo_filter(context: RetrievalContext) -> Dict[str, Any]:
    return {"$and": [clause(context) for clause in MONGO_CLAUSES]}
