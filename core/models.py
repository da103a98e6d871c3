# core/models.py

import uuid
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

LOCAL_VARIETY = "Local"

class ConfidenceLevel(str, Enum):
    """Curated confidence annotation on a knowledge record."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

class FarmProfile(BaseModel):
    """A registered pepper farm. Read-only to the advisor."""
    farm_id: str
    farm_name: Optional[str] = None
    district_id: Optional[int] = None
    chosen_variety_id: Optional[str] = None
    farm_start_date: Optional[datetime] = None

class District(BaseModel):
    district_id: int
    name: str

class PepperVariety(BaseModel):
    variety_id: str
    name: str

class Season(BaseModel):
    """A harvest season recorded against a farm."""
    season_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    season_name: str = ""
    start_month: int = Field(ge=1, le=12)
    start_year: int
    end_month: int = Field(ge=1, le=12)
    end_year: int
    farm_id: str
    created_by: str

    def contains(self, when: datetime) -> bool:
        """True if the (year, month) of `when` falls inside this season."""
        point = (when.year, when.month)
        return (self.start_year, self.start_month) <= point <= (self.end_year, self.end_month)

class KnowledgeRecord(BaseModel):
    """
    A curated unit of pepper farming knowledge.
    Any constraint left as None applies universally on that axis.
    """
    title: str
    content: str
    confidence_level: ConfidenceLevel = ConfidenceLevel.HIGH
    embedding: List[float] = []
    district: Optional[str] = None
    variety: Optional[str] = None
    plant_age_min: Optional[int] = None
    plant_age_max: Optional[int] = None
    month_start: Optional[int] = Field(default=None, ge=1, le=12)
    month_end: Optional[int] = Field(default=None, ge=1, le=12)
    chunk_id: Optional[str] = None

class FarmContext(BaseModel):
    """Reference identifiers derived from a farm, before name resolution."""
    district_id: Optional[int] = None
    variety_id: Optional[str] = None
    plant_age_months: Optional[int] = Field(default=None, ge=0)

class RetrievalContext(BaseModel):
    """Agronomic context the knowledge filters are evaluated against."""
    district_name: Optional[str] = None
    variety_name: str = LOCAL_VARIETY
    plant_age_months: Optional[int] = Field(default=None, ge=0)
    current_month: int = Field(ge=1, le=12)

class ChatResponse(BaseModel):
    reply: str
    sources: List[str] = []
