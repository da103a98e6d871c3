import os
import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.models import FarmProfile, KnowledgeRecord

FIXED_NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)

def fixed_clock():
    return FIXED_NOW

class MockFarmManager:
    def __init__(self, farms: Optional[List[FarmProfile]] = None):
        self.farms = {f.farm_id: f for f in farms or []}
        self.lookups = []

    def get_farm(self, farm_id):
        self.lookups.append(farm_id)
        return self.farms.get(farm_id)

class MockReferenceData:
    def __init__(self, districts: Optional[Dict[int, str]] = None, varieties: Optional[Dict[str, str]] = None):
        self.districts = districts or {}
        self.varieties = varieties or {}

    def get_district_name(self, district_id):
        return self.districts.get(district_id)

    def get_variety_name(self, variety_id):
        return self.varieties.get(variety_id)

class KeywordEmbeddings(Embeddings):
    """Maps known texts to fixed vectors; anything else lands at the origin."""
    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, dim: int = 3):
        self.vectors = vectors or {}
        self.dim = dim
        self.calls = []

    def embed_query(self, text):
        self.calls.append(text)
        return self.vectors.get(text, [0.0] * self.dim)

    def embed_documents(self, texts):
        return [self.embed_query(t) for t in texts]

class RecordingChatModel:
    """Stands in for the chat model; remembers the prompt it was given."""
    def __init__(self, reply: str = "Apply compost around the vine base."):
        self.reply = reply
        self.prompts = []
        self.runnable = RunnableLambda(self._respond)

    def _respond(self, prompt_value):
        self.prompts.append(prompt_value.to_messages())
        return AIMessage(content=self.reply)

def make_record(title: str, embedding: List[float], **kwargs) -> KnowledgeRecord:
    return KnowledgeRecord(title=title, content=kwargs.pop("content", f"{title} content"),
                           embedding=embedding, **kwargs)

@pytest.fixture
def chat_model():
    return RecordingChatModel()
