"""End-to-end runs of the chat graph with in-memory collaborators."""
from datetime import datetime

import pytest
from langchain_core.runnables import RunnableLambda

from conftest import (
    KeywordEmbeddings, MockFarmManager, MockReferenceData, RecordingChatModel, fixed_clock, make_record,
)
from agents.grounded_advisor import AI_UNAVAILABLE_REPLY, NO_RECOMMENDATION_REPLY, GroundedAdvisor
from core.context_resolver import ContextResolver
from core.embedding_service import EmbeddingService
from core.exceptions import ChatModelError, EmbeddingError
from core.knowledge_store import InMemoryKnowledgeStore
from core.models import ConfidenceLevel, FarmProfile
from core.rag_service import KnowledgeRetrievalService
from graph import ChatService

QUESTION = "How much fertilizer for young vines?"

FARMS = [
    FarmProfile(farm_id="kandy-farm", district_id=1, chosen_variety_id="v1",
                farm_start_date=datetime(2023, 1, 10)),
    FarmProfile(farm_id="new-farm", district_id=1),
]

RECORDS = [
    make_record("Young vine nutrition", [1.0, 0.0], content="Apply 100 g urea per vine.",
                district="Kandy", plant_age_min=12, plant_age_max=24),
    make_record("Panniyur care", [2.0, 0.0], content="Panniyur-1 needs stronger standards.",
                variety="Panniyur-1", confidence_level=ConfidenceLevel.LOW),
    make_record("Young vine nutrition", [3.0, 0.0], content="Split the dose in two."),
]

def build_service(records=RECORDS, llm=None, embeddings=None):
    embeddings = embeddings or KeywordEmbeddings({QUESTION: [0.0, 0.0]}, dim=2)
    return ChatService(
        context_resolver=ContextResolver(MockFarmManager(FARMS), clock=fixed_clock),
        embedding_service=EmbeddingService(embeddings),
        retrieval_service=KnowledgeRetrievalService(
            InMemoryKnowledgeStore(records), MockReferenceData({1: "Kandy"}, {"v1": "Panniyur-1"}),
            clock=fixed_clock,
        ),
        advisor=GroundedAdvisor(llm),
    )

class TestChatService:
    def test_grounded_answer_for_known_farm(self):
        model = RecordingChatModel(reply="Give each vine 100 g urea, split in two.")
        response = build_service(llm=model.runnable).answer(QUESTION, "kandy-farm")

        assert response.reply == "Give each vine 100 g urea, split in two."
        assert response.sources == ["Young vine nutrition", "Panniyur care"]
        user_prompt = model.prompts[0][1].content
        assert "  (Note: General guideline only)" in user_prompt
        assert user_prompt.endswith(f"Question:\n{QUESTION}")

    def test_no_farm_only_universal_and_local_knowledge(self):
        model = RecordingChatModel()
        response = build_service(llm=model.runnable).answer(QUESTION)
        assert response.sources == ["Young vine nutrition"]
        assert "Split the dose in two." in model.prompts[0][1].content
        assert "urea" not in model.prompts[0][1].content

    def test_unknown_farm_behaves_like_no_farm(self):
        model = RecordingChatModel()
        build_service(llm=model.runnable).answer(QUESTION, "does-not-exist")
        build_service(llm=model.runnable).answer(QUESTION, None)
        assert model.prompts[0] == model.prompts[1]

    def test_fallback_when_nothing_applies(self):
        model = RecordingChatModel()
        records = [make_record("Matale only", [0.0, 0.0], district="Matale")]
        response = build_service(records=records, llm=model.runnable).answer("Anything at all?", "kandy-farm")
        assert response.reply == NO_RECOMMENDATION_REPLY
        assert response.sources == []
        assert model.prompts == []

    def test_farm_without_start_date_skips_age_bound_knowledge(self):
        model = RecordingChatModel()
        build_service(llm=model.runnable).answer(QUESTION, "new-farm")
        assert "urea" not in model.prompts[0][1].content

    def test_unavailable_client_drops_sources(self):
        response = build_service(llm=None).answer(QUESTION, "kandy-farm")
        assert response.reply == AI_UNAVAILABLE_REPLY
        assert response.sources == []

    def test_embedding_failure_fails_the_request(self):
        class BrokenEmbeddings(KeywordEmbeddings):
            def embed_query(self, text):
                raise ConnectionError("embedding service down")

        with pytest.raises(EmbeddingError):
            build_service(embeddings=BrokenEmbeddings()).answer(QUESTION)

    def test_chat_model_failure_fails_the_request(self):
        def unreachable(prompt_value):
            raise ConnectionError("api.openai.com unreachable")

        with pytest.raises(ChatModelError):
            build_service(llm=RunnableLambda(unreachable)).answer(QUESTION, "kandy-farm")

    def test_router(self):
        assert ChatService.knowledge_router({"records": []}) == "no_knowledge"
        assert ChatService.knowledge_router({"records": RECORDS}) == "generate"
