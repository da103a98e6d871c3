"""Tests for prompt assembly and the no-knowledge / no-client guardrails."""
import pytest
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.runnables import RunnableLambda

from conftest import RecordingChatModel, make_record
from agents.grounded_advisor import (
    AI_UNAVAILABLE_REPLY,
    NO_RECOMMENDATION_REPLY,
    GroundedAdvisor,
    build_knowledge_block,
    distinct_titles,
)
from core.exceptions import ChatModelError
from core.models import ConfidenceLevel

class TestKnowledgeBlock:
    def test_low_confidence_records_are_annotated(self):
        records = [
            make_record("Fertilizer", [0.0], content="Apply 500 g NPK per vine in May."),
            make_record("Shade", [0.0], content="Thin standards before monsoon.", confidence_level=ConfidenceLevel.LOW),
        ]
        assert build_knowledge_block(records) == (
            "- Apply 500 g NPK per vine in May.\n"
            "- Thin standards before monsoon.\n"
            "  (Note: General guideline only)\n"
        )

    def test_distinct_titles_keep_first_seen_order(self):
        records = [make_record(t, [0.0]) for t in ["B", "A", "B", "C", "A"]]
        assert distinct_titles(records) == ["B", "A", "C"]

class TestGuardrails:
    def test_no_records_never_calls_model(self, chat_model):
        response = GroundedAdvisor(chat_model.runnable).respond("What about wilt?", [])
        assert response.reply == NO_RECOMMENDATION_REPLY
        assert response.sources == []
        assert chat_model.prompts == []

    def test_no_client_discards_sources(self):
        advisor = GroundedAdvisor()
        assert not advisor.has_client()
        response = advisor.respond("When to harvest?", [make_record("Harvest", [0.0])])
        assert response.reply == AI_UNAVAILABLE_REPLY
        assert response.sources == []

    def test_no_records_without_client_still_refuses(self):
        assert GroundedAdvisor().respond("anything", []).reply == NO_RECOMMENDATION_REPLY

class TestGeneration:
    def test_two_turn_prompt_and_sources(self):
        model = RecordingChatModel(reply="Prune runner shoots after harvest.")
        advisor = GroundedAdvisor(model.runnable)
        assert advisor.has_client()
        records = [
            make_record("Pruning", [0.0], content="Remove runner shoots."),
            make_record("Pruning", [0.0], content="Keep 3 orthotropic shoots."),
            make_record("Harvest", [0.0], content="Harvest when 1-2 berries turn red."),
        ]

        response = advisor.respond("How do I prune?", records)

        assert response.reply == "Prune runner shoots after harvest."
        assert response.sources == ["Pruning", "Harvest"]

        [messages] = model.prompts
        system, user = messages
        assert isinstance(system, SystemMessage)
        assert isinstance(user, HumanMessage)
        assert "Use ONLY the provided knowledge" in system.content
        assert "'No official recommendation available for this condition.'" in system.content
        assert user.content == (
            "Knowledge:\n"
            "- Remove runner shoots.\n"
            "- Keep 3 orthotropic shoots.\n"
            "- Harvest when 1-2 berries turn red.\n"
            "\n\nQuestion:\nHow do I prune?"
        )

    def test_model_failure_raised_as_chat_model_error(self):
        def unreachable(prompt_value):
            raise ConnectionError("api.openai.com unreachable")

        advisor = GroundedAdvisor(RunnableLambda(unreachable))
        with pytest.raises(ChatModelError) as exc_info:
            advisor.respond("How do I prune?", [make_record("Pruning", [0.0])])
        assert isinstance(exc_info.value.__cause__, ConnectionError)
