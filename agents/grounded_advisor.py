# agents/grounded_advisor.py

import logging
from typing import List, Optional
from langchain_core.language_models import BaseLanguageModel
from langchain_core.prompts import ChatPromptTemplate
from core.exceptions import ChatModelError
from core.models import ChatResponse, ConfidenceLevel, KnowledgeRecord

logger = logging.getLogger(__name__)

NO_RECOMMENDATION_REPLY = "No official recommendation available for this condition."
AI_UNAVAILABLE_REPLY = "AI Service is currently unavailable (API Key missing)."
LOW_CONFIDENCE_NOTE = "  (Note: General guideline only)"

SYSTEM_PROMPT = """You are a Sri Lankan black pepper farming assistant.

Rules:
- Use ONLY the provided knowledge
- Do NOT use external knowledge
- Do NOT guess or generalize
- If information is missing, say EXACTLY:
  'No official recommendation available for this condition.'
- Keep answers short, practical, and farmer-friendly"""

USER_PROMPT = """Knowledge:
{knowledge}

Question:
{question}"""

def build_knowledge_block(records: List[KnowledgeRecord]) -> str:
    lines = []
    for record in records:
        lines.append(f"- {record.content}")
        if record.confidence_level == ConfidenceLevel.LOW:
            lines.append(LOW_CONFIDENCE_NOTE)
    return "\n".join(lines) + "\n"

def distinct_titles(records: List[KnowledgeRecord]) -> List[str]:
    """Titles in first-seen order, each once."""
    return list(dict.fromkeys(r.title for r in records))

class GroundedAdvisor:
    """
    Answers from retrieved knowledge only.
    The chat model is optional; without it the advisor still answers the
    no-knowledge case and reports the service as unavailable otherwise.
    """

    def __init__(self, llm: Optional[BaseLanguageModel] = None):
        self.llm = llm
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", SYSTEM_PROMPT),
            ("human", USER_PROMPT),
        ])
        self.chain = self.prompt | self.llm if llm is not None else None
        if llm is None:
            logger.warning("---GROUNDED ADVISOR: No chat model configured (API key missing)---")

    def has_client(self) -> bool:
        return self.chain is not None

    def respond(self, question: str, records: List[KnowledgeRecord]) -> ChatResponse:
        # Guardrail: nothing retrieved means the model is never asked
        if not records:
            logger.info("---GROUNDED ADVISOR: No applicable knowledge, returning fallback---")
            return ChatResponse(reply=NO_RECOMMENDATION_REPLY, sources=[])

        if not self.has_client():
            return ChatResponse(reply=AI_UNAVAILABLE_REPLY, sources=[])

        logger.info(f"---GROUNDED ADVISOR: Generating answer from {len(records)} records---")
        try:
            response = self.chain.invoke({
                "knowledge": build_knowledge_block(records),
                "question": question,
            })
        except Exception as e:
            logger.error(f"---GROUNDED ADVISOR: Chat model call failed: {e}---")
            raise ChatModelError(str(e)) from e
        reply = getattr(response, "content", response)
        return ChatResponse(reply=reply, sources=distinct_titles(records))
