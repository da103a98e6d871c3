# graph.py

import logging
from typing import TypedDict, List, Optional
from langchain_openai import ChatOpenAI
from langgraph.graph import StateGraph, END
from pymongo import MongoClient

from agents.grounded_advisor import GroundedAdvisor, NO_RECOMMENDATION_REPLY
from core.config import settings, Settings
from core.context_resolver import ContextResolver
from core.embedding_service import EmbeddingService, build_embeddings
from core.farm_manager import FarmManager
from core.knowledge_store import MongoKnowledgeStore
from core.models import ChatResponse, FarmContext, KnowledgeRecord
from core.rag_service import KnowledgeRetrievalService
from core.reference_data import ReferenceDataManager

logger = logging.getLogger(__name__)

# --- PIPELINE STATE ---
class ChatState(TypedDict, total=False):
    message: str
    farm_id: Optional[str]
    farm_context: FarmContext
    query_embedding: List[float]
    records: List[KnowledgeRecord]
    response: ChatResponse

class ChatService:
    """
    One question in, one grounded answer out.
    resolve_context -> embed_query -> retrieve -> no_knowledge | generate
    """

    def __init__(self, context_resolver: ContextResolver, embedding_service: EmbeddingService,
                 retrieval_service: KnowledgeRetrievalService, advisor: GroundedAdvisor):
        self.context_resolver = context_resolver
        self.embedding_service = embedding_service
        self.retrieval_service = retrieval_service
        self.advisor = advisor
        self.app = self._build_graph()

    # --- NODES ---
    def resolve_context(self, state: ChatState) -> dict:
        return {"farm_context": self.context_resolver.resolve(state.get("farm_id"))}

    def embed_query(self, state: ChatState) -> dict:
        return {"query_embedding": self.embedding_service.generate_embedding(state["message"])}

    def retrieve(self, state: ChatState) -> dict:
        ctx = state["farm_context"]
        records = self.retrieval_service.search(
            state["query_embedding"],
            district_id=ctx.district_id,
            variety_id=ctx.variety_id,
            plant_age_months=ctx.plant_age_months,
        )
        return {"records": records}

    def no_knowledge(self, state: ChatState) -> dict:
        return {"response": ChatResponse(reply=NO_RECOMMENDATION_REPLY, sources=[])}

    def generate(self, state: ChatState) -> dict:
        return {"response": self.advisor.respond(state["message"], state["records"])}

    # --- ROUTING ---
    @staticmethod
    def knowledge_router(state: ChatState) -> str:
        return "generate" if state.get("records") else "no_knowledge"

    def _build_graph(self):
        workflow = StateGraph(ChatState)
        workflow.add_node("resolve_context", self.resolve_context)
        workflow.add_node("embed_query", self.embed_query)
        workflow.add_node("retrieve", self.retrieve)
        workflow.add_node("no_knowledge", self.no_knowledge)
        workflow.add_node("generate", self.generate)

        workflow.set_entry_point("resolve_context")
        workflow.add_edge("resolve_context", "embed_query")
        workflow.add_edge("embed_query", "retrieve")
        workflow.add_conditional_edges("retrieve", self.knowledge_router, {
            "generate": "generate",
            "no_knowledge": "no_knowledge",
        })
        workflow.add_edge("no_knowledge", END)
        workflow.add_edge("generate", END)
        return workflow.compile()

    def answer(self, message: str, farm_id: Optional[str] = None) -> ChatResponse:
        logger.info(f"---CHAT: Question for farm {farm_id or '(none)'}: {message[:50]}---")
        final_state = self.app.invoke({"message": message, "farm_id": farm_id})
        return final_state["response"]

def build_chat_model(config: Settings = settings) -> Optional[ChatOpenAI]:
    if not config.openai_api_key:
        logger.warning("---CHAT: OpenAI API key is missing, chat model disabled---")
        return None
    return ChatOpenAI(model=config.chat_model, api_key=config.openai_api_key)

def build_chat_service(config: Settings = settings) -> ChatService:
    """Wires the MongoDB-backed pipeline from settings."""
    db = MongoClient(config.final_mongo_uri)[config.db_name]
    farm_manager = FarmManager(db=db)
    reference_data = ReferenceDataManager(db=db)
    store = MongoKnowledgeStore(db=db)
    return ChatService(
        context_resolver=ContextResolver(farm_manager),
        embedding_service=EmbeddingService(build_embeddings(config)),
        retrieval_service=KnowledgeRetrievalService(store, reference_data),
        advisor=GroundedAdvisor(build_chat_model(config)),
    )
