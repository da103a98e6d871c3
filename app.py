# app.py

import logging
import streamlit as st
from langchain_core.messages import HumanMessage, AIMessage
from core.exceptions import AdvisorError
from graph import build_chat_service

logger = logging.getLogger(__name__)

# --- Page & State Configuration ---
st.set_page_config(page_title="Pepper Advisor", page_icon="🌿", layout="wide")

@st.cache_resource
def get_chat_service():
    return build_chat_service()

def initialize_session_state():
    """Initializes all necessary session state variables."""
    if "messages" not in st.session_state:
        st.session_state.messages = []
    if "active_farm_id" not in st.session_state:
        st.session_state.active_farm_id = ""

def render_message(message):
    with st.chat_message(message.type, avatar="🧑‍🌾" if message.type == "human" else "🌿"):
        st.markdown(message.content)
        sources = message.additional_kwargs.get("sources") if message.type == "ai" else None
        if sources:
            st.caption("Sources: " + ", ".join(sources))

def show_chat_interface():
    # --- Sidebar: farm context ---
    with st.sidebar:
        st.header("Farm Context")
        st.session_state.active_farm_id = st.text_input(
            "Active farm ID (optional)",
            value=st.session_state.active_farm_id,
            help="Leave empty for general guidance without farm-specific filtering."
        )
        if st.button("Clear Chat"):
            st.session_state.messages = []
            st.rerun()

    st.title("💬 Ask the Pepper Advisor")

    for message in st.session_state.messages:
        render_message(message)

    if prompt := st.chat_input("Ask about your pepper vines..."):
        human = HumanMessage(content=prompt)
        st.session_state.messages.append(human)
        render_message(human)

        with st.spinner("Checking official recommendations..."):
            try:
                response = get_chat_service().answer(prompt, st.session_state.active_farm_id or None)
            except AdvisorError as e:
                logger.error(f"---APP: Chat request failed: {e}---")
                st.error("The advisor is temporarily unavailable. Please try again later.")
                return

        ai = AIMessage(content=response.reply, additional_kwargs={"sources": response.sources})
        st.session_state.messages.append(ai)
        render_message(ai)

# --- Application Entry Point ---
initialize_session_state()
show_chat_interface()
