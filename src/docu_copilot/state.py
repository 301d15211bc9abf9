import streamlit as st

from .models import WorkflowState


def init_session_state():
    """Call once at app startup. Sets up all state containers."""
    if "initialized" not in st.session_state:
        st.session_state.initialized = True
        st.session_state.messages = []  # Chat history: [{"role": "user"/"assistant", "content": "..."}]
        st.session_state.turn_count = 0
        st.session_state.workflow_state = WorkflowState()
        st.session_state.followups = []  # Suggestions from the last response, at most MAX_FOLLOWUPS
        st.session_state.project_name = None
        st.session_state.project_dir = None
