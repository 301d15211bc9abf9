"""One chat turn: parse input, handle it, apply edits, persist."""

import logging

import streamlit as st

from .commands import parse_chat_input
from .errors import NotFoundError
from .models import Availability
from .orchestrator import AgentRequestHandler
from .persistence import save_workflow_state
from .tools import WorkspaceTools, apply_document_updates

logger = logging.getLogger("docu.chat")


def run_turn(user_input: str, handler: AgentRequestHandler, availability: Availability) -> str:
    """
    Process one user turn against the current project.
    Returns the assistant's response text.
    """
    st.session_state.turn_count += 1
    logger.info("=== Turn %d start ===", st.session_state.turn_count)
    st.session_state.messages.append({"role": "user", "content": user_input})

    project_dir = st.session_state.project_dir
    tools = WorkspaceTools(project_dir) if project_dir else None
    request = parse_chat_input(user_input, transport=st.session_state)

    try:
        response = handler.handle(request, availability, st.session_state.workflow_state, tools)
    except NotFoundError as e:
        # Unknown --agent/--phase typed in chat
        known = ", ".join(sorted(handler.registry.agents))
        text = f"{e}. Available agents: {known}."
        st.session_state.messages.append({"role": "assistant", "content": text})
        st.session_state.followups = []
        return text

    text = response.content
    if tools is not None and response.document_updates:
        results = apply_document_updates(tools, response.document_updates)
        failed = [r["error"] for r in results if not r.get("success")]
        if failed:
            text += f"\n\n---\n⚠️ {len(failed)} document update(s) could not be applied: {'; '.join(failed)}"

    st.session_state.workflow_state.apply(response.proposed_state)
    st.session_state.messages.append({"role": "assistant", "content": text})
    st.session_state.followups = response.followups

    if project_dir:
        save_workflow_state(project_dir, st.session_state.workflow_state)
        logger.info("Auto-saved state to %s", project_dir)
    return text
