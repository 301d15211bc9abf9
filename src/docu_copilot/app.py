import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import streamlit as st
from dotenv import load_dotenv

load_dotenv()

from docu_copilot import config
from docu_copilot.agents import build_default_registry
from docu_copilot.chat import run_turn
from docu_copilot.conversation import ConversationEngine
from docu_copilot.llm import GenerationBackend, check_availability
from docu_copilot.logging_config import setup_logging
from docu_copilot.orchestrator import AgentRequestHandler
from docu_copilot.persistence import (
    STATE_FILE,
    ensure_workspace_exists,
    load_workflow_state,
    save_workflow_state,
    slugify,
)
from docu_copilot.state import init_session_state

logger = setup_logging()


@st.cache_resource
def get_availability():
    """Availability is decided once per server process."""
    return check_availability()


@st.cache_resource
def get_handler():
    """Cached request handler — one registry and session store per server process."""
    availability = get_availability()
    backend = GenerationBackend() if availability.backend_available else None
    return AgentRequestHandler(
        registry=build_default_registry(),
        engine=ConversationEngine(),
        backend=backend,
    )


def _reset_project(project_dir: Path, project_name: str) -> None:
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    init_session_state()
    st.session_state.project_name = project_name
    st.session_state.project_dir = project_dir
    st.session_state.workflow_state = load_workflow_state(project_dir)


st.set_page_config(page_title="Docu", layout="wide")

# --- Initialize ---
init_session_state()
availability = get_availability()
handler = get_handler()
logger.info("App startup — session initialized")

# --- Sidebar ---
with st.sidebar:
    st.title("Docu")

    # --- Project Management ---
    workspace_dir = ensure_workspace_exists()

    existing_projects = sorted(
        [d.name for d in workspace_dir.iterdir() if d.is_dir() and (d / STATE_FILE).exists()],
        key=lambda x: (workspace_dir / x / STATE_FILE).stat().st_mtime,
        reverse=True,
    )
    project_options = ["— Select a project —"] + existing_projects
    selected = st.selectbox("Project", project_options, key="project_selector")

    col1, col2 = st.columns(2)
    with col1:
        new_name = st.text_input("New project name", key="new_project_name",
                                 label_visibility="collapsed", placeholder="New project name...")
    with col2:
        if st.button("Create", use_container_width=True):
            if new_name.strip():
                slug = slugify(new_name)
                project_dir = workspace_dir / slug
                if project_dir.exists():
                    st.error(f"Project '{slug}' already exists.")
                else:
                    project_dir.mkdir(parents=True)
                    _reset_project(project_dir, new_name.strip())
                    save_workflow_state(project_dir, st.session_state.workflow_state)
                    st.session_state.project_selector = slug
                    st.rerun()

    if selected != "— Select a project —":
        project_dir = workspace_dir / selected
        if st.session_state.project_dir != project_dir:
            _reset_project(project_dir, selected)
            st.session_state.project_selector = selected
            st.rerun()

    if st.session_state.project_name:
        st.caption(f"Current: **{st.session_state.project_name}**")
    else:
        st.warning("No project selected: documents can't be read or written.")

    st.divider()

    # --- Backend status ---
    if availability.backend_available:
        st.success("Generation: online")
    else:
        st.warning(f"Generation: offline ({availability.reason}). Commands: "
                   + ", ".join(f"/{c}" for c in config.OFFLINE_COMMANDS))

    # --- Workflow ---
    workflow = st.session_state.workflow_state
    st.subheader("Workflow")
    st.info(f"Phase: {workflow.current_phase}")
    st.metric("Turn", st.session_state.turn_count)
    for doc_type, path in sorted(workflow.documents.items()):
        st.caption(f"**{doc_type}**: `{path}`")

    # --- Active conversation ---
    agent = handler.registry.resolve(workflow.current_phase)
    session = handler.get_active_session(agent.name)
    if session is not None:
        st.divider()
        st.subheader("Conversation")
        st.progress(session.completion_score,
                    text=f"{len(session.answered_questions)}/{len(session.question_set)} questions")
        if st.button("End conversation", use_container_width=True):
            summary = handler.end_conversation(session.session_id)
            st.session_state.messages.append({
                "role": "assistant",
                "content": (
                    f"Conversation ended: {summary.questions_answered} of {summary.questions_asked} "
                    f"questions answered, {len(summary.documents_updated)} section(s) updated."
                ),
            })
            st.rerun()

    st.divider()
    st.subheader("Commands")
    st.markdown(
        "- `/new <title>` create the phase document\n"
        "- `/review` review the phase document\n"
        "- `/template` show the template\n"
        "- `--agent <name>` or `--phase <phase>` target another agent"
    )

# --- Main Chat ---
st.title("Docu")

for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])

pending = None
if st.session_state.followups:
    st.caption("Suggestions")
    cols = st.columns(len(st.session_state.followups))
    for i, (col, followup) in enumerate(zip(cols, st.session_state.followups)):
        # Placeholders like "<title>" need the user's input, so only complete ones are clickable
        if col.button(followup, key=f"followup_{i}", disabled="<" in followup):
            pending = followup

user_input = st.chat_input("Describe your product, answer a question, or type /help...") or pending
if user_input:
    with st.chat_message("user"):
        st.markdown(user_input)

    with st.chat_message("assistant"):
        with st.spinner("Thinking..."):
            response = run_turn(user_input, handler, availability)
        st.markdown(response)
    st.rerun()
