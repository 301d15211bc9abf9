"""Unit-level conftest: Anthropic mocks, agents, engine, workspace tools."""

import dataclasses
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from docu_copilot.agents import build_agent, build_default_registry
from docu_copilot.conversation import ConversationEngine
from docu_copilot.models import Availability, Question
from docu_copilot.tools import WorkspaceTools


# ---------------------------------------------------------------------------
# Anthropic mock helpers
# ---------------------------------------------------------------------------


def _make_anthropic_response(text="", tool_calls=None):
    """Factory for Anthropic API message responses.

    Args:
        text: Text content for the response.
        tool_calls: List of (name, input_dict, id) tuples for tool_use blocks.
    """
    content = []
    if text:
        content.append(SimpleNamespace(type="text", text=text))
    for name, input_dict, tool_id in (tool_calls or []):
        content.append(
            SimpleNamespace(type="tool_use", name=name, input=input_dict, id=tool_id)
        )
    return SimpleNamespace(
        content=content,
        usage=SimpleNamespace(input_tokens=100, output_tokens=50),
        stop_reason="end_turn" if not tool_calls else "tool_use",
    )


@pytest.fixture
def mock_anthropic_client():
    """Mock Anthropic client with configurable responses."""
    client = MagicMock()
    client.messages.create.return_value = _make_anthropic_response("Default response")
    return client


@pytest.fixture
def mock_backend():
    """GenerationBackend stand-in returning a fixed draft."""
    backend = MagicMock()
    backend.generate.return_value = "# Generated Draft\n\nGenerated body."
    return backend


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


@pytest.fixture
def online():
    return Availability(True)


@pytest.fixture
def offline():
    return Availability(False, "no API key")


# ---------------------------------------------------------------------------
# Agents and conversation
# ---------------------------------------------------------------------------


THREE_QUESTIONS = (
    Question(id="q1", text="What problem does this solve?", category="problem", priority=1),
    Question(id="q2", text="Who are the users?", category="users", priority=2),
    Question(id="q3", text="What are the goals?", category="goals", priority=3),
)


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def prd_agent():
    return build_agent("prd")


@pytest.fixture
def three_question_agent():
    """PRD agent with a short fixed question set."""
    return dataclasses.replace(build_agent("prd"), question_set=THREE_QUESTIONS)


@pytest.fixture
def engine():
    return ConversationEngine()


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


@pytest.fixture
def workspace(tmp_path):
    """Real WorkspaceTools rooted at a temp directory."""
    return WorkspaceTools(tmp_path)


def _write(root, rel, text):
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Session state fixture with st patching for chat.py
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_session_state_for_chat(mock_session_state):
    """MockSessionState patched into docu_copilot.chat.st.session_state."""
    mock_st = MagicMock()
    mock_st.session_state = mock_session_state
    with patch("docu_copilot.chat.st", mock_st):
        yield mock_session_state
