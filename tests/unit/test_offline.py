"""Unit tests for docu_copilot.offline — classification and fallback content."""

import pytest

from docu_copilot.agents import build_agent
from docu_copilot.config import OFFLINE_COMMANDS
from docu_copilot.models import Availability, Request
from docu_copilot.offline import (
    OfflineFallbackGenerator,
    Operation,
    classify_operation,
    title_from_prompt,
)


@pytest.fixture
def generator():
    return OfflineFallbackGenerator()


# ===================================================================
# classify_operation
# ===================================================================


class TestClassifyOperation:
    @pytest.mark.parametrize("prompt, command, expected", [
        ("", "new", Operation.DOCUMENT_CREATION),
        ("please review it", "new", Operation.DOCUMENT_CREATION),
        ("create something", "review", Operation.DOCUMENT_REVIEW),
        ("Create a PRD for checkout", None, Operation.DOCUMENT_CREATION),
        ("I need a NEW design", None, Operation.DOCUMENT_CREATION),
        ("Can you REVIEW my doc", None, Operation.DOCUMENT_REVIEW),
        ("check the requirements", None, Operation.DOCUMENT_REVIEW),
        ("what should I do next", None, Operation.CONVERSATION),
        ("", None, Operation.CONVERSATION),
    ])
    def test_heuristics(self, prompt, command, expected):
        assert classify_operation(prompt, command) == expected


class TestTitleFromPrompt:
    def test_quotes_stripped(self):
        assert title_from_prompt('"Checkout Flow"', "prd") == "Checkout Flow"

    def test_default_titles(self):
        assert title_from_prompt("", "prd") == "New PRD Document"
        assert title_from_prompt("  ", "design") == "New Design Document"


# ===================================================================
# generate
# ===================================================================


class TestGenerate:
    def test_deterministic(self, generator):
        request = Request(prompt_text="Checkout Flow", command="new")
        first = generator.generate("prd-creator", "prd", Operation.DOCUMENT_CREATION, request)
        second = generator.generate("prd-creator", "prd", Operation.DOCUMENT_CREATION, request)
        assert first == second
        assert first.render() == second.render()

    @pytest.mark.parametrize("doc_type", ["prd", "requirements", "design", "tasks", "unknown"])
    @pytest.mark.parametrize("operation", list(Operation))
    def test_always_non_empty(self, generator, doc_type, operation):
        content = generator.generate("agent", doc_type, operation, Request())
        assert content.skeleton
        assert content.checklist
        assert content.capabilities and content.limitations
        assert content.render().strip()

    def test_review_leads_with_checklist(self, generator):
        rendered = generator.generate("prd-creator", "prd", Operation.DOCUMENT_REVIEW, Request()).render()
        assert rendered.index("## Review Checklist") < rendered.index("## Expected Structure")

    def test_creation_leads_with_template(self, generator):
        rendered = generator.generate("prd-creator", "prd", Operation.DOCUMENT_CREATION, Request()).render()
        assert rendered.index("## Template") < rendered.index("## Completion Checklist")


# ===================================================================
# Offline commands
# ===================================================================


class TestCommandResponse:
    def test_new_checkout_flow_prd(self, generator, prd_agent, offline):
        request = Request(prompt_text="Checkout Flow", command="new")
        response = generator.command_response(prd_agent, request, offline)
        for section in ("Executive Summary", "Product Objectives", "User Personas"):
            assert section in response.content
        assert "- [ ] " in response.content
        assert 0 < len(response.followups) <= 3
        [update] = response.document_updates
        assert update.target_path == "docs/checkout-flow.md"
        assert update.mode == "replace"
        assert update.section == "content"
        assert update.content.startswith("# Checkout Flow")
        assert response.proposed_state["documents"] == {"prd": "docs/checkout-flow.md"}

    def test_new_for_later_phase_uses_canonical_file(self, generator, offline):
        response = generator.command_response(build_agent("implementation"), Request(command="new"), offline)
        assert response.document_updates[0].target_path == "docs/tasks.md"

    def test_template(self, generator, prd_agent, offline):
        response = generator.command_response(prd_agent, Request(command="template"), offline)
        assert "## Template" in response.content
        assert response.document_updates == []

    def test_help_lists_commands(self, generator, prd_agent, offline):
        response = generator.command_response(prd_agent, Request(command="help"), offline)
        for command in OFFLINE_COMMANDS:
            assert f"/{command}" in response.content

    def test_status_shows_reason(self, generator, prd_agent):
        response = generator.command_response(prd_agent, Request(command="status"), Availability(False, "Forced offline mode"))
        assert "Forced offline mode" in response.content

    def test_non_whitelisted_rejected(self, generator, prd_agent, offline):
        response = generator.command_response(prd_agent, Request(command="review"), offline)
        assert "/review" in response.content
        for command in OFFLINE_COMMANDS:
            assert f"/{command}" in response.content


class TestGuidanceResponse:
    def test_plain_prompt(self, generator, prd_agent):
        response = generator.guidance_response(prd_agent, Request(prompt_text="How do I start?"))
        assert "Offline Mode" in response.content
        assert "Start from the problem" in response.content
        assert "Commands available offline" not in response.content

    def test_unsupported_command_named(self, generator, prd_agent):
        response = generator.guidance_response(prd_agent, Request(command="review"))
        assert response.content.startswith("The /review command needs the generation backend")
        assert "## Review Checklist" in response.content
