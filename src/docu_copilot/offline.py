"""Offline fallback — deterministic, template-based responses when the
generation backend is unavailable.

Nothing here touches the network, the clock or a random source: identical
inputs always render identical text.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from . import config
from .models import Agent, Availability, DocumentUpdate, Request, Response
from .templates import (
    OFFLINE_CAPABILITIES,
    OFFLINE_LIMITATIONS,
    checklist_for,
    default_document_path,
    render_skeleton,
)

logger = logging.getLogger("docu.offline")


class Operation(str, Enum):
    DOCUMENT_CREATION = "document-creation"
    DOCUMENT_REVIEW = "document-review"
    CONVERSATION = "conversation"


_CREATION_WORDS = ("create", "new")
_REVIEW_WORDS = ("review", "check")


def classify_operation(prompt_text: str, command: str | None) -> Operation:
    """Classify what the user is after. Commands win over prompt wording."""
    command = (command or "").strip().lower()
    if command == "new":
        return Operation.DOCUMENT_CREATION
    if command == "review":
        return Operation.DOCUMENT_REVIEW

    prompt = (prompt_text or "").lower()
    if any(word in prompt for word in _CREATION_WORDS):
        return Operation.DOCUMENT_CREATION
    if any(word in prompt for word in _REVIEW_WORDS):
        return Operation.DOCUMENT_REVIEW
    return Operation.CONVERSATION


def title_from_prompt(prompt_text: str, document_type: str) -> str:
    title = (prompt_text or "").strip().strip("\"'").strip()
    return title or f"New {document_type.upper() if document_type == 'prd' else document_type.title()} Document"


@dataclass(frozen=True)
class FallbackContent:
    agent_name: str
    document_type: str
    operation: Operation
    title: str
    skeleton: str
    checklist: tuple[str, ...]
    capabilities: tuple[str, ...]
    limitations: tuple[str, ...]
    guidance: str = ""

    def render(self) -> str:
        label = self.agent_name.replace("-", " ").title()
        parts = [f"**{label} (Offline Mode)**"]
        if self.guidance:
            parts.append(self.guidance)

        checklist = "\n".join(f"- [ ] {item}" for item in self.checklist)
        if self.operation == Operation.DOCUMENT_REVIEW:
            # Reviews lead with the checklist; the skeleton shows the expected shape
            parts.append(f"## Review Checklist\n{checklist}")
            parts.append(f"## Expected Structure\n\n{self.skeleton}")
        else:
            parts.append(f"## Template\n\n{self.skeleton}")
            parts.append(f"## Completion Checklist\n{checklist}")

        parts.append("## Available Offline\n" + "\n".join(f"- {c}" for c in self.capabilities))
        parts.append(
            "## Unavailable Until Generation Returns\n"
            + "\n".join(f"- {item}" for item in self.limitations)
        )
        return "\n\n".join(parts)


class OfflineFallbackGenerator:
    """Builds fallback content and offline command responses."""

    def generate(
        self,
        agent_name: str,
        document_type: str,
        operation: Operation,
        request: Request,
        guidance: str = "",
    ) -> FallbackContent:
        title = title_from_prompt(request.prompt_text, document_type)
        return FallbackContent(
            agent_name=agent_name,
            document_type=document_type,
            operation=Operation(operation),
            title=title,
            skeleton=render_skeleton(document_type, title),
            checklist=checklist_for(document_type),
            capabilities=OFFLINE_CAPABILITIES,
            limitations=OFFLINE_LIMITATIONS,
            guidance=guidance,
        )

    # -------------------------------------------------------------------
    # Mode handlers
    # -------------------------------------------------------------------

    def command_response(self, agent: Agent, request: Request, availability: Availability) -> Response:
        """Serve one of the whitelisted offline commands."""
        command = (request.command or "").strip().lower()
        if command not in config.OFFLINE_COMMANDS:
            return self.reject(request)

        if command == "new":
            operation = Operation.DOCUMENT_CREATION
            fallback = self.generate(
                agent.name, agent.document_type, operation, request,
                guidance=agent.offline_responder(operation),
            )
            path = default_document_path(agent.document_type, fallback.title, config.DEFAULT_DIRECTORY)
            logger.info("Offline /new for %s -> %s", agent.name, path)
            return Response(
                content=f"Created an offline {agent.document_type} skeleton at `{path}`.\n\n{fallback.render()}",
                document_updates=[DocumentUpdate(
                    target_path=path, section="content", content=fallback.skeleton, mode="replace",
                )],
                followups=["/template", "/status", "/help"],
                proposed_state={
                    "documents": {agent.document_type: path},
                    "current_phase": agent.workflow_phase,
                    "active_agent": agent.name,
                    "event": f"offline-create:{agent.document_type}",
                },
            )

        if command == "template":
            fallback = self.generate(agent.name, agent.document_type, Operation.DOCUMENT_CREATION, request)
            return Response(
                content=fallback.render(),
                followups=[f"/new <{agent.document_type} title>", "/status"],
            )

        if command == "help":
            return Response(content=self._help_text(agent), followups=["/new <title>", "/template", "/status"])

        return Response(content=self._status_text(availability), followups=["/help", "/template"])

    def guidance_response(self, agent: Agent, request: Request) -> Response:
        """Structured fallback narrative for requests that are not offline commands."""
        operation = classify_operation(request.prompt_text, request.command)
        fallback = self.generate(
            agent.name, agent.document_type, operation, request,
            guidance=agent.offline_responder(operation),
        )
        content = fallback.render()
        command = (request.command or "").strip().lower()
        if command and command != config.CHAT_COMMAND:
            content = f"{self._rejection_text(command)}\n\n{content}"
        return Response(content=content, followups=["/new <title>", "/template", "/status"])

    def reject(self, request: Request) -> Response:
        return Response(
            content=self._rejection_text((request.command or "").strip().lower()),
            followups=["/help", "/template", "/status"],
        )

    # -------------------------------------------------------------------
    # Fixed texts
    # -------------------------------------------------------------------

    @staticmethod
    def _rejection_text(command: str) -> str:
        allowed = ", ".join(f"/{c}" for c in config.OFFLINE_COMMANDS)
        return (
            f"The /{command} command needs the generation backend, which is unavailable. "
            f"Commands available offline: {allowed}."
        )

    @staticmethod
    def _help_text(agent: Agent) -> str:
        label = agent.name.replace("-", " ")
        return (
            f"I'm the {label} agent, running in offline mode.\n\n"
            "**Available commands:**\n"
            f"- `/new <title>` - Create a {agent.document_type} document from a template\n"
            "- `/template` - Show the document template and checklist\n"
            "- `/status` - Check offline status\n"
            "- `/help` - Show this help\n\n"
            "Guided conversations and generated content return once the backend is reachable."
        )

    @staticmethod
    def _status_text(availability: Availability) -> str:
        reason = availability.reason or "generation backend unavailable"
        return (
            f"**Status:** Offline ({reason})\n\n"
            "**Available:**\n" + "\n".join(f"- {c}" for c in OFFLINE_CAPABILITIES)
            + "\n\n**Unavailable:**\n" + "\n".join(f"- {item}" for item in OFFLINE_LIMITATIONS)
        )
