"""Agent request handling — the single entry point from the transport.

One request flows through:
1. Resolve the owning agent (registry errors propagate).
2. Select the mode.
3. Dispatch to offline fallback, conversation engine, or the agent's direct
   handler. Any other failure falls back to direct handling, and a failure
   there becomes a plain apology.
4. Assemble the Response (followups deduplicated and capped).
"""

import logging

from . import config
from .agents import AgentContext, agent_name_for, document_path_for
from .conversation import ConversationEngine
from .errors import CONFIGURATION_ERRORS, SessionNotFoundError
from .models import (
    Agent,
    Availability,
    ConversationReply,
    ConversationSummary,
    DocumentUpdate,
    Request,
    Response,
    Session,
    WorkflowState,
)
from .modes import Mode, read_mode_override, select_mode
from .offline import OfflineFallbackGenerator, title_from_prompt
from .registry import AgentRegistry

logger = logging.getLogger("docu.orchestrator")

APOLOGY = (
    "I hit an error handling that request. Your documents are unchanged; "
    "please try again, or use /help to see what is available."
)


class AgentRequestHandler:
    """Routes requests to agents.

    ``engine`` is optional: without one, chat requests are served directly.
    ``backend`` is the GenerationBackend handed to direct handlers when the
    request's Availability says generation is possible.
    """

    def __init__(
        self,
        registry: AgentRegistry,
        engine: ConversationEngine | None = None,
        fallback: OfflineFallbackGenerator | None = None,
        backend=None,
    ):
        self.registry = registry
        self.engine = engine
        self.fallback = fallback or OfflineFallbackGenerator()
        self.backend = backend

    def handle(
        self,
        request: Request,
        availability: Availability,
        workflow_state: WorkflowState | None = None,
        tools=None,
    ) -> Response:
        workflow_state = workflow_state or WorkflowState()
        agent = self._resolve_agent(request, workflow_state)

        mode = None
        try:
            mode = select_mode(
                request,
                backend_available=availability.backend_available,
                has_active_session=self.get_active_session(agent.name) is not None,
                explicit_override=read_mode_override(request.parameters),
                conversation_attached=self.engine is not None,
            )
            logger.info("Request for %s: command=%s mode=%s", agent.name, request.command, mode.value)

            if mode == Mode.OFFLINE_COMMAND:
                response = self.fallback.command_response(agent, request, availability)
            elif mode == Mode.OFFLINE_GUIDANCE:
                response = self.fallback.guidance_response(agent, request)
            elif mode == Mode.ONLINE_CONVERSATION:
                response = self._handle_conversation(agent, request, workflow_state, tools)
            else:
                response = self._handle_direct(agent, request, availability, workflow_state, tools)
        except CONFIGURATION_ERRORS:
            raise
        except Exception:
            if mode == Mode.ONLINE_DIRECT:
                logger.exception("Direct handling failed for %s", agent.name)
                response = Response(content=APOLOGY, followups=["/help"])
            else:
                logger.exception("%s handling failed for %s; falling back to direct handling",
                                 mode.value if mode else "Mode selection", agent.name)
                response = self._fallback_direct(agent, request, availability, workflow_state, tools)

        return _finalize(response)

    # -------------------------------------------------------------------
    # Session introspection
    # -------------------------------------------------------------------

    def get_active_session(self, agent_name: str) -> Session | None:
        if self.engine is None:
            return None
        return self.engine.get_active_session(agent_name)

    def end_conversation(self, session_id: str) -> ConversationSummary:
        if self.engine is None:
            raise SessionNotFoundError(session_id)
        return self.engine.end(session_id)

    # -------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------

    def _resolve_agent(self, request: Request, workflow_state: WorkflowState) -> Agent:
        key = (
            request.parameters.get("agent")
            or request.parameters.get("phase")
            or workflow_state.current_phase
        )
        return self.registry.resolve(str(key))

    def _handle_direct(
        self,
        agent: Agent,
        request: Request,
        availability: Availability,
        workflow_state: WorkflowState,
        tools,
    ) -> Response:
        if tools is None:
            # No workspace access: same answer for every agent
            title = title_from_prompt(request.prompt_text, agent.document_type)
            return Response(
                content=(
                    "I can't reach the workspace files right now, so I can't read or write documents. "
                    f"Here is the {agent.document_type} template to work from:\n\n"
                    f"{agent.template_provider(title)}"
                ),
                followups=["/template", "/help"],
            )
        ctx = AgentContext(
            agent=agent,
            workflow_state=workflow_state,
            tools=tools,
            backend=self.backend if availability.backend_available else None,
            availability=availability,
            session=self.get_active_session(agent.name),
            agent_names=tuple(self.registry.agents),
        )
        return agent.direct_handler(request, ctx)

    def _fallback_direct(self, agent, request, availability, workflow_state, tools) -> Response:
        try:
            return self._handle_direct(agent, request, availability, workflow_state, tools)
        except Exception:
            logger.exception("Direct fallback failed for %s", agent.name)
            return Response(content=APOLOGY, followups=["/help"])

    def _handle_conversation(
        self,
        agent: Agent,
        request: Request,
        workflow_state: WorkflowState,
        tools,
    ) -> Response:
        session = self.engine.get_active_session(agent.name)
        if session is not None and session.is_complete:
            # A finished session is closed before the next chat opens a new one
            self.engine.end(session.session_id)
            session = None

        seed = []
        proposed = None
        if session is None:
            path = document_path_for(agent.document_type, workflow_state)
            reply = self.engine.start(agent, path)
            seed = _seed_document(agent, path, tools)
            proposed = {"current_phase": agent.workflow_phase, "active_agent": agent.name,
                        "event": f"conversation-start:{agent.workflow_phase}"}
            if seed:
                proposed["documents"] = {agent.document_type: path}
        else:
            reply = self.engine.continue_conversation(session.session_id, request.prompt_text)
            if reply.complete:
                proposed = {"event": f"conversation-complete:{agent.workflow_phase}"}

        return Response(
            content=_conversation_content(reply),
            document_updates=seed + list(reply.document_updates),
            followups=_conversation_followups(agent, reply),
            proposed_state=proposed,
        )


# ---------------------------------------------------------------------------
# Response assembly helpers
# ---------------------------------------------------------------------------

def _seed_document(agent: Agent, path: str, tools) -> list[DocumentUpdate]:
    """Skeleton write for a conversation's target document when it doesn't exist yet."""
    if tools is None:
        return []
    if tools.execute("readFile", {"path": path}).get("success"):
        return []
    skeleton = agent.template_provider(title_from_prompt("", agent.document_type))
    return [DocumentUpdate(target_path=path, content=skeleton, section="content", mode="replace")]


def _conversation_content(reply: ConversationReply) -> str:
    session = reply.session
    total = len(session.question_set)
    content = reply.message
    content += (
        f"\n\n*Progress: {round(session.completion_score * 100)}% "
        f"({len(session.answered_questions)}/{total} questions)*"
    )
    if reply.document_updates:
        content += (
            f"\n\n*Document updated: {len(reply.document_updates)} section(s) "
            f"in `{session.document_path}`*"
        )
    return content


def _conversation_followups(agent: Agent, reply: ConversationReply) -> list[str]:
    if reply.complete:
        followups = [f"/review --agent {agent.name}"]
        if reply.next_phase:
            followups.append(f"/new <title> --agent {agent_name_for(reply.next_phase)}")
        return followups
    if reply.next_question is not None:
        return list(reply.next_question.examples)
    return []


def _finalize(response: Response) -> Response:
    """Deduplicate followups (order kept) and cap them; never return empty content."""
    seen = set()
    followups = []
    for item in response.followups:
        if item and item not in seen:
            seen.add(item)
            followups.append(item)
    response.followups = followups[:config.MAX_FOLLOWUPS]
    if not response.content.strip():
        response.content = APOLOGY
    return response
