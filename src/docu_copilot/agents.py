"""The four phase agents.

Agents are plain data: an ``Agent`` record per phase carrying its question
set and three behaviour hooks. All phase-specific differences live in
AGENT_SPECS and the text tables below; the handlers themselves are shared.
"""

import logging
from dataclasses import dataclass
from functools import partial

from . import config
from .conversation import NEXT_PHASE
from .errors import BackendUnavailableError
from .models import (
    DOCUMENT_TYPES,
    PHASES,
    Agent,
    Availability,
    DocumentUpdate,
    Request,
    Response,
    Session,
    WorkflowState,
)
from .offline import Operation, title_from_prompt
from .prompts import (
    CREATE_DOCUMENT_PROMPT,
    GUIDANCE_PROMPT,
    PRD_CREATOR_PROMPT,
    REQUIREMENTS_GATHERER_PROMPT,
    REVIEW_DOCUMENT_PROMPT,
    SOLUTION_ARCHITECT_PROMPT,
    SPECIFICATION_WRITER_PROMPT,
)
from .questions import question_set_for
from .registry import AgentRegistry
from .templates import default_document_path, render_checklist, render_skeleton

logger = logging.getLogger("docu.agents")

FILE_OPERATIONS = frozenset({"readFile", "writeFile", "insertSection", "listFiles"})

# phase -> (agent name, system instructions)
AGENT_SPECS = {
    "prd": ("prd-creator", PRD_CREATOR_PROMPT),
    "requirements": ("requirements-gatherer", REQUIREMENTS_GATHERER_PROMPT),
    "design": ("solution-architect", SOLUTION_ARCHITECT_PROMPT),
    "implementation": ("specification-writer", SPECIFICATION_WRITER_PROMPT),
}

# Phase -> phase whose document it builds on
PREREQUISITES = {
    "requirements": "prd",
    "design": "requirements",
    "implementation": "design",
}

_DOCUMENT_LABELS = {
    "prd": "PRD",
    "requirements": "requirements",
    "design": "design",
    "tasks": "implementation plan",
}

_PHASE_FOCUS = {
    "prd": "Start from the problem, not the solution: who has it, how often, and what it costs them.",
    "requirements": "Write each requirement as a user story with EARS acceptance criteria (WHEN/IF ... THEN the system SHALL ...).",
    "design": "Make sure every requirement maps to at least one component, and write down the trade-off behind each major decision.",
    "implementation": "Keep each task small enough to finish in 1-4 hours and reference the requirements it satisfies.",
}

_OPERATION_TIPS = {
    Operation.DOCUMENT_CREATION: "Use the template below as your starting point; replace each italic placeholder with your own content.",
    Operation.DOCUMENT_REVIEW: "Walk through the checklist below against your document; every unchecked item is a gap to close.",
    Operation.CONVERSATION: "Guided questions need the generation backend, but the template and checklist below cover the same ground.",
}


@dataclass
class AgentContext:
    """Everything a direct handler may touch for one request."""

    agent: Agent
    workflow_state: WorkflowState
    tools: object  # executor with execute(tool_name, params) -> {"success", "data"|"error"}
    backend: object | None = None  # GenerationBackend, or None when unavailable
    availability: Availability | None = None
    session: Session | None = None  # the agent's active conversation, if any
    agent_names: tuple[str, ...] = ()


def document_label(document_type: str) -> str:
    return _DOCUMENT_LABELS.get(document_type, document_type)


def agent_name_for(phase: str) -> str:
    return AGENT_SPECS[phase][0]


def document_path_for(document_type: str, workflow_state: WorkflowState, title: str = "") -> str:
    """Known path of a phase document, or where a new one would go."""
    known = workflow_state.documents.get(document_type)
    if known:
        return known
    return default_document_path(document_type, title or document_type, config.DEFAULT_DIRECTORY)


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------

def offline_guidance(phase: str, operation: Operation) -> str:
    """Canned, deterministic guidance for an agent when generation is unavailable."""
    return f"{_PHASE_FOCUS[phase]}\n\n{_OPERATION_TIPS[Operation(operation)]}"


def handle_direct_request(request: Request, ctx: AgentContext) -> Response:
    """Shared direct-request handler: new, review, template, help, status, or free guidance."""
    command = (request.command or "").strip().lower()
    if command == "help":
        return _help(ctx)
    if command == "status":
        return _status(ctx)
    if command == "new":
        missing = _missing_prerequisite(ctx)
        if missing is not None:
            return missing
        return _create_document(request, ctx)
    if command == "review":
        return _review_document(request, ctx)
    if command == "template":
        title = title_from_prompt(request.prompt_text, ctx.agent.document_type)
        return Response(
            content=f"{ctx.agent.template_provider(title)}\n\n## Completion Checklist\n"
                    f"{render_checklist(ctx.agent.document_type)}",
            followups=[f"/new <{document_label(ctx.agent.document_type)} title>"],
        )
    return _guidance(request, ctx)


# ---------------------------------------------------------------------------
# Direct-request operations
# ---------------------------------------------------------------------------

def _read_document(ctx: AgentContext, path: str) -> str | None:
    if not ctx.agent.can_use("readFile"):
        return None
    result = ctx.tools.execute("readFile", {"path": path})
    if not result.get("success"):
        return None
    return result["data"]["content"]


def _missing_prerequisite(ctx: AgentContext) -> Response | None:
    """A response naming the missing prior-phase document, or None when present."""
    previous_phase = PREREQUISITES.get(ctx.agent.workflow_phase)
    if previous_phase is None:
        return None
    previous_type = DOCUMENT_TYPES[previous_phase]
    path = document_path_for(previous_type, ctx.workflow_state)
    if _read_document(ctx, path) is not None:
        return None

    previous_agent = agent_name_for(previous_phase)
    command = f"/new <title> --agent {previous_agent}"
    logger.info("%s blocked: missing %s document at %s", ctx.agent.name, previous_type, path)
    return Response(
        content=(
            f"The {document_label(previous_type)} document was not found at `{path}`. "
            f"The {ctx.agent.workflow_phase} phase builds on it, so create it first with `{command}`."
        ),
        followups=[command],
    )


def _prior_documents(ctx: AgentContext) -> dict[str, str]:
    """Earlier-phase documents that exist, for generation context."""
    documents = {}
    phase = PREREQUISITES.get(ctx.agent.workflow_phase)
    while phase is not None:
        path = document_path_for(DOCUMENT_TYPES[phase], ctx.workflow_state)
        text = _read_document(ctx, path)
        if text is not None:
            documents[path] = text
        phase = PREREQUISITES.get(phase)
    return documents


def _generate(ctx: AgentContext, prompt: str, documents: dict | None = None) -> str | None:
    """Generated text, or None when the backend is absent or fails."""
    if ctx.backend is None:
        return None
    try:
        return ctx.backend.generate(prompt, {
            "system": ctx.agent.system_instructions,
            "documents": documents or {},
        })
    except BackendUnavailableError as e:
        logger.warning("%s falling back to template: %s", ctx.agent.name, e)
        return None


def _create_document(request: Request, ctx: AgentContext) -> Response:
    agent = ctx.agent
    document_type = agent.document_type
    title = title_from_prompt(request.prompt_text, document_type)
    template = agent.template_provider(title)
    path = default_document_path(document_type, title, config.DEFAULT_DIRECTORY)

    detail = request.parameters.get("detail", "")
    generated = _generate(
        ctx,
        CREATE_DOCUMENT_PROMPT.format(
            document_type=document_label(document_type),
            title=title,
            template=template,
            request_detail=f"Additional detail from the user: {detail}" if detail else "",
        ),
        _prior_documents(ctx),
    )
    body = generated or template
    note = "" if generated else " Generation was unavailable, so it starts from the template."

    followups = [f"/review --agent {agent.name}"]
    next_phase = NEXT_PHASE.get(agent.workflow_phase)
    if next_phase:
        followups.append(f"/new <title> --agent {agent_name_for(next_phase)}")
    followups.append("Tell me more and I'll ask guided questions")

    logger.info("%s created %s at %s (generated=%s)", agent.name, document_type, path, bool(generated))
    return Response(
        content=f"Created the {document_label(document_type)} document `{path}`.{note}\n\n{body}",
        document_updates=[DocumentUpdate(target_path=path, content=body, section="content", mode="replace")],
        followups=followups,
        proposed_state={
            "documents": {document_type: path},
            "current_phase": agent.workflow_phase,
            "active_agent": agent.name,
            "event": f"create:{document_type}",
        },
    )


def _review_document(request: Request, ctx: AgentContext) -> Response:
    agent = ctx.agent
    document_type = agent.document_type
    path = request.parameters.get("path") or document_path_for(
        document_type, ctx.workflow_state, title_from_prompt(request.prompt_text, document_type),
    )
    document = _read_document(ctx, path)
    if document is None:
        return Response(
            content=(
                f"No {document_label(document_type)} document found at `{path}`. "
                f"Create one first with `/new <title> --agent {agent.name}`."
            ),
            followups=[f"/new <title> --agent {agent.name}"],
        )

    checklist = render_checklist(document_type)
    review = _generate(ctx, REVIEW_DOCUMENT_PROMPT.format(
        document_type=document_label(document_type),
        checklist=checklist,
        path=path,
        document=document,
    ))
    if review is None:
        review = f"Generation is unavailable, so review `{path}` against this checklist:\n\n{checklist}"
    return Response(
        content=f"## Review of `{path}`\n\n{review}",
        followups=["Let's work through the gaps together"],
    )


def _help(ctx: AgentContext) -> Response:
    agent = ctx.agent
    label = document_label(agent.document_type)
    lines = [
        f"I'm the {agent.name.replace('-', ' ')} agent for the {agent.workflow_phase} phase.",
        "",
        "**Available commands:**",
        f"- `/new <title>` - Create the {label} document",
        f"- `/review [--path <file>]` - Review the {label} document against its checklist",
        "- `/template` - Show the document template and checklist",
        "- `/status` - Show workflow progress and backend status",
        "- `/help` - Show this help",
        "- `--agent <name>` or `--phase <phase>` - Send a command to another agent",
        "",
        "Anything without a leading `/` starts or continues a guided conversation.",
    ]
    if ctx.agent_names:
        lines += ["", "**Agents:** " + ", ".join(f"`{name}`" for name in ctx.agent_names)]
    return Response(
        content="\n".join(lines),
        followups=[f"/new <{label} title>", "/status", "/template"],
    )


def _status(ctx: AgentContext) -> Response:
    state = ctx.workflow_state
    lines = [f"**Current phase:** {state.current_phase}", "", "**Documents:**"]
    for phase in PHASES:
        document_type = DOCUMENT_TYPES[phase]
        path = state.documents.get(document_type)
        lines.append(f"- {document_label(document_type)}: `{path}`" if path
                     else f"- {document_label(document_type)}: not created")

    session = ctx.session
    if session is not None:
        answered = len(session.answered_questions)
        total = len(session.question_set)
        lines += ["", f"**Conversation:** {ctx.agent.name}, {answered}/{total} questions "
                      f"({round(session.completion_score * 100)}%)"]

    availability = ctx.availability
    if availability is None or availability.backend_available:
        lines += ["", "**Generation:** online"]
    else:
        lines += ["", f"**Generation:** offline ({availability.reason or 'backend unavailable'})"]

    followups = ["/help"]
    missing = [phase for phase in PHASES if DOCUMENT_TYPES[phase] not in state.documents]
    if missing:
        followups.insert(0, f"/new <title> --agent {agent_name_for(missing[0])}")
    return Response(content="\n".join(lines), followups=followups)


def _guidance(request: Request, ctx: AgentContext) -> Response:
    agent = ctx.agent
    prompt = (request.prompt_text or "").strip()
    text = None
    if prompt:
        text = _generate(ctx, GUIDANCE_PROMPT.format(
            phase=agent.workflow_phase,
            prompt=prompt,
            agent_label=agent.name.replace("-", " "),
            commands="/new, /review, /template",
        ), _prior_documents(ctx))
    if text is None:
        text = f"{_PHASE_FOCUS[agent.workflow_phase]}\n\n{render_checklist(agent.document_type)}"
    return Response(
        content=text,
        followups=[f"/new <{document_label(agent.document_type)} title>", "/review", "/template"],
    )


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def build_agent(phase: str) -> Agent:
    name, instructions = AGENT_SPECS[phase]
    return Agent(
        name=name,
        system_instructions=instructions,
        allowed_operations=FILE_OPERATIONS,
        workflow_phase=phase,
        question_set=question_set_for(phase),
        direct_handler=handle_direct_request,
        offline_responder=partial(offline_guidance, phase),
        template_provider=partial(render_skeleton, DOCUMENT_TYPES[phase]),
    )


def build_default_registry() -> AgentRegistry:
    """Registry with one agent per workflow phase, in workflow order."""
    return AgentRegistry(build_agent(phase) for phase in AGENT_SPECS)
