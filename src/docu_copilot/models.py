"""Data model shared by the orchestration core."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

PHASES = ("prd", "requirements", "design", "implementation")

# Workflow phase -> document type it produces
DOCUMENT_TYPES = {
    "prd": "prd",
    "requirements": "requirements",
    "design": "design",
    "implementation": "tasks",
}

UPDATE_MODES = ("append", "replace", "prepend")


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    examples: tuple[str, ...] = ()
    required: bool = True
    category: str = "general"
    priority: int = 0


@dataclass(frozen=True)
class Agent:
    """A named bundle of phase-specific behaviour.

    The orchestrator only ever touches the hooks, never agent internals:
    - direct_handler(request, agent_context) -> Response
    - offline_responder(operation) -> str
    - template_provider(title) -> str
    """

    name: str
    system_instructions: str
    allowed_operations: frozenset[str]
    workflow_phase: str
    question_set: tuple[Question, ...]
    direct_handler: Callable
    offline_responder: Callable
    template_provider: Callable

    def __post_init__(self):
        if self.workflow_phase not in PHASES:
            raise ValueError(f"Unknown workflow phase: {self.workflow_phase}")

    @property
    def document_type(self) -> str:
        return DOCUMENT_TYPES[self.workflow_phase]

    def can_use(self, operation: str) -> bool:
        return operation in self.allowed_operations


@dataclass
class Request:
    prompt_text: str = ""
    command: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    transport: Any = None  # Originating transport object, passed through unexamined


@dataclass(frozen=True)
class DocumentUpdate:
    target_path: str
    content: str
    section: str = "content"
    mode: str = "append"

    def to_dict(self) -> dict:
        """Shape accepted verbatim by the tool executor."""
        return {
            "targetPath": self.target_path,
            "section": self.section,
            "content": self.content,
            "mode": self.mode,
        }


@dataclass(frozen=True)
class ConversationTurn:
    type: str  # "system" | "question" | "response"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class Session:
    session_id: str
    owner_agent: str
    phase: str
    question_set: tuple[Question, ...]
    document_path: str
    current_question_index: int = 0
    answered_questions: dict[str, str] = field(default_factory=dict)
    completion_score: float = 0.0
    is_active: bool = True
    status: str = "active"  # "active" | "completed" | "abandoned"
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)
    history: list[ConversationTurn] = field(default_factory=list)
    documents_updated: list[str] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def current_question(self) -> Question | None:
        if self.current_question_index < len(self.question_set):
            return self.question_set[self.current_question_index]
        return None

    @property
    def is_complete(self) -> bool:
        return self.current_question_index >= len(self.question_set)


@dataclass(frozen=True)
class ConversationSummary:
    session_id: str
    agent_name: str
    phase: str
    questions_asked: int
    questions_answered: int
    documents_updated: tuple[str, ...]
    completion_score: float
    duration: float  # seconds between creation and last activity
    created_at: datetime
    completed_at: datetime


@dataclass
class ConversationReply:
    """Outcome of one engine transition, before response assembly."""

    session: Session
    message: str
    next_question: Question | None = None
    complete: bool = False
    document_updates: list[DocumentUpdate] = field(default_factory=list)
    next_phase: str | None = None


@dataclass
class Response:
    content: str
    document_updates: list[DocumentUpdate] = field(default_factory=list)
    followups: list[str] = field(default_factory=list)
    # Proposed workflow-state mutations; the caller decides whether to apply them
    proposed_state: dict[str, Any] | None = None


@dataclass
class WorkflowState:
    current_phase: str = "prd"
    documents: dict[str, str] = field(default_factory=dict)
    active_agent: str | None = None
    history: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "current_phase": self.current_phase,
            "documents": dict(self.documents),
            "active_agent": self.active_agent,
            "history": list(self.history),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkflowState":
        return cls(
            current_phase=data.get("current_phase", "prd"),
            documents=dict(data.get("documents", {})),
            active_agent=data.get("active_agent"),
            history=list(data.get("history", [])),
        )

    def apply(self, changes: dict | None) -> None:
        """Apply a Response.proposed_state mapping."""
        if not changes:
            return
        if "current_phase" in changes:
            self.current_phase = changes["current_phase"]
        if "active_agent" in changes:
            self.active_agent = changes["active_agent"]
        self.documents.update(changes.get("documents", {}))
        if changes.get("event"):
            self.history.append({
                "timestamp": datetime.now().isoformat(),
                "event": changes["event"],
            })


@dataclass(frozen=True)
class Availability:
    backend_available: bool
    reason: str = ""
