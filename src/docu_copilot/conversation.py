"""Conversation sessions — store, lifecycle and question progression.

Per agent: NoSession --start--> Active --answer--> Active
                                Active --end--> Completed
                                Active --abandon--> Abandoned

The store lock guards the session maps; each session's own lock serializes
its transitions. Neither lock is held while the answer extractor runs, since
a pluggable extractor may call out to the generation backend.
"""

import logging
import threading
import uuid
from datetime import datetime

from .errors import SessionAlreadyActiveError, SessionNotFoundError
from .models import (
    Agent,
    ConversationReply,
    ConversationSummary,
    ConversationTurn,
    Question,
    Session,
)
from .updates import derive, extract_answer_hints

logger = logging.getLogger("docu.conversation")

NEXT_PHASE = {
    "prd": "requirements",
    "requirements": "design",
    "design": "implementation",
}


class SessionStore:
    """Sessions keyed by id, with at most one active session per agent.

    Inactive sessions are retained for audit.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self._active_by_agent: dict[str, str] = {}

    def create(self, agent: Agent, document_path: str) -> Session:
        with self._lock:
            existing = self._active_by_agent.get(agent.name)
            if existing is not None:
                raise SessionAlreadyActiveError(agent.name, existing)
            session = Session(
                session_id=f"conv_{uuid.uuid4().hex[:12]}",
                owner_agent=agent.name,
                phase=agent.workflow_phase,
                question_set=tuple(agent.question_set),
                document_path=document_path,
            )
            self._sessions[session.session_id] = session
            self._active_by_agent[agent.name] = session.session_id
        return session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def get_active(self, agent_name: str) -> Session | None:
        with self._lock:
            session_id = self._active_by_agent.get(agent_name)
            return self._sessions.get(session_id) if session_id else None

    def require_active(self, session_id: str) -> Session:
        session = self.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if not session.is_active:
            raise SessionNotFoundError(session_id, "is not active")
        return session

    def deactivate(self, session_id: str, status: str) -> Session:
        """Mark an active session inactive with a terminal status."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            with session.lock:
                if not session.is_active:
                    raise SessionNotFoundError(session_id, "is not active")
                session.is_active = False
                session.status = status
                session.last_activity = datetime.now()
            if self._active_by_agent.get(session.owner_agent) == session_id:
                del self._active_by_agent[session.owner_agent]
        return session

    def all(self) -> list[Session]:
        with self._lock:
            return list(self._sessions.values())


class ConversationEngine:
    """Advances sessions one answer at a time.

    ``extractor(session, question, answer) -> turn_output`` turns an answer
    into update hints; the default writes each substantive answer under the
    section its question category maps to.
    """

    def __init__(self, store: SessionStore | None = None, extractor=extract_answer_hints):
        self.store = store or SessionStore()
        self.extractor = extractor

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------

    def start(self, agent: Agent, document_path: str) -> ConversationReply:
        session = self.store.create(agent, document_path)
        first = session.current_question
        message = _opening_message(agent, first)
        with session.lock:
            session.history.append(ConversationTurn(
                "system",
                f"Conversation started with {agent.name} for {agent.document_type} in {agent.workflow_phase} phase",
            ))
            session.history.append(ConversationTurn("question", message))
        logger.info("Started session %s for %s (%d questions)",
                    session.session_id, agent.name, len(session.question_set))
        return ConversationReply(
            session=session,
            message=message,
            next_question=first,
            complete=first is None,
        )

    def restart(self, agent: Agent, document_path: str) -> ConversationReply:
        """End the agent's active session, if any, then start a fresh one."""
        existing = self.store.get_active(agent.name)
        if existing is not None:
            self.end(existing.session_id)
        return self.start(agent, document_path)

    def end(self, session_id: str) -> ConversationSummary:
        session = self.store.deactivate(session_id, "completed")
        with session.lock:
            summary = ConversationSummary(
                session_id=session.session_id,
                agent_name=session.owner_agent,
                phase=session.phase,
                questions_asked=sum(1 for t in session.history if t.type == "question"),
                questions_answered=len(session.answered_questions),
                documents_updated=tuple(session.documents_updated),
                completion_score=session.completion_score,
                duration=(session.last_activity - session.created_at).total_seconds(),
                created_at=session.created_at,
                completed_at=datetime.now(),
            )
            session.history.append(ConversationTurn(
                "system",
                f"Conversation completed. Score: {summary.completion_score:.2f}, Duration: {round(summary.duration)}s",
            ))
        logger.info("Ended session %s (score %.2f)", session_id, summary.completion_score)
        return summary

    def abandon(self, session_id: str) -> Session:
        session = self.store.deactivate(session_id, "abandoned")
        with session.lock:
            session.history.append(ConversationTurn("system", "Conversation abandoned"))
        logger.info("Abandoned session %s", session_id)
        return session

    def get_active_session(self, agent_name: str) -> Session | None:
        return self.store.get_active(agent_name)

    def get_session(self, session_id: str) -> Session | None:
        return self.store.get(session_id)

    def list_sessions(self) -> list[Session]:
        """Every session, active or not, in creation order."""
        return self.store.all()

    # -------------------------------------------------------------------
    # Answer transition
    # -------------------------------------------------------------------

    def continue_conversation(self, session_id: str, answer: str) -> ConversationReply:
        session = self.store.require_active(session_id)
        text = (answer or "").strip()

        # Step 1: commit the answer. All new values are computed before any
        # field is assigned, so the transition lands whole or not at all.
        with session.lock:
            if not session.is_active:
                raise SessionNotFoundError(session_id, "is not active")
            question = session.current_question
            if question is None:
                return self._completion_reply(session)
            if not text:
                return ConversationReply(
                    session=session,
                    message=f"I didn't catch an answer there. {question.text}",
                    next_question=question,
                )

            answered = dict(session.answered_questions)
            answered[question.id] = text
            total = len(session.question_set)
            index = min(session.current_question_index + 1, total)
            score = max(session.completion_score, len(answered) / max(1, total))

            session.answered_questions = answered
            session.current_question_index = index
            session.completion_score = score
            session.last_activity = datetime.now()
            session.history.append(ConversationTurn("response", text))
            # Next turn is recorded in the same step as the answer
            reply = self._next_reply(session)
            session.history.append(ConversationTurn("question", reply.message))

        # Step 2: extraction and derivation, outside any lock
        updates = self._derive_updates(session, question, text)

        # Step 3: record what was touched
        reply.document_updates = updates
        with session.lock:
            for update in updates:
                touched = f"{update.target_path}#{update.section}"
                if touched not in session.documents_updated:
                    session.documents_updated.append(touched)

        logger.debug("Session %s answered %s (%d/%d, score %.2f)",
                     session_id, question.id, index, total, score)
        return reply

    def _derive_updates(self, session: Session, question: Question, answer: str):
        try:
            turn_output = self.extractor(session, question, answer)
        except Exception as e:
            logger.warning("Answer extraction failed for %s/%s: %s", session.session_id, question.id, e)
            return []
        skipped = []
        updates = derive(session, turn_output, skipped)
        for warning in skipped:
            logger.warning("Session %s: %s", session.session_id, warning)
        return updates

    def _next_reply(self, session: Session) -> ConversationReply:
        next_question = session.current_question
        if next_question is None:
            return self._completion_reply(session)
        return ConversationReply(
            session=session,
            message=f"Great! Now, {next_question.text}",
            next_question=next_question,
        )

    def _completion_reply(self, session: Session) -> ConversationReply:
        next_phase = NEXT_PHASE.get(session.phase)
        message = f"Excellent! We've covered all the essential questions for the {session.phase} phase."
        if next_phase:
            message += f" When you're ready, move on to the {next_phase} phase."
        else:
            message += " This is the final phase of the workflow."
        return ConversationReply(session=session, message=message, complete=True, next_phase=next_phase)


def _opening_message(agent: Agent, first: Question | None) -> str:
    message = (
        f"Hi! I'm the {agent.name.replace('-', ' ')} agent. "
        f"I'm here to help you with the {agent.workflow_phase} phase.\n\n"
    )
    if first is None:
        return message + "I don't have any questions for this phase."
    message += f"Let's start with this question:\n\n**{first.text}**"
    if first.examples:
        message += "\n\n*Examples:*\n" + "\n".join(f"- {e}" for e in first.examples[:2])
    return message
