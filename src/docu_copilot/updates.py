"""Document update derivation — conversation turn output → DocumentUpdate list.

A turn output is a mapping with an ``update_hints`` sequence. Each hint is a
mapping with ``content`` (required) and optional ``section``, ``mode`` and
``target_path``. Hints map 1:1 and in order to DocumentUpdate objects; a
malformed hint is skipped and reported, the rest still go through.
"""

from . import config
from .errors import PartialDerivationWarning
from .models import DocumentUpdate, Question, Session, UPDATE_MODES
from .questions import section_for


def derive(session: Session, turn_output: dict | None, skipped: list | None = None) -> list[DocumentUpdate]:
    """Map the latest turn output's hints to document updates.

    Pure: reads the session, never mutates it. If ``skipped`` is given, a
    PartialDerivationWarning is appended to it for every malformed hint so
    the caller can log it.
    """
    if turn_output is None:
        return []
    if not isinstance(turn_output, dict):
        _skip(skipped, None, f"turn output must be a mapping, got {type(turn_output).__name__}")
        return []
    hints = turn_output.get("update_hints") or []
    if not isinstance(hints, (list, tuple)):
        _skip(skipped, None, f"update_hints must be a list, got {type(hints).__name__}")
        return []

    updates = []
    for index, hint in enumerate(hints):
        try:
            updates.append(_hint_to_update(session, hint))
        except (TypeError, ValueError) as e:
            _skip(skipped, index, str(e))
    return updates


def _skip(skipped: list | None, index: int | None, reason: str) -> None:
    if skipped is not None:
        skipped.append(PartialDerivationWarning(index, reason))


def _hint_to_update(session: Session, hint) -> DocumentUpdate:
    if not isinstance(hint, dict):
        raise TypeError(f"hint must be a mapping, got {type(hint).__name__}")

    content = hint.get("content")
    if not isinstance(content, str) or not content.strip():
        raise ValueError("missing content")

    target_path = hint.get("target_path") or hint.get("targetPath") or session.document_path
    if not target_path:
        raise ValueError("no target path on hint or session")

    section = hint.get("section") or "content"
    if not isinstance(section, str):
        raise TypeError("section must be a string")

    mode = hint.get("mode") or "append"
    if mode not in UPDATE_MODES:
        raise ValueError(f"unknown mode '{mode}'")

    return DocumentUpdate(target_path=target_path, section=section, content=content, mode=mode)


# ---------------------------------------------------------------------------
# Default answer extractor: one hint per substantive answer
# ---------------------------------------------------------------------------

def extract_answer_hints(session: Session, question: Question, answer: str) -> dict:
    """Turn a recorded answer into a turn output with zero or one hint.

    Answers shorter than MIN_ANSWER_LENGTH carry too little to write down.
    """
    text = answer.strip()
    if len(text) < config.MIN_ANSWER_LENGTH:
        return {"update_hints": []}

    return {
        "update_hints": [{
            "section": section_for(session.phase, question.category),
            "content": _format_answer(session.phase, question, text),
            "mode": "append",
        }],
    }


def _format_answer(phase: str, question: Question, text: str) -> str:
    if phase != "requirements":
        return f"{text}\n\n"
    if question.category == "user-story":
        return f"**User Story:** {text}\n\n"
    if question.category == "acceptance":
        return f"**Acceptance Criteria:**\n{text}\n\n"
    label = question.category.replace("-", " ").title() or "Requirement"
    return f"**{label}:** {text}\n\n"
