"""Unit tests for docu_copilot.conversation — session store and engine."""

import threading

import pytest

from docu_copilot.conversation import ConversationEngine, SessionStore
from docu_copilot.errors import SessionAlreadyActiveError, SessionNotFoundError
from tests.unit.conftest import THREE_QUESTIONS

DOC = "docs/prd.md"


# ===================================================================
# Lifecycle
# ===================================================================


class TestStart:
    def test_start_binds_questions(self, engine, three_question_agent):
        reply = engine.start(three_question_agent, DOC)
        session = reply.session
        assert session.is_active
        assert session.status == "active"
        assert session.current_question_index == 0
        assert session.completion_score == 0.0
        assert session.owner_agent == "prd-creator"
        assert session.document_path == DOC
        assert reply.next_question.id == "q1"
        assert "What problem does this solve?" in reply.message
        assert not reply.complete

    def test_session_ids_unique(self, engine, three_question_agent, prd_agent):
        first = engine.start(three_question_agent, DOC).session
        engine.end(first.session_id)
        second = engine.start(prd_agent, DOC).session
        assert first.session_id != second.session_id
        assert second.session_id.startswith("conv_")

    def test_second_start_rejected(self, engine, three_question_agent):
        first = engine.start(three_question_agent, DOC).session
        with pytest.raises(SessionAlreadyActiveError) as exc:
            engine.start(three_question_agent, DOC)
        assert exc.value.session_id == first.session_id
        assert len(engine.list_sessions()) == 1

    def test_concurrent_starts_create_one_session(self, engine, three_question_agent):
        errors = []

        def start():
            try:
                engine.start(three_question_agent, DOC)
            except SessionAlreadyActiveError as e:
                errors.append(e)

        threads = [threading.Thread(target=start) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(engine.list_sessions()) == 1
        assert len(errors) == 7

    def test_restart_ends_existing(self, engine, three_question_agent):
        first = engine.start(three_question_agent, DOC).session
        second = engine.restart(three_question_agent, DOC).session
        assert first.status == "completed"
        assert engine.get_active_session("prd-creator") is second


class TestEndAndAbandon:
    def test_end_summary(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        engine.continue_conversation(session.session_id, "Checkout takes too many steps today")
        summary = engine.end(session.session_id)
        assert summary.questions_answered == 1
        assert summary.questions_asked == 2  # opening question + the follow-up
        assert summary.completion_score == pytest.approx(1 / 3)
        assert summary.documents_updated == (f"{DOC}#Problem Statement",)
        assert summary.duration >= 0
        assert not session.is_active
        assert session.status == "completed"
        assert engine.get_active_session("prd-creator") is None

    def test_abandon(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        engine.abandon(session.session_id)
        assert session.status == "abandoned"
        assert not session.is_active
        # Retained for audit
        assert engine.get_session(session.session_id) is session

    def test_end_twice_fails(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        engine.end(session.session_id)
        with pytest.raises(SessionNotFoundError) as exc:
            engine.end(session.session_id)
        assert exc.value.reason == "is not active"

    def test_start_allowed_after_end(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        engine.end(session.session_id)
        assert engine.start(three_question_agent, DOC).session.is_active


# ===================================================================
# continue_conversation
# ===================================================================


class TestContinueConversation:
    def test_three_answers_complete(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        replies = [
            engine.continue_conversation(session.session_id, answer)
            for answer in (
                "Checkout abandonment is at 70 percent",
                "Mobile shoppers buying one or two items",
                "Cut checkout to a single screen",
            )
        ]
        assert [r.complete for r in replies] == [False, False, True]
        assert replies[0].next_question.id == "q2"
        assert replies[-1].next_question is None
        assert session.completion_score == 1.0
        assert session.current_question_index == 3
        assert replies[-1].next_phase == "requirements"
        assert "requirements phase" in replies[-1].message

    def test_unknown_session_fails_without_side_effect(self, engine):
        with pytest.raises(SessionNotFoundError) as exc:
            engine.continue_conversation("conv_missing", "an answer")
        assert exc.value.session_id == "conv_missing"
        assert engine.list_sessions() == []

    def test_inactive_session_fails(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        engine.abandon(session.session_id)
        with pytest.raises(SessionNotFoundError):
            engine.continue_conversation(session.session_id, "late answer here")

    def test_monotonic_progress(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        scores = [session.completion_score]
        for answer in ("short", "", "Another substantive answer", "x", "more", "and more"):
            engine.continue_conversation(session.session_id, answer)
            scores.append(session.completion_score)
            assert session.current_question_index <= len(session.question_set)
        assert scores == sorted(scores)
        assert scores[-1] == 1.0

    def test_blank_answer_reasks(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        reply = engine.continue_conversation(session.session_id, "   ")
        assert reply.next_question.id == "q1"
        assert session.current_question_index == 0
        assert session.answered_questions == {}
        assert reply.document_updates == []

    def test_answer_after_completion_changes_nothing(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        for answer in ("first answer", "second answer", "third answer"):
            engine.continue_conversation(session.session_id, answer)
        answered = dict(session.answered_questions)
        reply = engine.continue_conversation(session.session_id, "one more thing")
        assert reply.complete
        assert session.answered_questions == answered
        assert session.current_question_index == 3

    def test_answers_recorded_by_question_id(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        engine.continue_conversation(session.session_id, "  Checkout is slow  ")
        assert session.answered_questions == {"q1": "Checkout is slow"}
        assert [t.type for t in session.history] == ["system", "question", "response", "question"]

    def test_substantive_answer_produces_update(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        reply = engine.continue_conversation(session.session_id, "Checkout takes too many steps")
        assert len(reply.document_updates) == 1
        update = reply.document_updates[0]
        assert update.target_path == DOC
        assert update.section == "Problem Statement"
        assert update.mode == "append"
        assert "Checkout takes too many steps" in update.content

    def test_short_answer_produces_no_update(self, engine, three_question_agent):
        session = engine.start(three_question_agent, DOC).session
        reply = engine.continue_conversation(session.session_id, "slow")
        assert reply.document_updates == []
        assert session.current_question_index == 1

    def test_extractor_failure_still_advances(self, three_question_agent):
        def broken(session, question, answer):
            raise RuntimeError("extractor down")

        engine = ConversationEngine(extractor=broken)
        session = engine.start(three_question_agent, DOC).session
        reply = engine.continue_conversation(session.session_id, "A perfectly good answer")
        assert reply.document_updates == []
        assert session.current_question_index == 1

    def test_non_mapping_extractor_output_still_advances(self, three_question_agent, caplog):
        def bare_list(session, question, answer):
            return [{"content": answer}]

        engine = ConversationEngine(extractor=bare_list)
        session = engine.start(three_question_agent, DOC).session
        with caplog.at_level("WARNING", logger="docu.conversation"):
            reply = engine.continue_conversation(session.session_id, "A perfectly good answer")
        assert reply.document_updates == []
        assert reply.next_question.id == "q2"
        assert session.current_question_index == 1
        assert "Skipped turn output" in caplog.text

    def test_malformed_hint_logged_and_skipped(self, three_question_agent, caplog):
        def extractor(session, question, answer):
            return {"update_hints": [{"content": "ok"}, {"section": "Goals"}, {"content": "also ok"}]}

        engine = ConversationEngine(extractor=extractor)
        session = engine.start(three_question_agent, DOC).session
        with caplog.at_level("WARNING", logger="docu.conversation"):
            reply = engine.continue_conversation(session.session_id, "An answer")
        assert [u.content for u in reply.document_updates] == ["ok", "also ok"]
        assert "Skipped update hint #1" in caplog.text

    def test_serialized_answers_never_skip_questions(self, engine, prd_agent):
        session = engine.start(prd_agent, DOC).session
        total = len(session.question_set)
        threads = [
            threading.Thread(
                target=engine.continue_conversation,
                args=(session.session_id, f"Concurrent answer number {i}"),
            )
            for i in range(total)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert session.current_question_index == total
        assert len(session.answered_questions) == total
        assert session.completion_score == 1.0

    def test_history_follows_submission_order_when_extraction_overlaps(self, three_question_agent):
        first_extracting = threading.Event()
        release_first = threading.Event()

        def slow_first(session, question, answer):
            if question.id == "q1":
                first_extracting.set()
                release_first.wait(timeout=5)
            return {"update_hints": []}

        engine = ConversationEngine(extractor=slow_first)
        session = engine.start(three_question_agent, DOC).session
        first = threading.Thread(target=engine.continue_conversation, args=(session.session_id, "first answer"))
        first.start()
        assert first_extracting.wait(timeout=5)
        engine.continue_conversation(session.session_id, "second answer")
        release_first.set()
        first.join()

        turns = [(t.type, t.content) for t in session.history[2:]]
        assert turns == [
            ("response", "first answer"),
            ("question", f"Great! Now, {THREE_QUESTIONS[1].text}"),
            ("response", "second answer"),
            ("question", f"Great! Now, {THREE_QUESTIONS[2].text}"),
        ]


class TestSessionStore:
    def test_require_active_unknown(self):
        with pytest.raises(SessionNotFoundError):
            SessionStore().require_active("conv_nope")

    def test_get_active_none(self):
        assert SessionStore().get_active("prd-creator") is None
