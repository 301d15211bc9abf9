"""Unit tests for docu_copilot.modes — routing decision and override flags."""

import itertools

import pytest

from docu_copilot.models import Request
from docu_copilot.modes import Mode, read_mode_override, select_mode


# ===================================================================
# select_mode
# ===================================================================


class TestSelectModeOffline:
    @pytest.mark.parametrize("command", ["new", "template", "help", "status", "NEW"])
    def test_whitelisted_command_is_offline_command(self, command):
        mode = select_mode(Request(command=command), backend_available=False, has_active_session=False)
        assert mode == Mode.OFFLINE_COMMAND

    @pytest.mark.parametrize("command", [None, "", "chat", "review", "deploy"])
    def test_everything_else_is_offline_guidance(self, command):
        mode = select_mode(Request(command=command), backend_available=False, has_active_session=True)
        assert mode == Mode.OFFLINE_GUIDANCE

    def test_offline_wins_over_override(self):
        mode = select_mode(
            Request(prompt_text="hello"),
            backend_available=False,
            has_active_session=False,
            explicit_override="conversation",
        )
        assert mode == Mode.OFFLINE_GUIDANCE
        assert mode.is_offline


class TestSelectModeOnline:
    def test_conversation_override_on_chat_request(self):
        mode = select_mode(
            Request(prompt_text="Let's start"),
            backend_available=True,
            has_active_session=False,
            explicit_override="conversation",
        )
        assert mode == Mode.ONLINE_CONVERSATION

    def test_conversation_override_beats_command(self):
        mode = select_mode(
            Request(command="review"),
            backend_available=True,
            has_active_session=False,
            explicit_override="conversation",
        )
        assert mode == Mode.ONLINE_CONVERSATION

    def test_direct_override_on_chat_request(self):
        mode = select_mode(
            Request(prompt_text="hello"),
            backend_available=True,
            has_active_session=True,
            explicit_override="direct",
        )
        assert mode == Mode.ONLINE_DIRECT

    @pytest.mark.parametrize("command", [None, "", "chat"])
    def test_chat_request_defaults_to_conversation(self, command):
        mode = select_mode(Request(command=command), backend_available=True, has_active_session=False)
        assert mode == Mode.ONLINE_CONVERSATION
        assert not mode.is_offline

    def test_chat_request_without_engine_is_direct(self):
        mode = select_mode(
            Request(prompt_text="hello"),
            backend_available=True,
            has_active_session=False,
            conversation_attached=False,
        )
        assert mode == Mode.ONLINE_DIRECT

    def test_non_chat_command_without_override_is_direct(self):
        mode = select_mode(Request(command="new"), backend_available=True, has_active_session=False)
        assert mode == Mode.ONLINE_DIRECT

    def test_active_session_does_not_capture_commands(self):
        mode = select_mode(Request(command="review"), backend_available=True, has_active_session=True)
        assert mode == Mode.ONLINE_DIRECT


class TestSelectModePurity:
    def test_repeated_calls_agree(self):
        requests = [Request(), Request(command="new"), Request(command="chat"), Request(command="review")]
        for request, available, active, override in itertools.product(
            requests, (True, False), (True, False), (None, "conversation", "direct"),
        ):
            first = select_mode(request, available, active, override)
            assert all(select_mode(request, available, active, override) == first for _ in range(3))

    def test_request_not_mutated(self):
        request = Request(prompt_text="hi", command="new", parameters={"agent": "prd"})
        select_mode(request, backend_available=True, has_active_session=False)
        assert request == Request(prompt_text="hi", command="new", parameters={"agent": "prd"})


# ===================================================================
# read_mode_override
# ===================================================================


class TestReadModeOverride:
    def test_absent(self):
        assert read_mode_override({}) is None

    @pytest.mark.parametrize("value", [True, "true", "1", "yes", "On"])
    def test_conversation_truthy(self, value):
        assert read_mode_override({"conversationMode": value}) == "conversation"

    def test_direct(self):
        assert read_mode_override({"directMode": True}) == "direct"

    @pytest.mark.parametrize("value", [False, "false", "0", "no"])
    def test_falsy_ignored(self, value):
        assert read_mode_override({"conversationMode": value, "directMode": value}) is None

    def test_conversation_wins_when_both_set(self):
        assert read_mode_override({"conversationMode": True, "directMode": True}) == "conversation"
