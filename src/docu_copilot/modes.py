"""Mode selection — pure routing decision for an incoming request."""

from enum import Enum

from . import config
from .models import Request


class Mode(str, Enum):
    OFFLINE_COMMAND = "offline-command"
    OFFLINE_GUIDANCE = "offline-guidance"
    ONLINE_CONVERSATION = "online-conversation"
    ONLINE_DIRECT = "online-direct"

    @property
    def is_offline(self) -> bool:
        return self in (Mode.OFFLINE_COMMAND, Mode.OFFLINE_GUIDANCE)


_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def read_mode_override(parameters: dict) -> str | None:
    """Return "conversation", "direct" or None from request parameters.

    Conversation wins when both flags are set.
    """
    if _flag(parameters.get("conversationMode", False)):
        return "conversation"
    if _flag(parameters.get("directMode", False)):
        return "direct"
    return None


def select_mode(
    request: Request,
    backend_available: bool,
    has_active_session: bool,
    explicit_override: str | None = None,
    conversation_attached: bool = True,
) -> Mode:
    """Choose how a request is served. First matching rule wins.

    An active session never captures an explicit command: has_active_session
    does not change the outcome, a non-chat command still routes direct.
    """
    command = (request.command or "").strip().lower()

    if not backend_available:
        if command in config.OFFLINE_COMMANDS:
            return Mode.OFFLINE_COMMAND
        return Mode.OFFLINE_GUIDANCE

    if explicit_override == "conversation":
        return Mode.ONLINE_CONVERSATION
    if explicit_override == "direct":
        return Mode.ONLINE_DIRECT

    if command in ("", config.CHAT_COMMAND) and conversation_attached:
        return Mode.ONLINE_CONVERSATION

    return Mode.ONLINE_DIRECT
