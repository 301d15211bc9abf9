"""Error taxonomy for the orchestration core."""


class DocuError(Exception):
    """Base class for all domain errors."""


class DuplicateAgentError(DocuError):
    def __init__(self, name: str):
        super().__init__(f"Agent '{name}' is already registered")
        self.name = name


class NotFoundError(DocuError):
    def __init__(self, key: str):
        super().__init__(f"No agent registered for '{key}'")
        self.key = key


class SessionAlreadyActiveError(DocuError):
    def __init__(self, agent_name: str, session_id: str):
        super().__init__(
            f"Agent '{agent_name}' already has an active session ({session_id}); end or abandon it first"
        )
        self.agent_name = agent_name
        self.session_id = session_id


class SessionNotFoundError(DocuError):
    def __init__(self, session_id: str, reason: str = "not found"):
        super().__init__(f"Session {session_id} {reason}")
        self.session_id = session_id
        self.reason = reason


class BackendUnavailableError(DocuError):
    """The generation backend cannot serve requests right now."""

    def __init__(self, reason: str):
        super().__init__(f"Generation backend unavailable: {reason}")
        self.reason = reason


# Registry/configuration defects: never recovered by the orchestrator
CONFIGURATION_ERRORS = (DuplicateAgentError, NotFoundError)


class PartialDerivationWarning(UserWarning):
    """An update hint, or the whole turn output, could not be derived.

    Collected by the deriver and logged by its caller; never raised.
    ``index`` is None when the turn output itself is malformed.
    """

    def __init__(self, index: int | None, reason: str):
        target = "turn output" if index is None else f"update hint #{index}"
        super().__init__(f"Skipped {target}: {reason}")
        self.index = index
        self.reason = reason
