"""Agent registry — phase/name → Agent, write-once at startup."""

import logging
from types import MappingProxyType

from .errors import DuplicateAgentError, NotFoundError
from .models import Agent

logger = logging.getLogger("docu.registry")


class AgentRegistry:
    """Maps agent names and workflow phases to agents.

    Registration happens at startup; afterwards the registry is only read, so
    lookups need no locking.
    """

    def __init__(self, agents=()):
        self._by_name: dict[str, Agent] = {}
        self._by_phase: dict[str, Agent] = {}
        for agent in agents:
            self.register(agent)

    def register(self, agent: Agent) -> None:
        if agent.name in self._by_name:
            raise DuplicateAgentError(agent.name)
        self._by_name[agent.name] = agent
        # First agent registered for a phase owns it
        self._by_phase.setdefault(agent.workflow_phase, agent)
        logger.info("Registered agent %s for phase %s", agent.name, agent.workflow_phase)

    def resolve(self, phase_or_name: str) -> Agent:
        key = (phase_or_name or "").strip().lower()
        agent = self._by_name.get(key) or self._by_phase.get(key)
        if agent is None:
            raise NotFoundError(phase_or_name)
        return agent

    def __contains__(self, phase_or_name: str) -> bool:
        key = (phase_or_name or "").strip().lower()
        return key in self._by_name or key in self._by_phase

    def __len__(self) -> int:
        return len(self._by_name)

    @property
    def agents(self):
        """Read-only view of registered agents by name."""
        return MappingProxyType(self._by_name)
