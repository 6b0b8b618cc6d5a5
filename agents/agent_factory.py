"""
Dynamic Agent Factory: Creates agents on demand from role definitions.
"""

from typing import Dict

from agents.base import DEFAULT_AGENT_TIMEOUT_MS, TextGenerator
from agents.role_types import RoleDefinition
from agents.universal_agent import UniversalWritingAgent


class DynamicAgentFactory:
    """
    Builds (or reuses) one UniversalWritingAgent per role.

    The cache is keyed strictly by role id: a hit is returned even if the
    role's prompt or constraints changed since the agent was built. Agents are
    only interchangeable if the same id always denotes the same role.
    """

    def __init__(self, generator: TextGenerator, timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS,
                 enable_caching: bool = True, temperature: float = 0.7):
        self.generator = generator
        self.timeout_ms = timeout_ms
        self.enable_caching = enable_caching
        self.temperature = temperature
        self._agent_cache: Dict[str, UniversalWritingAgent] = {}

    def create_agent(self, role: RoleDefinition) -> UniversalWritingAgent:
        """Create or retrieve a cached agent for the given role."""
        if self.enable_caching:
            cached = self._agent_cache.get(role.id)
            if cached is not None:
                return cached

        agent = UniversalWritingAgent(role, self.generator, self.timeout_ms, self.temperature)

        # Concurrent first uses of one id may race here; last write wins
        if self.enable_caching:
            self._agent_cache[role.id] = agent

        return agent

    def clear_cache(self):
        self._agent_cache.clear()

    def cache_size(self) -> int:
        return len(self._agent_cache)
