"""Typed capability registry used for routing."""

from typing import TYPE_CHECKING, Iterable

from ..types import Capability

if TYPE_CHECKING:
    from .base import BaseAgent


class CapabilityRegistry:
    """Maps each capability to the agent that serves it.

    The first agent registered for a capability wins: later registrations
    of the same capability are ignored, which keeps routing stable when
    several agents advertise overlapping capabilities.
    """

    def __init__(self):
        self._by_capability: dict[Capability, "BaseAgent"] = {}

    def register(self, agent: "BaseAgent", capabilities: Iterable[Capability] | None = None) -> None:
        """Register an agent for its capabilities (or an explicit subset)."""
        for capability in capabilities or agent.capabilities:
            self._by_capability.setdefault(capability, agent)

    def unregister(self, agent_id: str) -> None:
        """Remove every capability served by the given agent."""
        self._by_capability = {
            capability: agent
            for capability, agent in self._by_capability.items()
            if agent.id != agent_id
        }

    def find(self, capability: Capability) -> "BaseAgent | None":
        """Return the agent serving ``capability``, or None."""
        return self._by_capability.get(capability)

    def __contains__(self, capability: Capability) -> bool:
        return capability in self._by_capability

    def __len__(self) -> int:
        return len(self._by_capability)
