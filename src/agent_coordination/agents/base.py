"""Base contract shared by every agent.

An agent has an immutable identity, a capability set, a status record and
an inbox. ``execute_task`` is the only task entry point and the catch
boundary: subclasses implement ``_run_task`` and raise freely, the base
turns every failure into a ``TaskResult`` and keeps the status current.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..artifacts import utc_now
from ..clients.base import BaseTextGenerator
from ..exceptions import (
    AgentError,
    ClientError,
    NotConnectedError,
    UpstreamGenerationError,
    ValidationError,
)
from ..logging import get_logger
from ..types import (
    AgentRole,
    AgentStatus,
    Capability,
    GenerationOptions,
    Task,
    TaskResult,
)
from . import status as lifecycle
from .registry import CapabilityRegistry

logger = get_logger(__name__)


@dataclass
class AgentMessage:
    """A point-to-point message delivered to an agent's inbox."""
    sender_id: str
    content: dict[str, Any]
    received_at: datetime = field(default_factory=utc_now)


class BaseAgent(ABC):
    """Abstract base class for all agents.

    Subclasses declare ``role`` and ``capabilities`` and implement
    ``_run_task``. They may use ``self.generate`` to reach the text
    generator, which maps client failures onto UpstreamGenerationError.
    """

    role: AgentRole
    capabilities: frozenset[Capability] = frozenset()

    def __init__(
        self,
        agent_id: str,
        name: str,
        generator: BaseTextGenerator | None = None,
        inbox_size: int = 100,
    ):
        """Initialize an agent.

        Args:
            agent_id: Unique, immutable identifier.
            name: Human-readable name.
            generator: Text generator used by generation tasks.
            inbox_size: Number of messages retained in the inbox.
        """
        self._id = agent_id
        self.name = name
        self.generator = generator
        self.status = AgentStatus()
        self.connected_agents: dict[str, "BaseAgent"] = {}
        self.registry = CapabilityRegistry()
        self._inbox: deque[AgentMessage] = deque(maxlen=inbox_size)
        self._initialized = False

    @property
    def id(self) -> str:
        return self._id

    @property
    def inbox(self) -> list[AgentMessage]:
        return list(self._inbox)

    def initialize(self, config: dict[str, Any] | None = None) -> bool:
        """One-time setup; idempotent.

        Args:
            config: Must carry a non-empty ``api_key`` credential.

        Returns:
            True on success. On failure returns False and leaves the status
            untouched so the caller can decide whether to continue degraded.
        """
        if lifecycle.is_offline(self.status):
            logger.warning(f"{self.id}: cannot initialize an offline agent")
            return False
        if self._initialized:
            return True

        credential = (config or {}).get("api_key")
        if not credential or not str(credential).strip():
            logger.error(f"{self.id}: initialization failed, no credential provided")
            return False

        self._initialized = True
        lifecycle.mark_ready(self.status)
        logger.info(f"{self.id}: initialized ({self.role.value})")
        return True

    def shutdown(self) -> None:
        """Move the agent to the terminal OFFLINE state."""
        lifecycle.mark_offline(self.status)
        logger.info(f"{self.id}: offline")

    def execute_task(self, task: Task) -> TaskResult:
        """Run a task and report the outcome.

        Sets the status to BUSY on entry and IDLE or ERROR on exit. No
        exception escapes: every failure becomes ``TaskResult(success=False)``.
        """
        if lifecycle.is_offline(self.status):
            return TaskResult.failure(f"agent {self.id} is offline")

        lifecycle.mark_busy(self.status, task.id)
        logger.info(f"{self.id}: executing {task.type.value} ({task.id})")

        try:
            result = self._run_task(task)
        except AgentError as e:
            logger.warning(f"{self.id}: task {task.id} failed: {e}")
            result = TaskResult.failure(str(e))
        except Exception as e:
            logger.exception(f"{self.id}: unexpected error in task {task.id}")
            result = TaskResult.failure(f"{type(e).__name__}: {e}")

        lifecycle.mark_finished(self.status, result.success)
        return result

    @abstractmethod
    def _run_task(self, task: Task) -> TaskResult:
        """Execute the task; raise AgentError subclasses on failure."""

    def connect_to_agent(self, other: "BaseAgent") -> None:
        """Add ``other`` to the connection set and register its capabilities."""
        if other.id == self.id:
            raise ValueError("An agent cannot connect to itself")
        self.connected_agents[other.id] = other
        self.registry.register(other)
        logger.debug(f"{self.id}: connected to {other.id}")

    def find_agent_with_capability(self, capability: Capability) -> "BaseAgent | None":
        """Return the first connected agent serving ``capability``."""
        return self.registry.find(capability)

    def send_message_to_agent(self, target_id: str, message: dict[str, Any]) -> None:
        """Deliver a message to a connected agent.

        Raises:
            NotConnectedError: If the target is not in the connection set.
        """
        target = self.connected_agents.get(target_id)
        if target is None:
            raise NotConnectedError(self.id, target_id)
        target.receive_message(self.id, message)

    def receive_message(self, sender_id: str, message: dict[str, Any]) -> None:
        """Store an incoming message in the inbox."""
        self._inbox.append(AgentMessage(sender_id=sender_id, content=dict(message)))
        logger.debug(f"{self.id}: message from {sender_id}: {message.get('type', 'message')}")

    def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Call the text generator.

        Raises:
            UpstreamGenerationError: If no generator is configured or the call fails.
        """
        if self.generator is None:
            raise UpstreamGenerationError(f"{self.id} has no text generator configured")
        try:
            return self.generator.generate(prompt, options)
        except ClientError as e:
            raise UpstreamGenerationError(f"Text generation failed: {e}") from e
        except Exception as e:
            logger.exception(f"{self.id}: unexpected text generator error")
            raise UpstreamGenerationError(f"Text generation failed: {type(e).__name__}: {e}") from e

    @staticmethod
    def require(parameters: Any, *names: str) -> str:
        """Return the first non-empty string parameter among ``names``.

        Raises:
            ValidationError: If none of them is present.
        """
        for name in names:
            value = parameters.get(name)
            if isinstance(value, str) and value.strip():
                return value.strip()
        raise ValidationError(f"Missing required parameter: {' or '.join(names)}", field=names[0])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "capabilities": sorted(capability.value for capability in self.capabilities),
            "status": self.status.to_dict(),
            "connected_agents": sorted(self.connected_agents),
        }
