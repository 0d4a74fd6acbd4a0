"""Agent Coordination - a multi-agent core for content and code generation.

A voice or text request is classified into an intent, routed by a manager
agent to a content or code generator, and returned as a single result
recorded in a workflow ledger.
"""

from .agents import (
    CodeGeneratorAgent,
    ContentGeneratorAgent,
    IntentRecognizerAgent,
    ManagerAgent,
)
from .exceptions import (
    AgentError,
    ClientError,
    NoAgentAvailableError,
    NotConnectedError,
    PersistenceError,
    SystemNotInitializedError,
    UpstreamGenerationError,
    ValidationError,
)
from .storage import InMemoryStorage, Storage
from .system import MultiAgentSystem
from .types import (
    Approach,
    Capability,
    IntentAnalysis,
    Task,
    TaskResult,
    TaskType,
    WorkflowRecord,
    WorkflowResult,
    WorkflowStatus,
)

__all__ = [
    # system and agents
    "MultiAgentSystem",
    "ManagerAgent",
    "ContentGeneratorAgent",
    "CodeGeneratorAgent",
    "IntentRecognizerAgent",
    # storage
    "InMemoryStorage",
    "Storage",
    # types
    "Approach",
    "Capability",
    "IntentAnalysis",
    "Task",
    "TaskResult",
    "TaskType",
    "WorkflowRecord",
    "WorkflowResult",
    "WorkflowStatus",
    # exceptions
    "AgentError",
    "ClientError",
    "NoAgentAvailableError",
    "NotConnectedError",
    "PersistenceError",
    "SystemNotInitializedError",
    "UpstreamGenerationError",
    "ValidationError",
]
