"""Core types for the multi-agent coordination system.

These types describe agents, tasks, intent analyses and workflow outcomes.
They are shared by every agent and by the composition root.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from .artifacts import Artifact, utc_now


class AgentRole(Enum):
    """Role of an agent inside the system."""
    MANAGER = "manager"
    CONTENT_GENERATOR = "content-generator"
    CODE_GENERATOR = "code-generator"
    VOICE_ASSISTANT = "voice-assistant"


class LifecycleState(Enum):
    """Lifecycle of an agent.

    INITIALIZING -> IDLE <-> BUSY -> (IDLE | ERROR) -> OFFLINE (terminal).
    """
    INITIALIZING = "initializing"
    IDLE = "idle"
    BUSY = "busy"
    ERROR = "error"
    OFFLINE = "offline"


class TaskType(Enum):
    """Closed set of task types understood by the agents."""
    # user level types, produced by intent recognition
    DOCUMENT_GENERATION = "document-generation"
    CODE_GENERATION = "code-generation"
    LEARNING_PATH_CREATION = "learning-path-creation"
    DATA_ANALYSIS = "data-analysis"
    VISUALIZATION = "visualization"
    INFORMATION_RETRIEVAL = "information-retrieval"
    PRESENTATION_GENERATION = "presentation-generation"
    MAP_GENERATION = "map-generation"
    HTML_PAGE_GENERATION = "html-page-generation"
    DASHBOARD_GENERATION = "dashboard-generation"
    UNKNOWN = "unknown"
    # code generator types
    GENERATE_VISUALIZATION_CODE = "generate-visualization-code"
    GENERATE_DATA_ANALYSIS_CODE = "generate-data-analysis-code"
    GENERATE_INTERACTIVE_DASHBOARD = "generate-interactive-dashboard"
    GENERATE_PRESENTATION = "generate-presentation"
    GENERATE_MAP = "generate-map"
    GENERATE_HTML_PAGE = "generate-html-page"
    # dialog types
    PROCESS_VOICE_COMMAND = "process-voice-command"
    FOLLOW_UP_DIALOG = "follow-up-dialog"
    COORDINATE_TASK = "coordinate-task"


class TaskPriority(Enum):
    """Priority of a task."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Capability(Enum):
    """Capabilities an agent can advertise for routing."""
    # manager
    WORKFLOW_MANAGEMENT = "workflow-management"
    TASK_DISTRIBUTION = "task-distribution"
    INTENT_ANALYSIS = "intent-analysis"
    CONTEXT_MANAGEMENT = "context-management"
    RESULT_AGGREGATION = "result-aggregation"
    # content generator
    CONTENT_GENERATION = "content-generation"
    DOCUMENT_CREATION = "document-creation"
    LEARNING_PATH_DESIGN = "learning-path-design"
    MULTILINGUAL_CONTENT = "multilingual-content"
    CONTEXT_AWARE_WRITING = "context-aware-writing"
    # code generator
    CODE_GENERATION = "code-generation"
    VISUALIZATION_CODE = "visualization-code"
    DATA_ANALYSIS_CODE = "data-analysis-code"
    INTERACTIVE_DASHBOARD = "interactive-dashboard"
    PRESENTATION_GENERATION = "presentation-generation"
    MAP_GENERATION = "map-generation"
    HTML_PAGE_GENERATION = "html-page-generation"
    # voice assistant
    VOICE_RECOGNITION = "voice-recognition"
    INTENT_DETECTION = "intent-detection"
    DIALOG_MANAGEMENT = "dialog-management"


class Approach(Enum):
    """Routing decision taken by the manager."""
    DOCUMENT = "document"
    CODE = "code"
    LEARNING_PATH = "learning-path"
    DEFAULT = "default"


class BestApproach(Enum):
    """Approach suggested by intent recognition."""
    DOCUMENT = "document"
    CODE = "code"
    LEARNING_PATH = "learning-path"
    COMBINED = "combined"


class WorkflowStatus(Enum):
    """Terminal status of a workflow."""
    COMPLETED = "completed"
    FAILED = "failed"


class CoordinationPhase(Enum):
    """Phase of a single manager coordination call."""
    ROUTING = "routing"
    DISPATCHED = "dispatched"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _artifact_dict(artifact: Artifact | None) -> dict[str, Any] | None:
    return artifact.to_dict() if artifact is not None else None


@dataclass(frozen=True)
class Task:
    """An immutable unit of work dispatched to an agent.

    Use ``Task.create`` to build one; a new task is created per dispatch.
    """
    id: str
    type: TaskType
    parameters: Mapping[str, Any] = field(default_factory=dict)
    priority: TaskPriority = TaskPriority.MEDIUM
    created_at: datetime = field(default_factory=utc_now)
    requester: str | None = None

    def __post_init__(self):
        # freeze the parameter bag so the task stays a value object
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @classmethod
    def create(
        cls,
        task_type: TaskType | str,
        parameters: Mapping[str, Any] | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        requester: str | None = None,
    ) -> "Task":
        """Create a task with a fresh id and timestamp.

        Args:
            task_type: TaskType member or its string value.
            parameters: Open parameter bag validated by the receiving agent.
            priority: Task priority.
            requester: Id of the requesting agent, if any.

        Raises:
            ValueError: If task_type is not a known task type.
        """
        return cls(
            id=f"task-{uuid.uuid4().hex[:12]}",
            type=TaskType(task_type),
            parameters=parameters or {},
            priority=priority,
            requester=requester,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "parameters": dict(self.parameters),
            "priority": self.priority.value,
            "created_at": self.created_at.isoformat(),
            "requester": self.requester,
        }


@dataclass
class TaskResult:
    """Outcome of ``execute_task``.

    Exactly one of ``content`` and ``error`` is meaningful, depending on
    ``success``.
    """
    success: bool
    response: str
    content: Artifact | None = None
    error: str | None = None
    completed_at: datetime = field(default_factory=utc_now)

    @classmethod
    def ok(cls, response: str, content: Artifact | None = None) -> "TaskResult":
        return cls(success=True, response=response, content=content)

    @classmethod
    def failure(cls, error: str, response: str | None = None) -> "TaskResult":
        return cls(
            success=False,
            response=response or f"Task failed: {error}",
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "response": self.response,
            "content": _artifact_dict(self.content),
            "error": self.error,
            "completed_at": self.completed_at.isoformat(),
        }


@dataclass
class AgentStatus:
    """Mutable status record of an agent."""
    is_active: bool = False
    state: LifecycleState = LifecycleState.INITIALIZING
    current_task: str | None = None
    last_active_time: datetime | None = None
    success_count: int = 0
    error_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_active": self.is_active,
            "state": self.state.value,
            "current_task": self.current_task,
            "last_active_time": _iso(self.last_active_time),
            "success_count": self.success_count,
            "error_count": self.error_count,
        }


@dataclass
class GenerationOptions:
    """Options passed to a text generator call."""
    temperature: float = 0.7
    max_output_tokens: int = 2048
    system_prompt: str | None = None


@dataclass
class IntentAnalysis:
    """Structured reading of a user utterance."""
    intent: str = "unknown"
    parameters: dict[str, Any] = field(default_factory=dict)
    requires_follow_up: bool = True
    follow_up_questions: list[str] = field(default_factory=list)
    best_approach: BestApproach = BestApproach.DOCUMENT
    confidence: float = 0.5
    content_type: str | None = None

    @property
    def is_unknown(self) -> bool:
        return self.intent == "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "parameters": dict(self.parameters),
            "requires_follow_up": self.requires_follow_up,
            "follow_up_questions": list(self.follow_up_questions),
            "best_approach": self.best_approach.value,
            "confidence": self.confidence,
            "content_type": self.content_type,
        }


@dataclass
class RecognitionResult:
    """What the intent recognizer hands back to the composition root.

    ``dialog_context`` is only set for follow-up turns.
    """
    response: str
    analysis: IntentAnalysis
    task_type: TaskType
    needs_manager_coordination: bool
    dialog_context: dict[str, Any] | None = None


@dataclass
class CoordinationRequest:
    """Input of ``ManagerAgent.coordinate_task``."""
    intent: str
    parameters: dict[str, Any] = field(default_factory=dict)
    task_type: TaskType | None = None
    user_id: str = "anonymous"
    workflow_id: str | None = None
    language: str | None = None


@dataclass
class CoordinationResult:
    """Manager-level response envelope."""
    success: bool
    response: str
    generated_content: Artifact | None = None
    requires_follow_up: bool = False
    follow_up_questions: list[str] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    phase: CoordinationPhase = CoordinationPhase.DONE


@dataclass
class WorkflowResult:
    """Value returned by the top-level entry points."""
    workflow_id: str
    success: bool
    response: str
    intent: str = "unknown"
    confidence: float = 0.0
    generated_content: Artifact | None = None
    requires_follow_up: bool = False
    follow_up_questions: list[str] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflow_id": self.workflow_id,
            "success": self.success,
            "response": self.response,
            "intent": self.intent,
            "confidence": self.confidence,
            "generated_content": _artifact_dict(self.generated_content),
            "requires_follow_up": self.requires_follow_up,
            "follow_up_questions": list(self.follow_up_questions),
            "context": dict(self.context),
            "error": self.error,
        }


@dataclass(frozen=True)
class WorkflowRecord:
    """Ledger entry written once per top-level call, never updated."""
    id: str
    user_id: str
    kind: str  # "voice-command" or "follow-up"
    status: WorkflowStatus
    started_at: datetime
    completed_at: datetime
    command: str | None = None
    initial_query: str | None = None
    user_response: str | None = None
    result: WorkflowResult | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "kind": self.kind,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "command": self.command,
            "initial_query": self.initial_query,
            "user_response": self.user_response,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }
