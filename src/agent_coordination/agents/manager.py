"""Manager agent: routes requests to generator agents and aggregates results.

A coordination call moves through ROUTING -> DISPATCHED -> AGGREGATING and
ends in DONE or FAILED. The manager never authors artifacts itself; it
picks a connected agent by capability, runs the task synchronously and
wraps the artifact in a user-facing envelope with canned follow-ups.
"""

from typing import Any

from ..artifacts import Artifact
from ..exceptions import (
    AgentError,
    NoAgentAvailableError,
    UnknownTaskTypeError,
    UpstreamGenerationError,
)
from ..logging import get_logger
from ..types import (
    AgentRole,
    Approach,
    Capability,
    CoordinationPhase,
    CoordinationRequest,
    CoordinationResult,
    Task,
    TaskResult,
    TaskType,
)
from . import status as lifecycle
from .base import BaseAgent

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = (
    "An error occurred while processing your request. "
    "Please try again with a different wording."
)

# task type is authoritative when present
TASK_TYPE_APPROACHES: dict[TaskType, Approach] = {
    TaskType.DOCUMENT_GENERATION: Approach.DOCUMENT,
    TaskType.LEARNING_PATH_CREATION: Approach.LEARNING_PATH,
    TaskType.CODE_GENERATION: Approach.CODE,
    TaskType.VISUALIZATION: Approach.CODE,
    TaskType.DATA_ANALYSIS: Approach.CODE,
    TaskType.DASHBOARD_GENERATION: Approach.CODE,
    TaskType.PRESENTATION_GENERATION: Approach.CODE,
    TaskType.MAP_GENERATION: Approach.CODE,
    TaskType.HTML_PAGE_GENERATION: Approach.CODE,
}

# checked in order; the first matching category wins
KEYWORD_APPROACHES: tuple[tuple[Approach, tuple[str, ...]], ...] = (
    (Approach.CODE, ("code", "programm", "script", "visuali", "dashboard")),
    (Approach.LEARNING_PATH, ("learning", "lernplan", "lernpfad", "schulung", "kurs", "course", "training")),
)

CODE_TASK_TYPES: dict[TaskType, TaskType] = {
    TaskType.VISUALIZATION: TaskType.GENERATE_VISUALIZATION_CODE,
    TaskType.DATA_ANALYSIS: TaskType.GENERATE_DATA_ANALYSIS_CODE,
    TaskType.DASHBOARD_GENERATION: TaskType.GENERATE_INTERACTIVE_DASHBOARD,
    TaskType.PRESENTATION_GENERATION: TaskType.GENERATE_PRESENTATION,
    TaskType.MAP_GENERATION: TaskType.GENERATE_MAP,
    TaskType.HTML_PAGE_GENERATION: TaskType.GENERATE_HTML_PAGE,
}

FOLLOW_UP_QUESTIONS: dict[Approach, list[str]] = {
    Approach.DOCUMENT: [
        "Should I add more detail on the legal aspects?",
        "Would practical examples help?",
        "Should I add a summary at the end?",
    ],
    Approach.CODE: [
        "Should the visualization be more interactive?",
        "Would you like different colors or a different layout?",
        "Should I include more data?",
    ],
    Approach.LEARNING_PATH: [
        "Should I add more practical exercises?",
        "Do you need additional resources for beginners?",
        "Should the total time be reduced?",
    ],
}

_APPROACH_CAPABILITIES = {
    Approach.DOCUMENT: Capability.CONTENT_GENERATION,
    Approach.LEARNING_PATH: Capability.CONTENT_GENERATION,
    Approach.CODE: Capability.CODE_GENERATION,
}


def determine_best_approach(intent: str | None, task_type: TaskType | None = None) -> Approach:
    """Pick the approach for a request; a pure function of its arguments.

    The task type decides when it maps to an approach. Otherwise the intent
    string is matched against ordered keyword sets (code before learning
    path) and anything else, including an empty intent, is a document.
    Code keywords are kept narrow so that a learning plan about data
    analysis stays a learning path; maps, presentations and the like are
    routed by their task type.
    """
    if task_type in TASK_TYPE_APPROACHES:
        return TASK_TYPE_APPROACHES[task_type]

    normalized = (intent or "").strip().lower()
    for approach, keywords in KEYWORD_APPROACHES:
        if any(keyword in normalized for keyword in keywords):
            return approach
    return Approach.DOCUMENT


class ManagerAgent(BaseAgent):
    """Coordinates the generator agents."""

    role = AgentRole.MANAGER
    capabilities = frozenset({
        Capability.WORKFLOW_MANAGEMENT,
        Capability.TASK_DISTRIBUTION,
        Capability.INTENT_ANALYSIS,
        Capability.CONTEXT_MANAGEMENT,
        Capability.RESULT_AGGREGATION,
    })

    def __init__(self, agent_id: str = "manager-1", name: str = "Manager", **kwargs):
        super().__init__(agent_id, name, **kwargs)

    def determine_best_approach(self, intent: str | None, task_type: TaskType | None = None) -> Approach:
        return determine_best_approach(intent, task_type)

    def coordinate_task(self, request: CoordinationRequest) -> CoordinationResult:
        """Route a request, dispatch it and aggregate the worker's artifact.

        This is a catch boundary: failures come back as a result with
        ``success=False`` and the generic failure message.
        """
        if lifecycle.is_offline(self.status):
            return self._failure_result(f"agent {self.id} is offline", {"intent": request.intent})

        lifecycle.mark_busy(self.status, request.workflow_id or "coordination")
        result = self._coordinate(request)
        lifecycle.mark_finished(self.status, result.success)
        return result

    def _coordinate(self, request: CoordinationRequest) -> CoordinationResult:
        phase = CoordinationPhase.ROUTING
        approach = determine_best_approach(request.intent, request.task_type)
        context = {
            "intent": request.intent,
            "parameters": dict(request.parameters),
            "best_approach": approach.value,
        }
        logger.info(f"{self.id}: workflow {request.workflow_id} routed to {approach.value}")

        try:
            task = self._build_task(approach, request)
            worker = self.find_agent_with_capability(_APPROACH_CAPABILITIES[approach])
            if worker is None:
                raise NoAgentAvailableError(_APPROACH_CAPABILITIES[approach].value)

            phase = CoordinationPhase.DISPATCHED
            logger.info(f"{self.id}: dispatching {task.type.value} to {worker.id}")
            task_result = worker.execute_task(task)

            phase = CoordinationPhase.AGGREGATING
            if not task_result.success or task_result.content is None:
                raise UpstreamGenerationError(task_result.error or f"{worker.id} returned no content")

            return self._aggregate(approach, task_result, context)

        except AgentError as e:
            logger.error(f"{self.id}: coordination failed during {phase.value}: {e}")
            return self._failure_result(str(e), context)
        except Exception as e:
            logger.exception(f"{self.id}: unexpected coordination error during {phase.value}")
            return self._failure_result(f"{type(e).__name__}: {e}", context)

    def _build_task(self, approach: Approach, request: CoordinationRequest) -> Task:
        parameters: dict[str, Any] = dict(request.parameters)
        subject = parameters.get("topic") or parameters.get("purpose") or request.intent
        parameters.setdefault("topic", subject)
        parameters.setdefault("purpose", subject)
        parameters.setdefault("intent", request.intent)
        if approach == Approach.CODE:
            task_type = CODE_TASK_TYPES.get(request.task_type, TaskType.GENERATE_VISUALIZATION_CODE)
        else:
            # "language" means the natural language for content, the programming language for code
            if request.language:
                parameters.setdefault("language", request.language)
            task_type = (
                TaskType.DOCUMENT_GENERATION if approach == Approach.DOCUMENT
                else TaskType.LEARNING_PATH_CREATION
            )

        return Task.create(task_type, parameters, requester=self.id)

    def _aggregate(self, approach: Approach, task_result: TaskResult, context: dict[str, Any]) -> CoordinationResult:
        artifact = task_result.content
        return CoordinationResult(
            success=True,
            response=self._describe(approach, artifact),
            generated_content=artifact,
            requires_follow_up=True,
            follow_up_questions=list(FOLLOW_UP_QUESTIONS[approach]),
            context=context,
            phase=CoordinationPhase.DONE,
        )

    @staticmethod
    def _describe(approach: Approach, artifact: Artifact) -> str:
        if approach == Approach.LEARNING_PATH:
            count = len(getattr(artifact, "modules", []))
            return f"I created the learning path \"{artifact.title}\" with {count} modules."
        if approach == Approach.CODE:
            return f"I generated \"{artifact.title}\". You can review and run the code now."
        return f"I created the document \"{artifact.title}\"."

    @staticmethod
    def _failure_result(error: str, context: dict[str, Any]) -> CoordinationResult:
        return CoordinationResult(
            success=False,
            response=GENERIC_FAILURE_MESSAGE,
            error=error,
            requires_follow_up=False,
            context=context,
            phase=CoordinationPhase.FAILED,
        )

    def _run_task(self, task: Task) -> TaskResult:
        if task.type != TaskType.COORDINATE_TASK:
            raise UnknownTaskTypeError(task.type.value)

        params = task.parameters
        raw_type = params.get("task_type")
        result = self._coordinate(CoordinationRequest(
            intent=self.require(params, "intent"),
            parameters=dict(params.get("parameters") or {}),
            task_type=TaskType(raw_type) if raw_type else None,
            user_id=params.get("user_id", "anonymous"),
            workflow_id=params.get("workflow_id"),
        ))
        if not result.success:
            raise UpstreamGenerationError(result.error or "coordination failed")
        return TaskResult.ok(result.response, result.generated_content)
