"""Composition root of the multi-agent system.

MultiAgentSystem owns the four agents and the workflow ledger. It is
constructed once at process start and passed to whatever needs it, so
tests simply build a fresh instance.
"""

import uuid
from typing import Any, Iterable

from .agents import (
    BaseAgent,
    CodeGeneratorAgent,
    ContentGeneratorAgent,
    IntentRecognizerAgent,
    ManagerAgent,
)
from .artifacts import utc_now
from .clients.base import BaseTextGenerator
from .clients.factory import create_generator
from .config import Settings, get_settings
from .exceptions import SystemNotInitializedError, ValidationError
from .logging import get_logger, workflow_context
from .observers import InteractionObserver, accepted_observers, notify_observers
from .storage import Storage, persist_artifact
from .types import (
    CoordinationRequest,
    RecognitionResult,
    WorkflowRecord,
    WorkflowResult,
    WorkflowStatus,
)
from .workflow import WorkflowLedger

logger = get_logger(__name__)


def connect_agents(first: BaseAgent, second: BaseAgent) -> None:
    """Connect two agents in both directions."""
    first.connect_to_agent(second)
    second.connect_to_agent(first)


class MultiAgentSystem:
    """Wires the agents together and runs workflows.

    Example:
        system = MultiAgentSystem(generator, storage=InMemoryStorage())
        system.initialize(api_key)
        result = system.process_voice_command("Create a report on press freedom")
    """

    def __init__(
        self,
        generator: BaseTextGenerator | None = None,
        storage: Storage | None = None,
        observers: Iterable[InteractionObserver] | None = None,
        settings: Settings | None = None,
    ):
        """Build the agents.

        Args:
            generator: Text generator shared by all agents.
            storage: Optional persistence for generated artifacts.
            observers: Optional self-learning / self-repair observers.
            settings: Settings; defaults to the process settings.
        """
        self.settings = settings or get_settings()
        self.manager = ManagerAgent(generator=generator)
        self.content_generator = ContentGeneratorAgent(
            generator=generator,
            default_language=self.settings.default_language,
        )
        self.code_generator = CodeGeneratorAgent(generator=generator)
        self.intent_recognizer = IntentRecognizerAgent(generator=generator)
        self.storage = storage
        self.observers: list[InteractionObserver] = []
        self._observer_candidates = list(observers or [])
        self.ledger = WorkflowLedger()
        self._initialized = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        provider: str | None = None,
        model: str | None = None,
        client_config: dict | None = None,
        **kwargs: Any,
    ) -> "MultiAgentSystem":
        """Build a system whose generator comes from the configured provider.

        Raises:
            ValueError: If no provider is configured or its API key is missing.
        """
        settings = settings or get_settings()
        provider = provider or settings.detect_provider()
        if not provider:
            raise ValueError("No LLM provider configured and no API keys found")

        config = {"timeout": settings.request_timeout, **(client_config or {})}
        generator = create_generator(
            provider,
            model or settings.llm_model,
            config,
            api_key=settings.get_api_key_for_provider(provider),
        )
        return cls(generator, settings=settings, **kwargs)

    @property
    def agents(self) -> list[BaseAgent]:
        return [self.manager, self.content_generator, self.code_generator, self.intent_recognizer]

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, credential: str | None) -> bool:
        """Initialize every agent and wire the fixed topology.

        Returns:
            False if a required agent failed to initialize. Unusable
            observers are dropped with a warning and do not fail startup.
        """
        if self._initialized:
            return True

        config = {"api_key": credential}
        for agent in self.agents:
            if not agent.initialize(config):
                logger.error(f"initialization failed: agent {agent.id} did not start")
                return False

        connect_agents(self.manager, self.content_generator)
        connect_agents(self.manager, self.code_generator)
        connect_agents(self.intent_recognizer, self.manager)

        self.observers = accepted_observers(self._observer_candidates)
        self._initialized = True
        logger.info(f"multi-agent system initialized with {len(self.observers)} observer(s)")
        return True

    def shutdown(self) -> None:
        """Take every agent offline."""
        for agent in self.agents:
            agent.shutdown()
        self._initialized = False

    def process_voice_command(
        self,
        command: str,
        user_id: str | None = None,
        language_code: str | None = None,
    ) -> WorkflowResult:
        """Run one voice or text command end to end.

        A workflow record is written whether the call succeeds or raises.

        Raises:
            SystemNotInitializedError: If ``initialize`` has not succeeded.
            ValidationError: If the command is empty.
            UpstreamGenerationError: If intent recognition fails.
        """
        workflow_id = str(uuid.uuid4())
        user_id = user_id or self.settings.default_user_id
        language_code = language_code or self.settings.default_language_code
        started_at = utc_now()
        with workflow_context(workflow_id):
            logger.info(f"workflow {workflow_id}: voice command from {user_id}")

            try:
                self._ensure_initialized()
                if not command or not command.strip():
                    raise ValidationError("command must not be empty", field="command")

                recognition = self.intent_recognizer.process_voice_command(command, user_id, language_code)
                result = self._complete(workflow_id, recognition, user_id, language_code, command)
                notify_observers(
                    self.observers,
                    {"user_id": user_id, "query": command, "intent": result.intent, "workflow_id": workflow_id},
                    {"user_id": user_id, "type": "voice-command", "success": result.success},
                )
            except Exception as e:
                self._record(WorkflowRecord(
                    id=workflow_id,
                    user_id=user_id,
                    kind="voice-command",
                    status=WorkflowStatus.FAILED,
                    started_at=started_at,
                    completed_at=utc_now(),
                    command=command,
                    error=str(e),
                ))
                raise

            self._record(WorkflowRecord(
                id=workflow_id,
                user_id=user_id,
                kind="voice-command",
                status=WorkflowStatus.COMPLETED if result.success else WorkflowStatus.FAILED,
                started_at=started_at,
                completed_at=utc_now(),
                command=command,
                result=result,
                error=result.error,
            ))
            return result

    def process_follow_up_dialog(
        self,
        initial_query: str,
        user_response: str,
        dialog_context: dict[str, Any] | None = None,
        user_id: str | None = None,
        language_code: str | None = None,
    ) -> WorkflowResult:
        """Continue a dialog with the user's answer to a follow-up question.

        Creates a new workflow id; the link to the earlier turn is carried
        only by ``dialog_context``.

        Raises:
            SystemNotInitializedError: If ``initialize`` has not succeeded.
            ValidationError: If the user response is empty.
            UpstreamGenerationError: If the follow-up analysis fails.
        """
        workflow_id = str(uuid.uuid4())
        user_id = user_id or self.settings.default_user_id
        language_code = language_code or self.settings.default_language_code
        started_at = utc_now()
        with workflow_context(workflow_id):
            logger.info(f"workflow {workflow_id}: follow-up from {user_id}")

            try:
                self._ensure_initialized()
                if not user_response or not user_response.strip():
                    raise ValidationError("user_response must not be empty", field="user_response")

                recognition = self.intent_recognizer.process_follow_up(
                    initial_query, user_response, dialog_context or {}
                )
                result = self._complete(workflow_id, recognition, user_id, language_code, user_response)
                notify_observers(
                    self.observers,
                    {"user_id": user_id, "query": initial_query, "response": user_response,
                     "intent": result.intent, "workflow_id": workflow_id},
                    {"user_id": user_id, "type": "follow-up", "success": result.success},
                )
            except Exception as e:
                self._record(WorkflowRecord(
                    id=workflow_id,
                    user_id=user_id,
                    kind="follow-up",
                    status=WorkflowStatus.FAILED,
                    started_at=started_at,
                    completed_at=utc_now(),
                    initial_query=initial_query,
                    user_response=user_response,
                    error=str(e),
                ))
                raise

            self._record(WorkflowRecord(
                id=workflow_id,
                user_id=user_id,
                kind="follow-up",
                status=WorkflowStatus.COMPLETED if result.success else WorkflowStatus.FAILED,
                started_at=started_at,
                completed_at=utc_now(),
                initial_query=initial_query,
                user_response=user_response,
                result=result,
                error=result.error,
            ))
            return result

    def get_workflow_status(self) -> list[WorkflowRecord]:
        """Return the full workflow history in order."""
        return self.ledger.records()

    def get_workflow(self, workflow_id: str) -> WorkflowRecord | None:
        return self.ledger.get(workflow_id)

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise SystemNotInitializedError()

    def _record(self, record: WorkflowRecord) -> None:
        self.ledger.append(record)
        logger.info(f"workflow {record.id}: {record.status.value}")

    def _complete(
        self,
        workflow_id: str,
        recognition: RecognitionResult,
        user_id: str,
        language_code: str,
        user_text: str,
    ) -> WorkflowResult:
        """Turn a recognition result into the workflow result, coordinating if needed."""
        analysis = recognition.analysis
        context: dict[str, Any] = dict(recognition.dialog_context or {
            "intent": analysis.intent,
            "parameters": dict(analysis.parameters),
            "best_approach": analysis.best_approach.value,
        })

        if not recognition.needs_manager_coordination:
            result = WorkflowResult(
                workflow_id=workflow_id,
                success=True,
                response=recognition.response,
                intent=analysis.intent,
                confidence=analysis.confidence,
                requires_follow_up=analysis.requires_follow_up,
                follow_up_questions=list(analysis.follow_up_questions),
                context=context,
            )
        else:
            coordination = self.manager.coordinate_task(CoordinationRequest(
                intent=analysis.intent,
                parameters=dict(analysis.parameters),
                task_type=recognition.task_type,
                user_id=user_id,
                workflow_id=workflow_id,
                language=language_code.split("-")[0].lower() if language_code else None,
            ))
            context.update(coordination.context)
            result = WorkflowResult(
                workflow_id=workflow_id,
                success=coordination.success,
                response=coordination.response,
                intent=analysis.intent,
                confidence=analysis.confidence,
                generated_content=coordination.generated_content,
                requires_follow_up=coordination.requires_follow_up,
                follow_up_questions=list(coordination.follow_up_questions),
                context=context,
                error=coordination.error,
            )
            if coordination.generated_content is not None:
                persist_artifact(self.storage, coordination.generated_content, user_id, workflow_id)

        if recognition.dialog_context is None:
            context["previous_interactions"] = [{"user": user_text, "assistant": result.response}]
        context["last_assistant_message"] = result.response
        return result
