"""Voice and text intent recognition agent.

Turns a raw utterance into an IntentAnalysis and revises that analysis
across follow-up turns. Model output is untrusted free text, so parsing
falls back from strict JSON to a key/value scrape to a safe default and
never raises.
"""

import re
from contextlib import contextmanager
from typing import Any, Iterator

from ..exceptions import AgentError, UnknownTaskTypeError
from ..logging import get_logger
from ..types import (
    AgentRole,
    BestApproach,
    Capability,
    GenerationOptions,
    IntentAnalysis,
    RecognitionResult,
    Task,
    TaskResult,
    TaskType,
)
from ..utils.json_extraction import extract_first_json_object
from . import status as lifecycle
from .base import BaseAgent
from .prompts import (
    FOLLOW_UP_ANALYSIS_PROMPT,
    FOLLOW_UP_RESPONSE_PROMPT,
    INFORMATION_PROMPT,
    INTENT_RECOGNITION_PROMPT,
    INTENT_VOCABULARY,
)

logger = get_logger(__name__)

CLARIFY_QUESTION = "Could you explain in more detail what you would like me to create?"
GENERIC_ACKNOWLEDGEMENT = "I understood your request. How can I help you further?"

INTENT_TASK_TYPES: dict[str, TaskType] = {
    "createDocument": TaskType.DOCUMENT_GENERATION,
    "generateLearningPlan": TaskType.LEARNING_PATH_CREATION,
    "analyzeData": TaskType.DATA_ANALYSIS,
    "createVisualization": TaskType.VISUALIZATION,
    "searchInformation": TaskType.INFORMATION_RETRIEVAL,
    "generatePresentation": TaskType.PRESENTATION_GENERATION,
    "generateHtmlPage": TaskType.HTML_PAGE_GENERATION,
    "generateDashboard": TaskType.DASHBOARD_GENERATION,
    "generateMap": TaskType.MAP_GENERATION,
}

# task types that need a generator agent behind the manager
COORDINATED_TASK_TYPES = frozenset({
    TaskType.DOCUMENT_GENERATION,
    TaskType.LEARNING_PATH_CREATION,
    TaskType.DATA_ANALYSIS,
    TaskType.VISUALIZATION,
    TaskType.PRESENTATION_GENERATION,
    TaskType.HTML_PAGE_GENERATION,
    TaskType.DASHBOARD_GENERATION,
    TaskType.MAP_GENERATION,
})

_INTENT_LOOKUP = {intent.lower(): intent for intent in INTENT_VOCABULARY}

_SCRAPE_PATTERNS = {
    "intent": re.compile(r'"?intent"?\s*[:=]\s*"?([A-Za-z_]+)"?', re.IGNORECASE),
    "content_type": re.compile(r'"?content_?type"?\s*[:=]\s*"?([A-Za-z\-_]+)"?', re.IGNORECASE),
    "topic": re.compile(r'"?topic"?\s*[:=]\s*"([^"]+)"', re.IGNORECASE),
    "best_approach": re.compile(r'"?best_?approach"?\s*[:=]\s*"?([A-Za-z\-]+)"?', re.IGNORECASE),
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_RECOGNITION_OPTIONS = GenerationOptions(temperature=0.2, max_output_tokens=1024)
_RESPONSE_OPTIONS = GenerationOptions(temperature=0.7, max_output_tokens=512)


def normalize_intent(raw: Any) -> str:
    """Map a raw intent name onto the vocabulary, case-insensitively."""
    if not isinstance(raw, str):
        return "unknown"
    return _INTENT_LOOKUP.get(raw.strip().lower(), "unknown")


def parse_best_approach(raw: Any, default: BestApproach = BestApproach.DOCUMENT) -> BestApproach:
    if isinstance(raw, str):
        try:
            return BestApproach(raw.strip().lower())
        except ValueError:
            pass
    return default


def normalize_parameters(parameters: Any) -> dict[str, Any]:
    """Return the parameters with snake_case keys.

    The model is prompted with camelCase keys such as ``targetAudience``;
    the generator agents read ``target_audience``.
    """
    if not isinstance(parameters, dict):
        return {}
    return {
        _CAMEL_BOUNDARY.sub("_", str(key)).replace("-", "_").lower(): value
        for key, value in parameters.items()
    }


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def task_type_for_intent(intent: str) -> TaskType:
    return INTENT_TASK_TYPES.get(intent, TaskType.UNKNOWN)


def default_analysis() -> IntentAnalysis:
    """The safe analysis used when nothing could be read from the model."""
    return IntentAnalysis(
        intent="unknown",
        parameters={},
        requires_follow_up=True,
        follow_up_questions=[CLARIFY_QUESTION],
        best_approach=BestApproach.DOCUMENT,
        confidence=0.0,
    )


def analysis_from_json(data: dict[str, Any]) -> IntentAnalysis:
    """Build an analysis from a decoded JSON reply, tolerating missing or odd fields."""
    intent = normalize_intent(data.get("intent"))

    parameters = normalize_parameters(data.get("parameters"))

    try:
        confidence = min(max(float(data.get("confidence", 0.5)), 0.0), 1.0)
    except (TypeError, ValueError):
        confidence = 0.5

    questions = data.get("followUpQuestions") or []
    if not isinstance(questions, list):
        questions = [questions]
    questions = [str(question) for question in questions if str(question).strip()]

    requires_follow_up = _as_bool(data.get("requiresFollowUp", False)) or intent == "unknown"
    if requires_follow_up and not questions:
        questions = [CLARIFY_QUESTION]

    content_type = data.get("contentType")
    return IntentAnalysis(
        intent=intent,
        parameters=parameters,
        requires_follow_up=requires_follow_up,
        follow_up_questions=questions,
        best_approach=parse_best_approach(data.get("bestApproach")),
        confidence=confidence,
        content_type=content_type if isinstance(content_type, str) else None,
    )


def parse_structured_response(text: str) -> IntentAnalysis | None:
    """Scrape key/value pairs out of non-JSON model output.

    Returns None when nothing recognizable was found. Never raises.
    """
    found: dict[str, str] = {}
    for key, pattern in _SCRAPE_PATTERNS.items():
        match = pattern.search(text)
        if match:
            found[key] = match.group(1)
    if not found:
        return None

    parameters = {"topic": found["topic"]} if "topic" in found else {}
    return IntentAnalysis(
        intent=normalize_intent(found.get("intent")),
        parameters=parameters,
        requires_follow_up=True,
        follow_up_questions=[CLARIFY_QUESTION],
        best_approach=parse_best_approach(found.get("best_approach")),
        confidence=0.5,
        content_type=found.get("content_type"),
    )


def parse_intent_response(text: str) -> IntentAnalysis:
    """Strict JSON, then heuristic scrape, then the safe default."""
    data = extract_first_json_object(text)
    if data is not None:
        return analysis_from_json(data)

    scraped = parse_structured_response(text)
    if scraped is not None:
        logger.info("intent reply was not JSON, used key/value scrape")
        return scraped

    logger.warning("intent reply could not be parsed, using default analysis")
    return default_analysis()


def analysis_from_context(dialog_context: dict[str, Any]) -> IntentAnalysis:
    """Rebuild the previous turn's analysis from a dialog context."""
    parameters = dialog_context.get("parameters")
    return IntentAnalysis(
        intent=normalize_intent(dialog_context.get("intent")),
        parameters=normalize_parameters(parameters),
        requires_follow_up=False,
        best_approach=parse_best_approach(dialog_context.get("best_approach")),
    )


def merge_analyses(previous: IntentAnalysis, revised: IntentAnalysis) -> IntentAnalysis:
    """Overlay a revised analysis on the previous one.

    Parameters the new turn does not set keep their old value. An unknown
    revised intent keeps the previous intent and approach.
    """
    parameters = dict(previous.parameters)
    parameters.update({
        key: value for key, value in revised.parameters.items()
        if value is not None and value != ""
    })

    if revised.is_unknown and not previous.is_unknown:
        intent = previous.intent
        best_approach = previous.best_approach
    else:
        intent = revised.intent
        best_approach = revised.best_approach

    requires_follow_up = revised.requires_follow_up or intent == "unknown"
    questions = revised.follow_up_questions
    if requires_follow_up and not questions:
        questions = [CLARIFY_QUESTION]

    return IntentAnalysis(
        intent=intent,
        parameters=parameters,
        requires_follow_up=requires_follow_up,
        follow_up_questions=list(questions),
        best_approach=best_approach,
        confidence=revised.confidence,
        content_type=revised.content_type or previous.content_type,
    )


class IntentRecognizerAgent(BaseAgent):
    """Voice assistant agent that maps utterances to intents."""

    role = AgentRole.VOICE_ASSISTANT
    capabilities = frozenset({
        Capability.VOICE_RECOGNITION,
        Capability.INTENT_DETECTION,
        Capability.DIALOG_MANAGEMENT,
    })

    def __init__(self, agent_id: str = "voice-assistant-1", name: str = "Voice Assistant", **kwargs):
        super().__init__(agent_id, name, **kwargs)

    def recognize_intent(self, text: str, user_id: str, language_code: str) -> IntentAnalysis:
        """Classify an utterance.

        Args:
            text: Raw user input.
            user_id: Requesting user, for logging.
            language_code: Locale of the input, e.g. ``de-DE``.

        Raises:
            UpstreamGenerationError: If the text generator call fails.
        """
        prompt = INTENT_RECOGNITION_PROMPT.format(text=text, language_code=language_code)
        raw = self.generate(prompt, _RECOGNITION_OPTIONS)
        analysis = parse_intent_response(raw)
        logger.info(
            f"{self.id}: intent {analysis.intent} for user {user_id} "
            f"(confidence {analysis.confidence:.2f})"
        )
        return analysis

    def analyze_follow_up(
        self,
        initial_query: str,
        user_response: str,
        dialog_context: dict[str, Any] | None = None,
    ) -> IntentAnalysis:
        """Revise the previous analysis with the user's answer.

        Parameters present in ``dialog_context`` survive unless the new turn
        overrides them.
        """
        context = dialog_context or {}
        previous = analysis_from_context(context)
        prompt = FOLLOW_UP_ANALYSIS_PROMPT.format(
            initial_query=initial_query,
            intent=previous.intent,
            parameters=previous.parameters,
            best_approach=previous.best_approach.value,
            last_message=context.get("last_assistant_message", ""),
            user_response=user_response,
        )
        revised = parse_intent_response(self.generate(prompt, _RECOGNITION_OPTIONS))
        return merge_analyses(previous, revised)

    def generate_follow_up_response(self, analysis: IntentAnalysis, user_response: str) -> str:
        """Short acknowledgement for the user; falls back to a generic one."""
        question_hint = ""
        if analysis.requires_follow_up and analysis.follow_up_questions:
            question_hint = f" and ask: {analysis.follow_up_questions[0]}"
        prompt = FOLLOW_UP_RESPONSE_PROMPT.format(
            user_response=user_response,
            intent=analysis.intent,
            parameters=analysis.parameters,
            question_hint=question_hint,
        )
        try:
            text = self.generate(prompt, _RESPONSE_OPTIONS).strip()
        except AgentError as e:
            logger.warning(f"{self.id}: follow-up response failed, using acknowledgement: {e}")
            return GENERIC_ACKNOWLEDGEMENT
        return text or GENERIC_ACKNOWLEDGEMENT

    def answer_information_request(self, text: str) -> str:
        """Answer a searchInformation request directly."""
        return self.generate(INFORMATION_PROMPT.format(text=text), _RESPONSE_OPTIONS).strip()

    def process_voice_command(
        self,
        command: str,
        user_id: str = "anonymous",
        language_code: str = "de-DE",
    ) -> RecognitionResult:
        """Recognize a command and decide whether the manager must act.

        Raises:
            UpstreamGenerationError: If the text generator fails.
        """
        with self._tracked("voice-command"):
            return self._recognize_command(command, user_id, language_code)

    def process_follow_up(
        self,
        initial_query: str,
        user_response: str,
        dialog_context: dict[str, Any] | None = None,
    ) -> RecognitionResult:
        """Handle the user's answer to a follow-up question.

        The returned dialog context carries the revised intent and the turn
        appended to ``previous_interactions``.
        """
        with self._tracked("follow-up"):
            return self._follow_up(initial_query, user_response, dialog_context or {})

    def _recognize_command(self, command: str, user_id: str, language_code: str) -> RecognitionResult:
        analysis = self.recognize_intent(command, user_id, language_code)
        task_type = task_type_for_intent(analysis.intent)
        needs_coordination = self._needs_coordination(analysis, task_type)

        if needs_coordination:
            response = f"Working on your request ({analysis.intent})."
        elif task_type == TaskType.INFORMATION_RETRIEVAL and not analysis.requires_follow_up:
            response = self.answer_information_request(command) or GENERIC_ACKNOWLEDGEMENT
        elif analysis.requires_follow_up:
            response = analysis.follow_up_questions[0]
        else:
            response = self.generate_follow_up_response(analysis, command)

        return RecognitionResult(
            response=response,
            analysis=analysis,
            task_type=task_type,
            needs_manager_coordination=needs_coordination,
        )

    def _follow_up(
        self,
        initial_query: str,
        user_response: str,
        dialog_context: dict[str, Any],
    ) -> RecognitionResult:
        analysis = self.analyze_follow_up(initial_query, user_response, dialog_context)
        task_type = task_type_for_intent(analysis.intent)
        needs_coordination = self._needs_coordination(analysis, task_type)
        response = self.generate_follow_up_response(analysis, user_response)

        interactions = list(dialog_context.get("previous_interactions") or [])
        interactions.append({"user": user_response, "assistant": response})
        updated_context = {
            "intent": analysis.intent,
            "parameters": dict(analysis.parameters),
            "best_approach": analysis.best_approach.value,
            "previous_interactions": interactions,
            "last_assistant_message": response,
        }

        return RecognitionResult(
            response=response,
            analysis=analysis,
            task_type=task_type,
            needs_manager_coordination=needs_coordination,
            dialog_context=updated_context,
        )

    @staticmethod
    def _needs_coordination(analysis: IntentAnalysis, task_type: TaskType) -> bool:
        return task_type in COORDINATED_TASK_TYPES and not analysis.requires_follow_up

    @contextmanager
    def _tracked(self, label: str) -> Iterator[None]:
        """Status bookkeeping for the public entry points, which re-raise."""
        lifecycle.mark_busy(self.status, label)
        try:
            yield
        except Exception:
            lifecycle.mark_finished(self.status, success=False)
            raise
        lifecycle.mark_finished(self.status, success=True)

    def _run_task(self, task: Task) -> TaskResult:
        params = task.parameters
        if task.type == TaskType.PROCESS_VOICE_COMMAND:
            result = self._recognize_command(
                self.require(params, "command"),
                params.get("user_id", "anonymous"),
                params.get("language_code", "de-DE"),
            )
        elif task.type == TaskType.FOLLOW_UP_DIALOG:
            result = self._follow_up(
                self.require(params, "initial_query"),
                self.require(params, "user_response"),
                dict(params.get("dialog_context") or {}),
            )
        else:
            raise UnknownTaskTypeError(task.type.value)
        return TaskResult.ok(result.response)
