"""Content generator agent: documents and learning paths."""

import re
from typing import Any, Mapping

from ..artifacts import (
    DocumentMetadata,
    GeneratedDocument,
    LearningModule,
    LearningPath,
    LearningPathMetadata,
)
from ..exceptions import UnknownTaskTypeError
from ..logging import get_logger
from ..types import AgentRole, Capability, GenerationOptions, Task, TaskResult, TaskType
from ..utils.json_extraction import extract_first_json_object
from .base import BaseAgent
from .prompts import DOCUMENT_PROMPT, LEARNING_PATH_PROMPT

logger = get_logger(__name__)

AUTHOR = "Content Generator Agent"
DEFAULT_AUDIENCE = "human rights defenders"
DIFFICULTIES = ("beginner", "intermediate", "advanced")

_DOCUMENT_OPTIONS = GenerationOptions(temperature=0.7, max_output_tokens=2048)
_LEARNING_PATH_OPTIONS = GenerationOptions(temperature=0.5, max_output_tokens=2048)

_HOURS_PATTERN = re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:h\b|hours?|stunden?)", re.IGNORECASE)


def default_modules() -> list[LearningModule]:
    """Three-module skeleton used when the generator's plan is unusable."""
    return [
        LearningModule(
            title="Module 1: Foundations",
            description="Introduction to the core concepts.",
            duration="2 hours",
            resources=["Online article", "Introductory video"],
            activities=["Quiz", "Discussion questions"],
        ),
        LearningModule(
            title="Module 2: Application",
            description="Practical application of the concepts.",
            duration="3 hours",
            resources=["Case studies", "Examples from practice"],
            activities=["Group exercise", "Project work"],
        ),
        LearningModule(
            title="Module 3: Advanced topics",
            description="Deeper treatment of the concepts and extended use cases.",
            duration="4 hours",
            resources=["Specialist articles", "Expert interviews"],
            activities=["Case analysis", "Presentation"],
        ),
    ]


def total_duration(modules: list[LearningModule]) -> str:
    """Sum module durations written in hours, e.g. ``"9 hours"``."""
    total = 0.0
    for module in modules:
        match = _HOURS_PATTERN.search(module.duration)
        if match is None:
            return "unspecified"
        total += float(match.group(1).replace(",", "."))
    return f"{total:g} hours"


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if str(item).strip()]


def parse_modules(raw: Any) -> list[LearningModule]:
    """Read modules from the generator's JSON, skipping malformed entries."""
    if not isinstance(raw, list):
        return []
    modules = []
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("title"):
            continue
        modules.append(LearningModule(
            title=str(entry["title"]),
            description=str(entry.get("description", "")),
            duration=str(entry.get("duration", "unspecified")),
            resources=_string_list(entry.get("resources")),
            activities=_string_list(entry.get("activities")),
        ))
    return modules


class ContentGeneratorAgent(BaseAgent):
    """Writes documents and designs learning paths."""

    role = AgentRole.CONTENT_GENERATOR
    capabilities = frozenset({
        Capability.CONTENT_GENERATION,
        Capability.DOCUMENT_CREATION,
        Capability.LEARNING_PATH_DESIGN,
        Capability.MULTILINGUAL_CONTENT,
        Capability.CONTEXT_AWARE_WRITING,
    })

    def __init__(
        self,
        agent_id: str = "content-gen-1",
        name: str = "Content Generator",
        default_language: str = "de",
        **kwargs,
    ):
        super().__init__(agent_id, name, **kwargs)
        self.default_language = default_language

    def _run_task(self, task: Task) -> TaskResult:
        if task.type == TaskType.DOCUMENT_GENERATION:
            document = self.generate_document(task.parameters)
            return TaskResult.ok(f"Created the document '{document.title}'.", document)
        if task.type == TaskType.LEARNING_PATH_CREATION:
            path = self.create_learning_path(task.parameters)
            return TaskResult.ok(
                f"Created the learning path '{path.title}' with {len(path.modules)} modules.",
                path,
            )
        raise UnknownTaskTypeError(task.type.value)

    def generate_document(self, parameters: Mapping[str, Any]) -> GeneratedDocument:
        """Write a markdown document.

        Args:
            parameters: ``topic`` or ``intent`` (required), optional
                ``language``, ``target_audience`` and ``context``.

        Raises:
            ValidationError: If neither topic nor intent is given.
            UpstreamGenerationError: If the text generator fails.
        """
        subject = self.require(parameters, "topic", "intent")
        language = parameters.get("language") or self.default_language
        audience = parameters.get("target_audience") or DEFAULT_AUDIENCE

        prompt = DOCUMENT_PROMPT.format(
            subject=subject,
            target_audience=audience,
            language=language,
            context=parameters.get("context") or "none",
        )
        content = self.generate(prompt, _DOCUMENT_OPTIONS).strip()
        if not content:
            logger.warning(f"{self.id}: empty document body for '{subject}', using outline")
            content = f"# {subject}\n\n## Introduction\n\n## Main points\n\n## Conclusion\n"

        tags = ["auto-generated", "human-rights", subject.lower()]
        for tag in parameters.get("tags") or []:
            if str(tag).lower() not in tags:
                tags.append(str(tag).lower())

        return GeneratedDocument(
            title=f"Document: {subject}",
            content=content,
            metadata=DocumentMetadata(
                author=AUTHOR,
                tags=tags,
                target_audience=audience,
                language=language,
                category=parameters.get("category") or "report",
                format="markdown",
            ),
        )

    def create_learning_path(self, parameters: Mapping[str, Any]) -> LearningPath:
        """Design a learning path of ordered modules.

        Falls back to a three-module skeleton when the generator's answer
        contains no usable modules.

        Raises:
            ValidationError: If neither topic nor intent is given.
            UpstreamGenerationError: If the text generator fails.
        """
        subject = self.require(parameters, "topic", "intent")
        language = parameters.get("language") or self.default_language
        difficulty = str(parameters.get("difficulty") or "intermediate").lower()
        if difficulty not in DIFFICULTIES:
            logger.warning(f"{self.id}: unknown difficulty '{difficulty}', using intermediate")
            difficulty = "intermediate"

        prompt = LEARNING_PATH_PROMPT.format(subject=subject, difficulty=difficulty, language=language)
        plan = extract_first_json_object(self.generate(prompt, _LEARNING_PATH_OPTIONS)) or {}

        modules = parse_modules(plan.get("modules"))
        if not modules:
            logger.info(f"{self.id}: no modules in generated plan, using default outline")
            modules = default_modules()

        description = plan.get("description")
        if not isinstance(description, str) or not description.strip():
            description = f"A structured learning path on {subject}."

        return LearningPath(
            title=f"Learning path: {subject}",
            description=description,
            modules=modules,
            metadata=LearningPathMetadata(
                difficulty=difficulty,
                time_to_complete=total_duration(modules),
                prerequisites=["Basic knowledge of human rights"],
                author=AUTHOR,
            ),
        )
