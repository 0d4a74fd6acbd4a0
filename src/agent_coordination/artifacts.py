"""Typed artifacts produced by the generator agents.

Every artifact carries a human-readable title and a creation timestamp
inside its metadata. Titles are derived from the request, never from the
generated text, so they stay reproducible across generator runs.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class DocumentMetadata:
    """Metadata attached to a generated document."""
    author: str
    tags: list[str]
    target_audience: str
    language: str
    category: str | None = None
    format: str | None = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class GeneratedDocument:
    """A markdown document authored by the content generator."""
    title: str
    content: str
    metadata: DocumentMetadata
    kind: str = field(default="document", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "content": self.content,
            "metadata": {
                "author": self.metadata.author,
                "created_at": self.metadata.created_at.isoformat(),
                "tags": list(self.metadata.tags),
                "target_audience": self.metadata.target_audience,
                "language": self.metadata.language,
                "category": self.metadata.category,
                "format": self.metadata.format,
            },
        }


@dataclass
class CodeMetadata:
    """Metadata attached to a generated code snippet."""
    purpose: str
    dependencies: list[str]
    author: str
    instructions: str | None = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class GeneratedCode:
    """A single-language code snippet (visualization or data analysis)."""
    language: str
    code: str
    title: str
    metadata: CodeMetadata
    kind: str = field(default="code", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "language": self.language,
            "code": self.code,
            "title": self.title,
            "metadata": {
                "purpose": self.metadata.purpose,
                "dependencies": list(self.metadata.dependencies),
                "author": self.metadata.author,
                "instructions": self.metadata.instructions,
                "created_at": self.metadata.created_at.isoformat(),
            },
        }


@dataclass
class LearningModule:
    """One module of a learning path."""
    title: str
    description: str
    duration: str
    resources: list[str] = field(default_factory=list)
    activities: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "resources": list(self.resources),
            "activities": list(self.activities),
        }


@dataclass
class LearningPathMetadata:
    """Metadata attached to a learning path."""
    difficulty: str
    time_to_complete: str
    prerequisites: list[str]
    author: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class LearningPath:
    """A structured course made of ordered modules."""
    title: str
    description: str
    modules: list[LearningModule]
    metadata: LearningPathMetadata
    kind: str = field(default="learning-path", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "description": self.description,
            "modules": [module.to_dict() for module in self.modules],
            "metadata": {
                "difficulty": self.metadata.difficulty,
                "time_to_complete": self.metadata.time_to_complete,
                "prerequisites": list(self.metadata.prerequisites),
                "author": self.metadata.author,
                "created_at": self.metadata.created_at.isoformat(),
            },
        }


@dataclass
class BundleMetadata:
    """Metadata shared by the multi-part code artifacts."""
    purpose: str
    author: str
    options: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "purpose": self.purpose,
            "author": self.author,
            "created_at": self.created_at.isoformat(),
            **self.options,
        }


@dataclass
class CodeBundle:
    """Base for the richer code artifacts.

    ``code`` is either a single source string or a mapping from part name
    (component, ``html``, ``css``, ``javascript``) to source.
    """
    title: str
    language: str
    code: dict[str, str] | str
    libraries: list[str]
    complexity: str
    metadata: BundleMetadata
    kind: str = field(default="bundle", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "language": self.language,
            "code": dict(self.code) if isinstance(self.code, dict) else self.code,
            "libraries": list(self.libraries),
            "complexity": self.complexity,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class Dashboard(CodeBundle):
    """Interactive dashboard split into named components."""
    kind: str = field(default="dashboard", init=False)


@dataclass
class Presentation(CodeBundle):
    """Slide deck rendered as reveal.js HTML or a React component."""
    format: str = "html"
    kind: str = field(default="presentation", init=False)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["format"] = self.format
        return data


@dataclass
class InteractiveMap(CodeBundle):
    """Leaflet map with separate html, css and javascript parts."""
    kind: str = field(default="map", init=False)


@dataclass
class HtmlPage(CodeBundle):
    """Standalone web page with separate html, css and javascript parts."""
    kind: str = field(default="html-page", init=False)


Artifact = Union[GeneratedDocument, GeneratedCode, LearningPath, CodeBundle]
