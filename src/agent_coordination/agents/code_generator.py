"""Code generator agent.

Produces visualization and data analysis snippets, dashboards,
presentations, interactive maps and HTML pages. Requested languages and
libraries are normalized against fixed allow-lists before generation, so
a request always proceeds with some valid language.
"""

from typing import Any, Mapping

from ..artifacts import (
    BundleMetadata,
    CodeMetadata,
    Dashboard,
    GeneratedCode,
    HtmlPage,
    InteractiveMap,
    Presentation,
)
from ..exceptions import UnknownTaskTypeError
from ..logging import get_logger
from ..types import AgentRole, Capability, GenerationOptions, Task, TaskResult, TaskType
from ..utils.code_extraction import extract_code, extract_fenced_blocks, extract_sections
from .base import BaseAgent
from .prompts import (
    DASHBOARD_PROMPT,
    DATA_ANALYSIS_CODE_PROMPT,
    HTML_PAGE_PROMPT,
    MAP_PROMPT,
    PRESENTATION_PROMPT,
    VISUALIZATION_CODE_PROMPT,
)

logger = get_logger(__name__)

AUTHOR = "Code Generator Agent"

SUPPORTED_LANGUAGES = ("python", "javascript", "typescript", "r", "html", "css")

SUPPORTED_LIBRARIES: dict[str, tuple[str, ...]] = {
    "python": ("matplotlib", "seaborn", "plotly", "bokeh", "altair", "pandas", "numpy"),
    "javascript": ("d3.js", "chart.js", "plotly.js", "highcharts", "echarts", "leaflet", "mapbox"),
    "typescript": ("d3.js", "chart.js", "plotly.js", "highcharts", "echarts", "leaflet", "mapbox"),
    "r": ("ggplot2", "plotly", "lattice", "highcharter", "dplyr"),
    "html": ("bootstrap", "tailwind", "reveal.js", "impress.js"),
}

DEFAULT_LIBRARIES: dict[str, tuple[str, ...]] = {
    "python": ("matplotlib", "pandas", "numpy"),
    "javascript": ("d3.js", "chart.js"),
    "typescript": ("d3.js", "chart.js"),
    "r": ("ggplot2", "dplyr"),
}

DASHBOARD_LIBRARIES = ("react", "vue", "dash", "streamlit", "echarts", "d3.js")

_SNIPPET_OPTIONS = GenerationOptions(temperature=0.2, max_output_tokens=2048)
_DASHBOARD_OPTIONS = GenerationOptions(temperature=0.2, max_output_tokens=4096)
_PRESENTATION_OPTIONS = GenerationOptions(temperature=0.4, max_output_tokens=3500)
_WEB_OPTIONS = GenerationOptions(temperature=0.3, max_output_tokens=3000)


class CodeGeneratorAgent(BaseAgent):
    """Generates code artifacts through the text generator."""

    role = AgentRole.CODE_GENERATOR
    capabilities = frozenset({
        Capability.CODE_GENERATION,
        Capability.VISUALIZATION_CODE,
        Capability.DATA_ANALYSIS_CODE,
        Capability.INTERACTIVE_DASHBOARD,
        Capability.PRESENTATION_GENERATION,
        Capability.MAP_GENERATION,
        Capability.HTML_PAGE_GENERATION,
    })

    def __init__(self, agent_id: str = "code-gen-1", name: str = "Code Generator", **kwargs):
        super().__init__(agent_id, name, **kwargs)
        self._handlers = {
            TaskType.GENERATE_VISUALIZATION_CODE: self.generate_visualization_code,
            TaskType.GENERATE_DATA_ANALYSIS_CODE: self.generate_data_analysis_code,
            TaskType.GENERATE_INTERACTIVE_DASHBOARD: self.generate_dashboard,
            TaskType.GENERATE_PRESENTATION: self.generate_presentation,
            TaskType.GENERATE_MAP: self.generate_map,
            TaskType.GENERATE_HTML_PAGE: self.generate_html_page,
        }

    def _run_task(self, task: Task) -> TaskResult:
        handler = self._handlers.get(task.type)
        if handler is None:
            raise UnknownTaskTypeError(task.type.value)
        artifact = handler(task.parameters)
        return TaskResult.ok(f"Generated '{artifact.title}'.", artifact)

    # ==================== validation ====================

    def validate_language(self, language: str | None) -> str:
        """Normalize a language name, falling back to python with a warning."""
        normalized = (language or "").strip().lower()
        if normalized in SUPPORTED_LANGUAGES:
            return normalized
        logger.warning(f"{self.id}: unsupported language '{language}', falling back to python")
        return "python"

    def validate_libraries(self, language: str, requested: list[str] | str | None) -> list[str]:
        """Keep only allow-listed libraries; substitute defaults when none were requested.

        A single library name may be passed as a plain string. Entries that
        are not strings are dropped.
        """
        if isinstance(requested, str):
            requested = [requested]
        names = [lib.strip() for lib in requested or [] if isinstance(lib, str) and lib.strip()]
        if not names:
            return list(DEFAULT_LIBRARIES.get(language, ()))

        allowed = SUPPORTED_LIBRARIES.get(language, ())
        libraries = [lib for lib in names if lib.lower() in allowed]
        dropped = [lib for lib in names if lib.lower() not in allowed]
        if dropped:
            logger.warning(f"{self.id}: dropped unsupported {language} libraries {dropped}")
        return [lib.lower() for lib in libraries]

    # ==================== snippets ====================

    def generate_visualization_code(self, parameters: Mapping[str, Any]) -> GeneratedCode:
        """Generate a chart in the requested language.

        Args:
            parameters: ``purpose`` (required), optional ``language``,
                ``libraries``, ``data_format``, ``data_source`` and ``complexity``.
        """
        return self._generate_snippet(parameters, "Visualization", VISUALIZATION_CODE_PROMPT)

    def generate_data_analysis_code(self, parameters: Mapping[str, Any]) -> GeneratedCode:
        """Generate a data analysis script in the requested language."""
        return self._generate_snippet(parameters, "Data analysis", DATA_ANALYSIS_CODE_PROMPT)

    def _generate_snippet(self, parameters: Mapping[str, Any], label: str, template: str) -> GeneratedCode:
        purpose = self.require(parameters, "purpose", "topic")
        language = self.validate_language(parameters.get("language"))
        libraries = self.validate_libraries(language, parameters.get("libraries"))
        data_format = parameters.get("data_format") or "csv"

        prompt = template.format(
            language=language,
            purpose=purpose,
            data_description=_describe_data(parameters, data_format),
            analysis_steps=parameters.get("analysis_steps") or "choose suitable steps",
            libraries=", ".join(libraries) or "standard library only",
        )
        code = extract_code(self.generate(prompt, _SNIPPET_OPTIONS), language)

        return GeneratedCode(
            language=language,
            code=code,
            title=f"{label}: {purpose}",
            metadata=CodeMetadata(
                purpose=purpose,
                dependencies=libraries,
                author=AUTHOR,
                instructions=_run_instructions(language, libraries),
            ),
        )

    # ==================== bundles ====================

    def generate_dashboard(self, parameters: Mapping[str, Any]) -> Dashboard:
        """Generate a dashboard split into named components.

        The language is typescript when requested, javascript otherwise.
        """
        purpose = self.require(parameters, "purpose", "topic")
        language = "typescript" if parameters.get("language") == "typescript" else "javascript"
        requested = parameters.get("libraries")
        libraries = [lib for lib in DASHBOARD_LIBRARIES if not requested or lib in requested]
        complexity = parameters.get("complexity") or "medium"

        prompt = DASHBOARD_PROMPT.format(
            language=language,
            purpose=purpose,
            data_description=_describe_data(parameters, parameters.get("data_format") or "json"),
            libraries=", ".join(libraries),
            complexity=complexity,
        )
        raw = self.generate(prompt, _DASHBOARD_OPTIONS)
        components = extract_sections(raw, (language,)) or {"Dashboard": extract_code(raw, language)}

        return Dashboard(
            title=f"Dashboard: {purpose}",
            language=language,
            code=components,
            libraries=libraries,
            complexity=complexity,
            metadata=BundleMetadata(purpose=purpose, author=AUTHOR),
        )

    def generate_presentation(self, parameters: Mapping[str, Any]) -> Presentation:
        """Generate a reveal.js HTML deck or a React presentation component."""
        topic = self.require(parameters, "topic", "purpose")
        presentation_format = "react" if parameters.get("format") == "react" else "html"
        if presentation_format == "react":
            language = "typescript"
            libraries = ["react", "@radix-ui/react-tabs", "framer-motion"]
            format_description = "a React component in TypeScript using @radix-ui/react-tabs and framer-motion"
        else:
            language = "html"
            libraries = ["reveal.js"]
            format_description = "an HTML page with CSS using reveal.js"

        target_audience = parameters.get("target_audience") or "human rights defenders"
        style_type = parameters.get("style_type") or "modern"
        complexity = parameters.get("complexity") or "medium"

        prompt = PRESENTATION_PROMPT.format(
            format_description=format_description,
            topic=topic,
            target_audience=target_audience,
            style_type=style_type,
            slide_count=parameters.get("slide_count") or "7 to 9",
            complexity=complexity,
        )
        code = extract_code(self.generate(prompt, _PRESENTATION_OPTIONS), language)

        return Presentation(
            title=f"Presentation: {topic}",
            language=language,
            code=code,
            libraries=libraries,
            complexity=complexity,
            format=presentation_format,
            metadata=BundleMetadata(
                purpose=topic,
                author=AUTHOR,
                options={"target_audience": target_audience, "style_type": style_type},
            ),
        )

    def generate_map(self, parameters: Mapping[str, Any]) -> InteractiveMap:
        """Generate a Leaflet map as separate html, css and javascript parts."""
        purpose = self.require(parameters, "purpose", "topic")
        map_type = parameters.get("map_type") or "world"
        data_type = parameters.get("data_type") or "heatmap"
        region = parameters.get("region") or ""
        complexity = parameters.get("complexity") or "medium"

        prompt = MAP_PROMPT.format(
            purpose=purpose,
            map_type=map_type,
            region=region or "none",
            data_type=data_type,
            complexity=complexity,
        )
        raw = self.generate(prompt, _WEB_OPTIONS)

        return InteractiveMap(
            title=f"Interactive map: {purpose}",
            language="javascript",
            code=_web_parts(raw, include_js=True),
            libraries=["leaflet"],
            complexity=complexity,
            metadata=BundleMetadata(
                purpose=purpose,
                author=AUTHOR,
                options={"map_type": map_type, "data_type": data_type, "region": region},
            ),
        )

    def generate_html_page(self, parameters: Mapping[str, Any]) -> HtmlPage:
        """Generate a standalone web page as separate html, css and javascript parts."""
        topic = self.require(parameters, "topic", "purpose")
        page_type = parameters.get("page_type") or "information"
        style_framework = parameters.get("style_framework") or "bootstrap"
        complexity = parameters.get("complexity") or "medium"
        include_js = parameters.get("include_js", True) is not False

        prompt = HTML_PAGE_PROMPT.format(
            topic=topic,
            page_type=page_type,
            style_framework=style_framework,
            complexity=complexity,
            include_js="yes" if include_js else "no",
            js_hint=" and ```javascript" if include_js else "",
        )
        raw = self.generate(prompt, _WEB_OPTIONS)
        libraries = [style_framework] if style_framework in SUPPORTED_LIBRARIES["html"] else []

        return HtmlPage(
            title=f"HTML page: {topic}",
            language="html",
            code=_web_parts(raw, include_js=include_js),
            libraries=libraries,
            complexity=complexity,
            metadata=BundleMetadata(
                purpose=topic,
                author=AUTHOR,
                options={"page_type": page_type, "style_framework": style_framework},
            ),
        )


def _describe_data(parameters: Mapping[str, Any], data_format: str) -> str:
    source = parameters.get("data_source")
    return f"{data_format} data from {source}" if source else f"{data_format} data"


def _run_instructions(language: str, libraries: list[str]) -> str | None:
    if language == "python" and libraries:
        return f"pip install {' '.join(libraries)}"
    if language == "r" and libraries:
        packages = ", ".join(f'"{lib}"' for lib in libraries)
        return f"install.packages(c({packages}))"
    return None


def _web_parts(raw: str, include_js: bool) -> dict[str, str]:
    """Split an answer into html, css and javascript parts.

    The html part falls back to the whole answer; css and javascript only
    come from explicitly tagged blocks.
    """
    return {
        "html": extract_code(raw, "html"),
        "css": "\n\n".join(extract_fenced_blocks(raw, "css", include_untagged=False)),
        "javascript": (
            "\n\n".join(extract_fenced_blocks(raw, "javascript", include_untagged=False))
            if include_js else ""
        ),
    }
