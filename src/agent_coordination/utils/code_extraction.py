"""Extraction of source code from generated text.

The extraction order is: fenced blocks tagged with the target language
(joined by a blank line), then a line heuristic keyed by each language's
leading tokens, then the raw text unchanged. Callers therefore always get
something displayable.
"""

import re

# fence tags accepted for each supported language
LANGUAGE_TAGS: dict[str, tuple[str, ...]] = {
    "python": ("python", "py"),
    "javascript": ("javascript", "js", "jsx"),
    "typescript": ("typescript", "ts", "tsx"),
    "r": ("r",),
    "html": ("html",),
    "css": ("css",),
}

_FENCE_PATTERN = re.compile(r"```([\w.+-]*)[^\n]*\n(.*?)```", re.DOTALL)

_CODE_LINE_PATTERNS: dict[str, re.Pattern] = {
    "python": re.compile(
        r"^\s*((import|from|def|class|if|elif|else|for|while|try|except|with|return|print)\b|@"
        r"|[a-zA-Z_][a-zA-Z0-9_.]*\s*=|[a-zA-Z_][a-zA-Z0-9_.]*\()"
    ),
    "javascript": re.compile(
        r"^\s*((import|export|const|let|var|function|class|if|for|while|try|catch|return)\b"
        r"|console\.|document\.|[a-zA-Z_$][a-zA-Z0-9_$.]*\s*=|[})\]];?\s*$)"
    ),
    "r": re.compile(
        r"^\s*((library|require|source|if|for|while|function|return|print)\b"
        r"|[a-zA-Z_.][a-zA-Z0-9_.]*\s*<-|<-)"
    ),
    "html": re.compile(r"^\s*</?[a-zA-Z!]"),
    "css": re.compile(r"^\s*([.#@:]?[a-zA-Z][\w\-\s,.#:>()\[\]=\"']*\{|\}|[a-z-]+\s*:\s*[^;]+;)"),
}
_CODE_LINE_PATTERNS["typescript"] = _CODE_LINE_PATTERNS["javascript"]


def extract_fenced_blocks(text: str, language: str, include_untagged: bool = True) -> list[str]:
    """Return the bodies of fenced blocks written in ``language``.

    Args:
        text: Generated text possibly containing markdown fences.
        language: Normalized target language.
        include_untagged: Whether blocks without a language tag count.

    Returns:
        Block bodies in order of appearance, stripped of surrounding blank lines.
    """
    tags = LANGUAGE_TAGS.get(language, (language,))
    blocks = []
    for match in _FENCE_PATTERN.finditer(text):
        tag = match.group(1).lower()
        if tag in tags or (include_untagged and not tag):
            blocks.append(match.group(2).strip("\n"))
    return blocks


def looks_like_code(line: str, language: str) -> bool:
    """Heuristically decide whether a single line is source code.

    Blank lines and ``#`` comments count as code so that they survive
    between code lines; whether anything was found is decided separately.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return True
    pattern = _CODE_LINE_PATTERNS.get(language)
    if pattern is None:
        return False
    return bool(pattern.match(line))


def extract_code(text: str, language: str) -> str:
    """Extract the code written in ``language`` from generated text.

    Args:
        text: Raw generator output.
        language: Normalized target language.

    Returns:
        The joined fenced blocks, else the lines that look like code,
        else ``text`` unchanged. Never an empty string for non-empty input.
    """
    blocks = extract_fenced_blocks(text, language)
    if blocks:
        return "\n\n".join(blocks)

    code_lines = [line for line in text.splitlines() if looks_like_code(line, language)]
    substantive = [
        line for line in code_lines
        if line.strip() and not line.strip().startswith("#")
    ]
    if substantive:
        return "\n".join(code_lines).strip("\n")

    return text


def extract_sections(text: str, languages: tuple[str, ...] = ("javascript", "typescript")) -> dict[str, str]:
    """Split ``## Name`` headed sections followed by a fenced block into a mapping.

    Used for multi-component answers such as dashboards. Returns an empty
    mapping when the answer is not organised that way.
    """
    tags = {tag for language in languages for tag in LANGUAGE_TAGS.get(language, (language,))}
    sections: dict[str, str] = {}
    pattern = re.compile(r"^##\s+([\w\- .]+?)\s*\n```([\w.+-]*)[^\n]*\n(.*?)```", re.DOTALL | re.MULTILINE)
    for match in pattern.finditer(text):
        tag = match.group(2).lower()
        if tag and tag not in tags:
            continue
        sections[match.group(1).strip()] = match.group(3).strip("\n")
    return sections
