"""Agents of the coordination core.

The manager routes work to the content and code generators; the intent
recognizer turns user input into structured intents.
"""

from .base import AgentMessage, BaseAgent
from .code_generator import CodeGeneratorAgent
from .content_generator import ContentGeneratorAgent
from .intent_recognizer import IntentRecognizerAgent
from .manager import ManagerAgent, determine_best_approach
from .registry import CapabilityRegistry

__all__ = [
    "AgentMessage",
    "BaseAgent",
    "CapabilityRegistry",
    "CodeGeneratorAgent",
    "ContentGeneratorAgent",
    "IntentRecognizerAgent",
    "ManagerAgent",
    "determine_best_approach",
]
