"""Shared test fixtures and configuration."""

import json

import pytest
from unittest.mock import MagicMock

from agent_coordination.clients.base import BaseTextGenerator
from agent_coordination.config import Settings
from agent_coordination.storage import InMemoryStorage
from agent_coordination.system import MultiAgentSystem
from agent_coordination.types import GenerationOptions


class FakeTextGenerator(BaseTextGenerator):
    """Generator that replays scripted replies and records prompts.

    A scripted reply that is an exception instance is raised instead of
    returned. When the script runs out, ``default`` is returned.
    """

    def __init__(self, replies=None, default="ok"):
        super().__init__()
        self.replies = list(replies or [])
        self.default = default
        self.prompts: list[str] = []
        self.options: list[GenerationOptions | None] = []

    def generate(self, prompt, options=None):
        self.prompts.append(prompt)
        self.options.append(options)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return reply


def intent_reply(intent, parameters=None, requires_follow_up=False, questions=None,
                 best_approach="document", confidence=0.9):
    """Build a JSON intent recognition reply."""
    return json.dumps({
        "intent": intent,
        "parameters": parameters or {},
        "requiresFollowUp": requires_follow_up,
        "followUpQuestions": questions or [],
        "bestApproach": best_approach,
        "confidence": confidence,
    })


LEARNING_PLAN_REPLY = json.dumps({
    "description": "Digital rights for activists.",
    "modules": [
        {"title": "Basics", "description": "What digital rights are", "duration": "2 hours",
         "resources": ["Article"], "activities": ["Quiz"]},
        {"title": "Privacy", "description": "Protecting data", "duration": "3 hours",
         "resources": ["Guide"], "activities": ["Exercise"]},
    ],
})


@pytest.fixture
def settings():
    """Settings that ignore the environment and any .env file."""
    return Settings(_env_file=None, default_language="de", default_language_code="de-DE")


@pytest.fixture
def fake_generator():
    """A scripted generator with no replies queued."""
    return FakeTextGenerator()


@pytest.fixture
def mock_generator():
    """Create a mock text generator."""
    generator = MagicMock(spec=BaseTextGenerator)
    return generator


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def make_system(settings, storage):
    """Factory for initialized systems around a scripted generator."""
    def _make(replies=None, default="ok", observers=None, initialize=True):
        generator = FakeTextGenerator(replies, default=default)
        system = MultiAgentSystem(generator, storage=storage, observers=observers, settings=settings)
        if initialize:
            assert system.initialize("test-key")
        return system
    return _make
