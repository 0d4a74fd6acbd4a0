"""Tests for logging setup and workflow tagging."""

import logging

import pytest

from agent_coordination.logging import (
    PACKAGE_LOGGER,
    WorkflowIdFilter,
    current_workflow_id,
    setup_logging,
    workflow_context,
)

from conftest import FakeTextGenerator, intent_reply


@pytest.fixture
def package_logger():
    """Reset the package logger around a test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    logger.handlers = []
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def make_record():
    return logging.LogRecord("agent_coordination.test", logging.INFO, __file__, 1, "hello", None, None)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_env_var_level(self, package_logger, monkeypatch):
        monkeypatch.setenv("AGENT_COORDINATION_LOG_LEVEL", "debug")
        assert setup_logging().level == logging.DEBUG

    def test_flag_beats_env_var(self, package_logger, monkeypatch):
        monkeypatch.setenv("AGENT_COORDINATION_LOG_LEVEL", "DEBUG")
        assert setup_logging("error").level == logging.ERROR

    def test_invalid_level_falls_back(self, package_logger, capsys):
        assert setup_logging("chatty").level == logging.WARNING
        assert "Invalid log level" in capsys.readouterr().err

    def test_handler_added_once(self, package_logger):
        setup_logging("INFO")
        logger = setup_logging("DEBUG")
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.DEBUG


class TestWorkflowContext:
    """Tests for workflow id tagging."""

    def test_filter_outside_workflow(self):
        record = make_record()
        assert WorkflowIdFilter().filter(record)
        assert record.workflow_id == "-"

    def test_context_is_scoped(self):
        with workflow_context("wf-1"):
            record = make_record()
            WorkflowIdFilter().filter(record)
            assert record.workflow_id == "wf-1"
            with workflow_context("wf-2"):
                assert current_workflow_id() == "wf-2"
            assert current_workflow_id() == "wf-1"
        assert current_workflow_id() is None

    def test_agents_run_under_the_workflow_id(self, make_system):
        """Test that generator calls happen inside the workflow's context."""
        seen = []

        class TaggingGenerator(FakeTextGenerator):
            def generate(self, prompt, options=None):
                seen.append(current_workflow_id())
                return super().generate(prompt, options)

        system = make_system()
        generator = TaggingGenerator([intent_reply("createDocument", {"topic": "Privacy"}), "# Privacy"])
        for agent in system.agents:
            agent.generator = generator

        result = system.process_voice_command("Write about privacy")
        assert len(seen) >= 2
        assert set(seen) == {result.workflow_id}
        assert current_workflow_id() is None
